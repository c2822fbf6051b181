"""Schema context index - relevance-bounded subsets of a compressed schema.

The index wraps one introspection-shaped blob (``{"__schema": {...}}``) and
answers batches of lookups with a single aggregated ``SchemaContextResult``.
Search entries are tokenized once per index and kept sorted by key, so
identical ``(schema, requests)`` pairs always produce identical results.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sageql.domain.entities.schema_context import (
    LookupRequest,
    SchemaContextResult,
    SearchLookup,
    TypeLookup,
)
from sageql.domain.errors import SchemaLookupError

ROOT_MARKER = "__schema"
DEFAULT_QUERY_TYPE = "Query"

NAME_WEIGHT = 3
DESCRIPTION_WEIGHT = 1

STOP_WORDS = frozenset(
    {
        "a", "all", "an", "and", "are", "by", "for", "from", "get", "give", "how",
        "in", "is", "list", "me", "my", "of", "on", "or", "show", "the", "their",
        "to", "what", "which", "with",
    }
)

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_WORD_RE = re.compile(r"[a-z0-9]+")


def _normalize(token: str) -> str:
    """Crude singular form so "users" matches "User"."""
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def tokenize(text: str | None) -> frozenset[str]:
    """Split identifiers and prose into normalized search terms."""
    if not text:
        return frozenset()
    spaced = _CAMEL_BOUNDARY_RE.sub(" ", text).lower()
    return frozenset(
        _normalize(word)
        for word in _WORD_RE.findall(spaced)
        if len(word) > 1 and word not in STOP_WORDS
    )


def named_type(type_ref: dict[str, Any] | None) -> str | None:
    """Unwrap NON_NULL/LIST wrappers down to the named type."""
    ref = type_ref
    while ref:
        if ref.get("name"):
            return ref["name"]
        ref = ref.get("ofType")
    return None


def related_type_names(type_def: dict[str, Any]) -> set[str]:
    """Type itself plus every named type its members reference."""
    names = {type_def["name"]}
    for member in (type_def.get("fields") or []) + (type_def.get("inputFields") or []):
        names.add(named_type(member.get("type")))
        for arg in member.get("args") or []:
            names.add(named_type(arg.get("type")))
    for ref in (type_def.get("interfaces") or []) + (type_def.get("possibleTypes") or []):
        names.add(named_type(ref))
    names.discard(None)
    return names  # type: ignore[return-value]


@dataclass(frozen=True)
class _SearchEntry:
    key: str  # "Type" or "Type.field"
    parent: str
    definition: dict[str, Any]
    name_tokens: frozenset[str]
    description_tokens: frozenset[str]
    is_field: bool

    def score(self, terms: frozenset[str]) -> int:
        return NAME_WEIGHT * len(terms & self.name_tokens) + DESCRIPTION_WEIGHT * len(
            terms & self.description_tokens
        )


class SchemaContextIndex:
    """Value-holding lookup capability over one schema blob."""

    def __init__(self, schema: Any) -> None:
        self._schema = schema
        self._types: dict[str, dict[str, Any]] | None = None
        self._entries: list[_SearchEntry] | None = None

    def _root(self) -> dict[str, Any]:
        root = self._schema.get(ROOT_MARKER) if isinstance(self._schema, dict) else None
        if not isinstance(root, dict):
            raise SchemaLookupError(f"Invalid schema: missing {ROOT_MARKER} property")
        return root

    def _type_map(self) -> dict[str, dict[str, Any]]:
        root = self._root()
        if self._types is None:
            self._types = {
                t["name"]: t
                for t in root.get("types") or []
                if isinstance(t, dict) and t.get("name")
            }
        return self._types

    def _search_entries(self) -> list[_SearchEntry]:
        if self._entries is not None:
            return self._entries
        entries: list[_SearchEntry] = []
        for type_name, type_def in self._type_map().items():
            if type_name.startswith("__"):
                continue
            entries.append(
                _SearchEntry(
                    key=type_name,
                    parent=type_name,
                    definition=type_def,
                    name_tokens=tokenize(type_name),
                    description_tokens=tokenize(type_def.get("description")),
                    is_field=False,
                )
            )
            members = (type_def.get("fields") or []) + (type_def.get("inputFields") or [])
            for field in members:
                if not field.get("name"):
                    continue
                entries.append(
                    _SearchEntry(
                        key=f"{type_name}.{field['name']}",
                        parent=type_name,
                        definition=field,
                        name_tokens=tokenize(field["name"]),
                        description_tokens=tokenize(field.get("description")),
                        is_field=True,
                    )
                )
        entries.sort(key=lambda e: e.key)
        self._entries = entries
        return entries

    @property
    def query_type_name(self) -> str:
        """Root query type name declared by the schema (``Query`` if unspecified)."""
        query_type = self._root().get("queryType") or {}
        return query_type.get("name") or DEFAULT_QUERY_TYPE

    def lookup(self, requests: Iterable[LookupRequest]) -> SchemaContextResult:
        """Resolve a batch of lookups into one aggregate.

        Raises:
            SchemaLookupError: schema blob has no ``__schema`` root. Checked
                before any request is processed, so no partial result is built.
        """
        self._type_map()
        result = SchemaContextResult()
        for request in requests:
            if isinstance(request, TypeLookup):
                self._lookup_type(request.id, result)
            elif isinstance(request, SearchLookup):
                self._search(request.query, request.limit, result)
            else:
                raise SchemaLookupError(f"Unsupported lookup request: {request!r}")
        return result

    def _lookup_type(self, type_name: str, result: SchemaContextResult) -> None:
        type_def = self._type_map().get(type_name)
        if type_def is None:
            return
        result.types[type_name] = type_def
        result.related_types |= related_type_names(type_def)

    def _search(self, query: str, limit: int, result: SchemaContextResult) -> None:
        terms = tokenize(query)
        if not terms:
            return
        scored = [
            (score, entry)
            for entry in self._search_entries()
            if (score := entry.score(terms)) > 0
        ]
        scored.sort(key=lambda pair: (-pair[0], pair[1].key))
        for _, entry in scored[:limit]:
            if entry.is_field:
                result.fields[entry.key] = entry.definition
                result.related_types.add(entry.parent)
                field_type = named_type(entry.definition.get("type"))
                if field_type:
                    result.related_types.add(field_type)
            else:
                result.types[entry.key] = entry.definition
                result.related_types |= related_type_names(entry.definition)
