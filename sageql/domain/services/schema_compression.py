"""Schema compression - shrink an introspection result for lookups and prompts."""

from typing import Any

from sageql.domain.services.schema_index import ROOT_MARKER

_ROOT_OPERATIONS = ("queryType", "mutationType", "subscriptionType")


def _prune(value: Any) -> Any:
    """Drop None, empty containers and non-deprecation markers recursively."""
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            if key == "isDeprecated" and item is False:
                continue
            item = _prune(item)
            if item is None or item == [] or item == {}:
                continue
            pruned[key] = item
        return pruned
    if isinstance(value, list):
        return [_prune(item) for item in value]
    return value


def unwrap_introspection(blob: Any) -> Any:
    """Strip a GraphQL response envelope: ``{"data": {"__schema": ...}}`` -> ``{"__schema": ...}``.

    Anything else is returned as is.
    """
    if isinstance(blob, dict) and ROOT_MARKER not in blob:
        data = blob.get("data")
        if isinstance(data, dict) and ROOT_MARKER in data:
            return data
    return blob


def compress_schema(raw: Any) -> Any:
    """Keep only user-facing types and their members under the ``__schema`` root.

    Built-in ``__*`` introspection types and directives are dropped. Blobs
    without a ``__schema`` root are returned untouched; the index rejects them.
    """
    root = raw.get(ROOT_MARKER) if isinstance(raw, dict) else None
    if not isinstance(root, dict):
        return raw

    compressed: dict[str, Any] = {}
    for key in _ROOT_OPERATIONS:
        operation = root.get(key)
        if operation and operation.get("name"):
            compressed[key] = {"name": operation["name"]}
    compressed["types"] = [
        _prune(type_def)
        for type_def in root.get("types") or []
        if isinstance(type_def, dict)
        and type_def.get("name")
        and not type_def["name"].startswith("__")
    ]
    return {ROOT_MARKER: compressed}


def root_operation_types(schema: Any) -> dict[str, str]:
    """Map of operation kind ("query", "mutation", ...) to its root type name."""
    root = schema.get(ROOT_MARKER) if isinstance(schema, dict) else None
    if not isinstance(root, dict):
        return {}
    found = {}
    for key in _ROOT_OPERATIONS:
        operation = root.get(key) or {}
        if operation.get("name"):
            found[key.removesuffix("Type")] = operation["name"]
    return found
