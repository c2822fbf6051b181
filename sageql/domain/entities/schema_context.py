"""Schema lookup requests and the aggregated context they produce."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_serializer


class TypeLookup(BaseModel):
    """Resolve a single type by name."""

    lookup: Literal["type"] = "type"
    id: str = Field(..., min_length=1)


class SearchLookup(BaseModel):
    """Relevance search over type and field names/descriptions."""

    lookup: Literal["search"] = "search"
    query: str
    limit: int = Field(5, ge=1, le=100)


LookupRequest = Annotated[Union[TypeLookup, SearchLookup], Field(discriminator="lookup")]

lookup_requests_adapter = TypeAdapter(list[LookupRequest])


class SchemaContextResult(BaseModel):
    """Relevance subset of a schema touched by one batch of lookups."""

    types: dict[str, dict[str, Any]] = {}
    fields: dict[str, dict[str, Any]] = {}  # "Type.field" -> field definition
    related_types: set[str] = set()

    @field_serializer("related_types")
    def _serialize_related(self, value: set[str]) -> list[str]:
        return sorted(value)

    def is_empty(self) -> bool:
        return not self.types and not self.fields
