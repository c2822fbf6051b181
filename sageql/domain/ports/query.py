"""Query capability ports - what the workflow core consumes."""

from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import BaseModel

from sageql.domain.entities.schema_context import LookupRequest, SchemaContextResult


class GeneratedQuery(BaseModel):
    """Candidate query from the generator plus any problems it reported."""

    query: str = ""
    errors: list[str] = []


class GraphQLErrorDetail(BaseModel):
    """One entry of a GraphQL response ``errors`` list."""

    message: str
    locations: list[dict[str, int]] | None = None
    path: list[str | int] | None = None
    extensions: dict[str, Any] | None = None


class GraphQLResponse(BaseModel):
    """API response shape: ``data`` and/or ``errors``."""

    data: Any = None
    errors: list[GraphQLErrorDetail] | None = None

    @property
    def failed(self) -> bool:
        return bool(self.errors)


class QueryGeneratorPort(Protocol):
    """Natural language -> query text."""

    async def generate(
        self,
        intent: str,
        raw_schema: dict[str, Any],
        schema_context: SchemaContextResult | None,
    ) -> GeneratedQuery:
        ...


class QueryValidatorPort(Protocol):
    """Structural check of a query against a schema. Empty list means valid."""

    async def validate(self, query: str, schema: dict[str, Any]) -> list[str]:
        ...


class QueryExecutorPort(Protocol):
    """Runs a query against the target API."""

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> GraphQLResponse:
        ...


class SchemaIndexPort(Protocol):
    """Batch schema lookups."""

    @property
    def query_type_name(self) -> str:
        """Root query type declared by the schema."""
        ...

    def lookup(self, requests: Iterable[LookupRequest]) -> SchemaContextResult:
        ...


class RetryPromptFormatter(Protocol):
    """Pure text rendering of retry guidance."""

    def __call__(
        self,
        errors: list[str],
        failed_query: str,
        schema_context: SchemaContextResult | None,
    ) -> str:
        ...
