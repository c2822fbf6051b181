"""Query validator - structural checks with graphql-core."""

import asyncio
import logging
from typing import Any

from graphql import GraphQLError, GraphQLSchema, build_client_schema, parse, validate

from sageql.domain.errors import QueryValidationError

logger = logging.getLogger(__name__)


def format_graphql_error(error: GraphQLError) -> str:
    """Message with 1-based line:column locations appended."""
    if not error.locations:
        return error.message
    where = ", ".join(f"line {loc.line}, column {loc.column}" for loc in error.locations)
    return f"{error.message} ({where})"


def _build_schema(schema: dict[str, Any]) -> GraphQLSchema:
    if not isinstance(schema, dict) or "__schema" not in schema:
        raise QueryValidationError("Cannot validate: schema has no __schema root")
    try:
        return build_client_schema(schema)
    except (TypeError, KeyError, GraphQLError) as e:
        raise QueryValidationError(f"Cannot build schema from introspection: {e}") from e


def validate_query_sync(query: str, schema: dict[str, Any]) -> list[str]:
    """Parse and validate. Returns error messages; empty list means valid."""
    if not query or not query.strip():
        return ["Query is empty"]
    graphql_schema = _build_schema(schema)
    try:
        document = parse(query)
    except GraphQLError as e:
        return [format_graphql_error(e)]
    return [format_graphql_error(e) for e in validate(graphql_schema, document)]


class GraphQLSchemaValidator:
    """Implements QueryValidatorPort. Runs off the event loop."""

    async def validate(self, query: str, schema: dict[str, Any]) -> list[str]:
        errors = await asyncio.to_thread(validate_query_sync, query, schema)
        if errors:
            logger.debug("Query validation found %d error(s)", len(errors))
        return errors
