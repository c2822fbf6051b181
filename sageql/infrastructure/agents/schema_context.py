"""Schema context agent - grounds generation in the relevant slice of the schema."""

import structlog

from sageql.domain.entities.query_state import WorkflowState, latest_message
from sageql.domain.entities.schema_context import LookupRequest, SearchLookup, TypeLookup
from sageql.domain.ports.query import SchemaIndexPort
from sageql.domain.services.schema_index import DEFAULT_QUERY_TYPE

log = structlog.get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 5


async def schema_context_node(
    state: WorkflowState,
    schema_index: SchemaIndexPort,
    search_limit: int = DEFAULT_SEARCH_LIMIT,
) -> WorkflowState:
    """Look up the declared root query type plus a search seeded by the latest message.

    On index failure one error is recorded and schema_context is left as it was;
    the run still moves on to generation.
    """
    try:
        requests: list[LookupRequest] = [
            TypeLookup(id=schema_index.query_type_name or DEFAULT_QUERY_TYPE),
            SearchLookup(query=latest_message(state), limit=search_limit),
        ]
        context = schema_index.lookup(requests)
    except Exception as e:  # noqa: BLE001
        log.error("schema_context_failed", error=str(e))
        return {"validation_errors": [f"Failed to generate schema context: {e}"]}

    log.debug(
        "schema_context_generated",
        types_count=len(context.types),
        fields_count=len(context.fields),
        related_types=sorted(context.related_types),
    )
    return {"schema_context": context}
