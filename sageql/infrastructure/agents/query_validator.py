"""Validator agent - checks the candidate query against the raw schema."""

import structlog

from sageql.domain.entities.query_state import WorkflowState
from sageql.domain.ports.query import QueryValidatorPort

log = structlog.get_logger(__name__)

NO_QUERY_MESSAGE = "No query was generated"


async def validate_query_node(
    state: WorkflowState,
    validator: QueryValidatorPort,
) -> WorkflowState:
    """Validate current_query. Empty validation_errors means the query passed."""
    query = state.get("current_query") or ""
    if not query.strip():
        # Keep what the generator reported, if anything
        return {"validation_errors": list(state.get("validation_errors") or []) or [NO_QUERY_MESSAGE]}

    errors = await validator.validate(query, state.get("schema") or {})
    log.debug("query_validated", error_count=len(errors))
    return {"validation_errors": list(errors)}
