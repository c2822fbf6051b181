"""Recovery agents - turn the last failure into retry guidance for the next attempt."""

import structlog

from sageql.domain.entities.query_state import WorkflowState
from sageql.domain.ports.query import RetryPromptFormatter

log = structlog.get_logger(__name__)


async def _recover(state: WorkflowState, formatter: RetryPromptFormatter, kind: str) -> WorkflowState:
    errors = list(state.get("validation_errors") or [])
    prompt = formatter(errors, state.get("current_query") or "", state.get("schema_context"))
    log.info(
        "retry_scheduled",
        kind=kind,
        attempt=state.get("retry_count", 0) + 1,
        error_count=len(errors),
    )
    # Only the new turn: the append reducer concatenates it to the log
    return {"messages": [prompt], "retry_count": 1}


async def handle_validation_error_node(
    state: WorkflowState,
    formatter: RetryPromptFormatter,
) -> WorkflowState:
    """Append validation retry guidance and count one retry."""
    return await _recover(state, formatter, "validation")


async def handle_execution_error_node(
    state: WorkflowState,
    formatter: RetryPromptFormatter,
) -> WorkflowState:
    """Append execution retry guidance (first error is the message) and count one retry."""
    return await _recover(state, formatter, "execution")
