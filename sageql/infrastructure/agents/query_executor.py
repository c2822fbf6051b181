"""Executor agent - runs the validated query against the API."""

import structlog

from sageql.domain.entities.query_state import WorkflowState
from sageql.domain.ports.query import QueryExecutorPort

log = structlog.get_logger(__name__)


async def execute_query_node(
    state: WorkflowState,
    executor: QueryExecutorPort,
) -> WorkflowState:
    """Execute current_query. Failures share the validation_errors channel."""
    try:
        response = await executor.execute(state.get("current_query") or "")
    except Exception as e:  # noqa: BLE001
        log.warning("query_execution_failed", error=str(e))
        return {"validation_errors": [str(e) or type(e).__name__]}

    if response.failed:
        messages = "; ".join(err.message for err in response.errors or [])
        log.warning("query_execution_errors", errors=messages)
        return {"validation_errors": [f"GraphQL errors: {messages}"]}

    log.info("query_executed")
    data = response.data if response.data is not None else {}
    return {"execution_result": data, "validation_errors": []}
