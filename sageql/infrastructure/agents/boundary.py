"""Node boundary - no exception leaves a workflow node."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from sageql.domain.entities.query_state import WorkflowState
from sageql.domain.entities.workflow_events import WorkflowStep
from sageql.domain.errors import SageQLError

log = structlog.get_logger(__name__)

CANCELLED_MESSAGE = "Workflow cancelled"

NodeFn = Callable[[WorkflowState], Awaitable[WorkflowState]]


def describe_failure(step: WorkflowStep, error: Exception) -> str:
    """Single error string for the validation_errors channel."""
    if isinstance(error, SageQLError):
        return str(error)
    return f"{step.value} failed: {type(error).__name__}: {error}"


def guarded(
    step: WorkflowStep,
    node: NodeFn,
    cancel_event: asyncio.Event | None = None,
) -> NodeFn:
    """Wrap a node so cancellation is checked first and failures become data."""

    async def run(state: WorkflowState) -> WorkflowState:
        if cancel_event is not None and cancel_event.is_set():
            log.info("node_skipped_cancelled", step=step.value)
            return {"validation_errors": [CANCELLED_MESSAGE], "cancelled": True}
        log.debug("node_start", step=step.value, retry_count=state.get("retry_count", 0))
        try:
            return await node(state)
        except Exception as e:  # noqa: BLE001
            log.warning("node_failed", step=step.value, error=str(e), exc_info=True)
            return {"validation_errors": [describe_failure(step, e)]}

    run.__name__ = step.value
    run.__qualname__ = step.value
    return run
