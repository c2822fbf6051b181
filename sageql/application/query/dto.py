"""Query workflow DTOs."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sageql.domain.entities.query_state import WorkflowState, max_retries_of
from sageql.domain.entities.workflow_events import WorkflowOutcome
from sageql.domain.errors import RetryExhausted, SageQLError


class QueryRequest(BaseModel):
    """Request to turn an intent into an executed query."""

    model_config = ConfigDict(populate_by_name=True)

    intent: str = Field(..., min_length=1, max_length=20_000)
    # Raw introspection result; the configured schema file is used when omitted
    graphql_schema: dict[str, Any] | None = Field(None, alias="schema")
    run_id: str | None = Field(None, max_length=100)  # Log correlation; auto-generated if omitted


class QueryResponse(BaseModel):
    """Final state of a run, as seen by the caller."""

    run_id: str
    outcome: WorkflowOutcome
    query: str | None = None
    result: Any = None
    errors: list[str] = []
    retry_count: int = 0
    max_retries: int = 0

    def raise_for_outcome(self) -> Any:
        """Return the execution result, or raise for any non-success outcome."""
        if self.outcome == WorkflowOutcome.SUCCESS:
            return self.result
        if self.outcome == WorkflowOutcome.RETRY_EXHAUSTED:
            raise RetryExhausted(self.errors, self.retry_count)
        raise SageQLError("; ".join(self.errors) or f"Query workflow {self.outcome.value}")


class QueryStreamEvent(BaseModel):
    """SSE event for streaming workflow progress."""

    event_type: str  # step, error, done
    step: str | None = None  # Node that just finished
    payload: dict | None = None  # Partial update on step, full response on done


def classify_outcome(state: WorkflowState) -> WorkflowOutcome:
    """How the run ended, derived from its final state."""
    errors = state.get("validation_errors") or []
    if state.get("cancelled"):
        return WorkflowOutcome.CANCELLED
    if not errors and "execution_result" in state:
        return WorkflowOutcome.SUCCESS
    retry_count = state.get("retry_count", 0)
    if retry_count > 0 and retry_count >= max_retries_of(state):
        return WorkflowOutcome.RETRY_EXHAUSTED
    return WorkflowOutcome.FAILED


def state_to_response(run_id: str, state: WorkflowState) -> QueryResponse:
    """Map final workflow state to response."""
    outcome = classify_outcome(state)
    return QueryResponse(
        run_id=run_id,
        outcome=outcome,
        query=state.get("current_query") or None,
        result=state.get("execution_result") if outcome == WorkflowOutcome.SUCCESS else None,
        errors=list(state.get("validation_errors") or []),
        retry_count=state.get("retry_count", 0),
        max_retries=max_retries_of(state),
    )
