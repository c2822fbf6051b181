"""Transition router - next step from current state, with the bounded retry policy.

    context -> generate -> validate -> execute | validation recovery | end
    execute -> end | execution recovery
    validation recovery, execution recovery -> context

Both recovery kinds draw on one shared retry_count, so a run passes through
at most max_retries recovery nodes before it ends. Every router ends the run
once cancellation has been recorded.
"""

from typing import Literal

from sageql.domain.entities.query_state import WorkflowState, max_retries_of
from sageql.domain.entities.workflow_events import WorkflowStep

AfterContext = Literal["generate", "end"]
AfterGenerate = Literal["validate", "end"]
AfterValidate = Literal["execute", "recover", "end"]
AfterExecute = Literal["recover", "end"]
AfterRecovery = Literal["context", "end"]


def can_retry(state: WorkflowState) -> bool:
    return state.get("retry_count", 0) < max_retries_of(state)


def route_after_context(state: WorkflowState) -> AfterContext:
    """Context -> generate, even when the lookup failed."""
    if state.get("cancelled"):
        return "end"
    return "generate"


def route_after_generate(state: WorkflowState) -> AfterGenerate:
    if state.get("cancelled"):
        return "end"
    return "validate"


def route_after_validate(state: WorkflowState) -> AfterValidate:
    """Clean -> execute; errors -> recover while budget remains, else end."""
    if state.get("cancelled"):
        return "end"
    if not state.get("validation_errors"):
        return "execute"
    return "recover" if can_retry(state) else "end"


def route_after_execute(state: WorkflowState) -> AfterExecute:
    """Success -> end; errors -> recover while budget remains, else end."""
    if state.get("cancelled") or not state.get("validation_errors"):
        return "end"
    return "recover" if can_retry(state) else "end"


def route_after_recovery(state: WorkflowState) -> AfterRecovery:
    if state.get("cancelled"):
        return "end"
    return "context"


# step -> (router, tag -> next step); None is the terminal state
ROUTING_TABLE = {
    WorkflowStep.CONTEXT: (route_after_context, {"generate": WorkflowStep.GENERATE, "end": None}),
    WorkflowStep.GENERATE: (route_after_generate, {"validate": WorkflowStep.VALIDATE, "end": None}),
    WorkflowStep.VALIDATE: (
        route_after_validate,
        {"execute": WorkflowStep.EXECUTE, "recover": WorkflowStep.VALIDATION_RECOVER, "end": None},
    ),
    WorkflowStep.EXECUTE: (
        route_after_execute,
        {"recover": WorkflowStep.EXECUTION_RECOVER, "end": None},
    ),
    WorkflowStep.VALIDATION_RECOVER: (route_after_recovery, {"context": WorkflowStep.CONTEXT, "end": None}),
    WorkflowStep.EXECUTION_RECOVER: (route_after_recovery, {"context": WorkflowStep.CONTEXT, "end": None}),
}


def recursion_limit_for(max_retries: int) -> int:
    """LangGraph super-step budget: five steps per attempt plus slack."""
    return 5 * (max_retries + 1) + 5
