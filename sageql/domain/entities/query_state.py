"""Workflow state schema for LangGraph and the per-field merge rules."""

from collections.abc import Callable
from typing import Annotated, Any, TypedDict

from sageql.domain.entities.schema_context import SchemaContextResult

DEFAULT_MAX_RETRIES = 3


def append_messages(old: list[str] | None, new: list[str] | None) -> list[str]:
    """Append-only log: old turns followed by the returned ones."""
    return [*(old or []), *(new or [])]


def accumulate(old: int | None, new: int | None) -> int:
    """Add the returned increment to the running counter."""
    return (old or 0) + (new or 0)


def replace_if_present(old: Any, new: Any) -> Any:
    """Take the returned value when a node produced one, else keep the old value."""
    return old if new is None else new


class WorkflowState(TypedDict, total=False):
    """State passed between query workflow nodes. One instance per run."""

    messages: Annotated[list[str], append_messages]
    schema: Annotated[dict[str, Any], replace_if_present]  # Raw introspection blob
    current_query: Annotated[str, replace_if_present]
    validation_errors: Annotated[list[str], replace_if_present]  # Empty = last check passed
    execution_result: Annotated[Any, replace_if_present]
    retry_count: Annotated[int, accumulate]
    schema_context: Annotated[SchemaContextResult | None, replace_if_present]

    # Run settings
    max_retries: Annotated[int | None, replace_if_present]
    cancelled: Annotated[bool, replace_if_present]


STATE_REDUCERS: dict[str, Callable[[Any, Any], Any]] = {
    "messages": append_messages,
    "schema": replace_if_present,
    "current_query": replace_if_present,
    "validation_errors": replace_if_present,
    "execution_result": replace_if_present,
    "retry_count": accumulate,
    "schema_context": replace_if_present,
    "max_retries": replace_if_present,
    "cancelled": replace_if_present,
}


def merge_state(state: WorkflowState, update: WorkflowState) -> WorkflowState:
    """Merge a node's partial output into state. Pure: neither argument is mutated.

    Fields missing from the update are left unchanged.
    """
    merged: dict[str, Any] = dict(state)
    for key, value in update.items():
        reducer = STATE_REDUCERS.get(key)
        if reducer is None:
            raise KeyError(f"Unknown workflow state field: {key}")
        result = reducer(state.get(key), value)
        if result is None and key not in state:
            continue
        merged[key] = result
    return merged  # type: ignore[return-value]


def initial_state(
    intent: str,
    raw_schema: dict[str, Any],
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> WorkflowState:
    """Fresh state for a run: one user message, the schema and zeroed counters."""
    return {
        "messages": [intent],
        "schema": raw_schema,
        "validation_errors": [],
        "retry_count": 0,
        "max_retries": max_retries,
        "cancelled": False,
    }


def latest_message(state: WorkflowState) -> str:
    messages = state.get("messages") or []
    return messages[-1] if messages else ""


def max_retries_of(state: WorkflowState) -> int:
    value = state.get("max_retries")
    return DEFAULT_MAX_RETRIES if value is None else value
