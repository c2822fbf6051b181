"""Workflow step names and event types for SSE streaming."""

from enum import Enum


class WorkflowStep(str, Enum):
    """Graph node names. Order matches the happy path."""

    CONTEXT = "generate_schema_context"
    GENERATE = "generate_query"
    VALIDATE = "validate_query"
    EXECUTE = "execute_query"
    VALIDATION_RECOVER = "handle_validation_error"
    EXECUTION_RECOVER = "handle_execution_error"


class WorkflowEventType(str, Enum):
    """Event types streamed to client."""

    STEP = "step"  # A node finished; payload holds its partial update
    ERROR = "error"
    DONE = "done"


class WorkflowOutcome(str, Enum):
    """How a run ended."""

    SUCCESS = "success"
    RETRY_EXHAUSTED = "retry_exhausted"
    FAILED = "failed"  # Errors left without any recovery attempt
    CANCELLED = "cancelled"
