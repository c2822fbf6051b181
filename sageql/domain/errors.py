"""Domain errors raised by capabilities and converted to data by workflow nodes."""


class SageQLError(Exception):
    """Base class for all query workflow errors."""


class SchemaLookupError(SageQLError):
    """Schema blob is malformed or cannot be searched."""


class GenerationError(SageQLError):
    """Query generator failed or returned an unusable candidate."""


class QueryValidationError(SageQLError):
    """Query could not be checked against the schema."""


class ExecutionError(SageQLError):
    """Transport or upstream failure while executing a query."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryExhausted(SageQLError):
    """Run ended with outstanding errors after using its whole retry budget."""

    def __init__(self, errors: list[str], retry_count: int) -> None:
        summary = errors[0] if errors else "unknown error"
        super().__init__(f"Gave up after {retry_count} retries: {summary}")
        self.errors = errors
        self.retry_count = retry_count
