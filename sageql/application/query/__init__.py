"""Query workflow application layer."""

from sageql.application.query.dto import (
    QueryRequest,
    QueryResponse,
    QueryStreamEvent,
)
from sageql.application.query.use_case import QueryWorkflowUseCase, SchemaUnavailableError

__all__ = [
    "QueryRequest",
    "QueryResponse",
    "QueryStreamEvent",
    "QueryWorkflowUseCase",
    "SchemaUnavailableError",
]
