"""Query workflow use case - runs the LangGraph query workflow for one intent."""

import asyncio
import uuid
from collections.abc import AsyncIterator
from typing import Any

import structlog
from pydantic_core import to_jsonable_python

from sageql.application.query.dto import (
    QueryRequest,
    QueryResponse,
    QueryStreamEvent,
    state_to_response,
)
from sageql.domain.entities.query_state import (
    DEFAULT_MAX_RETRIES,
    WorkflowState,
    initial_state,
    merge_state,
)
from sageql.domain.entities.workflow_events import WorkflowEventType
from sageql.domain.ports.query import (
    QueryExecutorPort,
    QueryGeneratorPort,
    QueryValidatorPort,
)
from sageql.domain.services.schema_compression import compress_schema, unwrap_introspection
from sageql.domain.services.schema_index import SchemaContextIndex
from sageql.infrastructure.agents.schema_context import DEFAULT_SEARCH_LIMIT
from sageql.infrastructure.workflow import (
    QueryCapabilities,
    build_query_graph,
    compile_query_graph,
)
from sageql.infrastructure.workflow.routing import recursion_limit_for
from sageql.shared.logging import bind_run_context, clear_run_context

log = structlog.get_logger(__name__)


class SchemaUnavailableError(Exception):
    """No schema in the request and none configured."""


class QueryWorkflowUseCase:
    """Orchestrates workflow: context → generate → validate → execute, with bounded retries.

    One graph is built per run, so concurrent runs share nothing but the
    capabilities, which are stateless apart from connection pools.
    """

    def __init__(
        self,
        generator: QueryGeneratorPort,
        validator: QueryValidatorPort,
        executor: QueryExecutorPort,
        max_retries: int = DEFAULT_MAX_RETRIES,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        default_schema: dict[str, Any] | None = None,
    ) -> None:
        self._generator = generator
        self._validator = validator
        self._executor = executor
        self._max_retries = max_retries
        self._search_limit = search_limit
        self._default_schema = default_schema

    def _build_graph(self, raw_schema: Any, cancel_event: asyncio.Event | None):
        capabilities = QueryCapabilities(
            generator=self._generator,
            validator=self._validator,
            executor=self._executor,
            schema_index=SchemaContextIndex(compress_schema(raw_schema)),
        )
        builder = build_query_graph(
            capabilities,
            search_limit=self._search_limit,
            cancel_event=cancel_event,
        )
        return compile_query_graph(builder)

    def _config(self) -> dict:
        return {"recursion_limit": recursion_limit_for(self._max_retries)}

    def _resolve_schema(self, request: QueryRequest) -> dict[str, Any]:
        schema = request.graphql_schema or self._default_schema
        if schema is None:
            raise SchemaUnavailableError("No schema provided and no default schema configured")
        return unwrap_introspection(schema)

    async def run(
        self,
        intent: str,
        raw_schema: dict[str, Any],
        cancel_event: asyncio.Event | None = None,
    ) -> WorkflowState:
        """Run the workflow to its terminal state and return the final state.

        Never raises for pipeline failures: they are reported in
        validation_errors of the returned state.
        """
        graph = self._build_graph(raw_schema, cancel_event)
        initial = initial_state(intent, raw_schema, self._max_retries)
        try:
            final = await graph.ainvoke(initial, config=self._config())
        except Exception as e:  # noqa: BLE001
            log.exception("workflow_aborted")
            return merge_state(initial, {"validation_errors": [f"Workflow aborted: {e}"]})
        log.info(
            "workflow_finished",
            retry_count=final.get("retry_count", 0),
            succeeded="execution_result" in final and not final.get("validation_errors"),
        )
        return final

    async def execute(
        self,
        request: QueryRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> QueryResponse:
        """Run workflow for a request, return the classified result."""
        run_id = request.run_id or str(uuid.uuid4())
        bind_run_context(run_id=run_id)
        try:
            final = await self.run(request.intent, self._resolve_schema(request), cancel_event)
        finally:
            clear_run_context()
        return state_to_response(run_id, final)

    async def execute_stream(
        self,
        request: QueryRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[QueryStreamEvent]:
        """Run workflow, yield one event per finished step, then done."""
        run_id = request.run_id or str(uuid.uuid4())
        bind_run_context(run_id=run_id)
        try:
            raw_schema = self._resolve_schema(request)
            graph = self._build_graph(raw_schema, cancel_event)
            state = initial_state(request.intent, raw_schema, self._max_retries)

            try:
                async for mode, chunk in graph.astream(
                    state,
                    config=self._config(),
                    stream_mode=["updates", "values"],
                ):
                    if mode == "values":
                        state = chunk
                        continue
                    for step, update in chunk.items():
                        yield QueryStreamEvent(
                            event_type=WorkflowEventType.STEP.value,
                            step=step,
                            payload=to_jsonable_python(_summarize_update(update or {})),
                        )
            except Exception as e:  # noqa: BLE001
                log.exception("workflow_stream_failed")
                yield QueryStreamEvent(event_type=WorkflowEventType.ERROR.value, payload={"message": str(e)})
                return

            response = state_to_response(run_id, state)
            yield QueryStreamEvent(
                event_type=WorkflowEventType.DONE.value,
                payload=response.model_dump(mode="json"),
            )
        finally:
            clear_run_context()


def _summarize_update(update: dict[str, Any]) -> dict[str, Any]:
    """Client-facing view of a partial update; schema context reduced to names."""
    summary = dict(update)
    context = summary.pop("schema_context", None)
    if context is not None:
        summary["schema_context"] = {
            "types": sorted(context.types),
            "fields": sorted(context.fields),
            "related_types": sorted(context.related_types),
        }
    return summary
