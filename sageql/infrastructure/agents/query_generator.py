"""Query generator agent - natural language to GraphQL via the LLM."""

from typing import Any

import structlog

from sageql.domain.entities.query_state import WorkflowState, latest_message
from sageql.domain.entities.schema_context import SchemaContextResult
from sageql.domain.errors import GenerationError
from sageql.domain.ports.llm import LLMMessage, LLMPort
from sageql.domain.ports.query import GeneratedQuery, QueryGeneratorPort
from sageql.domain.services.schema_compression import root_operation_types
from sageql.infrastructure.agents.llm_helpers import extract_query_text, generate_with_retry
from sageql.infrastructure.workflow.prompts import GENERATE_SYSTEM, build_generation_prompt

log = structlog.get_logger(__name__)


class LLMQueryGenerator:
    """Implements QueryGeneratorPort with any LLMPort."""

    def __init__(self, llm: LLMPort, model: str, temperature: float = 0.0) -> None:
        self._llm = llm
        self._model = model
        self._temperature = temperature

    async def generate(
        self,
        intent: str,
        raw_schema: dict[str, Any],
        schema_context: SchemaContextResult | None,
    ) -> GeneratedQuery:
        messages = [
            LLMMessage(role="system", content=GENERATE_SYSTEM),
            LLMMessage(
                role="user",
                content=build_generation_prompt(intent, root_operation_types(raw_schema), schema_context),
            ),
        ]
        try:
            response = await generate_with_retry(self._llm, messages, self._model, self._temperature)
        except Exception as e:
            raise GenerationError(f"Query generation failed: {e}") from e

        query = extract_query_text(response.content)
        if not query:
            return GeneratedQuery(query="", errors=["Generator returned an empty query"])
        return GeneratedQuery(query=query, errors=[])


async def generate_query_node(
    state: WorkflowState,
    generator: QueryGeneratorPort,
) -> WorkflowState:
    """Generate a candidate query. Updates current_query and validation_errors.

    A failed attempt still overwrites current_query (with "") so a stale query
    from an earlier attempt is never validated again.
    """
    try:
        result = await generator.generate(
            latest_message(state),
            state.get("schema") or {},
            state.get("schema_context"),
        )
    except Exception as e:  # noqa: BLE001
        log.warning("query_generation_failed", error=str(e))
        message = str(e) if isinstance(e, GenerationError) else f"Query generation failed: {e}"
        return {"current_query": "", "validation_errors": [message]}

    log.debug("query_generated", query=result.query, errors=result.errors)
    return {"current_query": result.query, "validation_errors": list(result.errors)}
