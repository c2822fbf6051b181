"""Tests for the LLM query generator and reply cleanup."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sageql.domain.entities.schema_context import SchemaContextResult
from sageql.domain.errors import GenerationError
from sageql.domain.ports.llm import LLMResponse
from sageql.infrastructure.agents.llm_helpers import extract_query_text
from sageql.infrastructure.agents.query_generator import LLMQueryGenerator
from sageql.infrastructure.workflow.prompts import GENERATE_SYSTEM


class TestExtractQueryText:
    """Model reply -> query text."""

    def test_plain_query(self):
        assert extract_query_text("  { users { id } }\n") == "{ users { id } }"

    def test_fenced_graphql_block(self):
        reply = "Here you go:\n```graphql\nquery { users { id } }\n```\nThis lists users."
        assert extract_query_text(reply) == "query { users { id } }"

    def test_bare_fence(self):
        assert extract_query_text("```\n{ posts { title } }\n```") == "{ posts { title } }"

    def test_think_block_removed(self):
        reply = "<think>The user wants posts</think>\n{ posts { id } }"
        assert extract_query_text(reply) == "{ posts { id } }"

    def test_inline_backticks(self):
        assert extract_query_text("`{ users { id } }`") == "{ users { id } }"

    def test_empty(self):
        assert extract_query_text("") == ""
        assert extract_query_text(None) == ""


def make_llm(content: str) -> MagicMock:
    llm = MagicMock()
    llm.generate = AsyncMock(return_value=LLMResponse(content=content, model="m"))
    return llm


class TestLLMQueryGenerator:
    """Prompt assembly and failure mapping."""

    @pytest.mark.asyncio
    async def test_builds_system_and_user_messages(self, raw_schema):
        llm = make_llm("```graphql\n{ users { email } }\n```")
        context = SchemaContextResult(types={"User": {"name": "User"}}, related_types={"User"})

        result = await LLMQueryGenerator(llm, model="qwen").generate("emails of users", raw_schema, context)

        assert result.query == "{ users { email } }"
        assert result.errors == []
        kwargs = llm.generate.call_args.kwargs
        assert kwargs["model"] == "qwen"
        assert kwargs["temperature"] == 0.0
        system, user = kwargs["messages"]
        assert system.role == "system"
        assert system.content == GENERATE_SYSTEM
        assert user.role == "user"
        assert "emails of users" in user.content
        assert '"User"' in user.content

    @pytest.mark.asyncio
    async def test_empty_reply_reported(self, raw_schema):
        result = await LLMQueryGenerator(make_llm("   "), model="qwen").generate("users", raw_schema, None)

        assert result.query == ""
        assert result.errors == ["Generator returned an empty query"]

    @pytest.mark.asyncio
    async def test_llm_failure_raises_generation_error(self, raw_schema):
        llm = MagicMock()
        llm.generate = AsyncMock(side_effect=ValueError("model not found"))

        with pytest.raises(GenerationError, match="Query generation failed: model not found"):
            await LLMQueryGenerator(llm, model="qwen").generate("users", raw_schema, None)

        llm.generate.assert_awaited_once()
