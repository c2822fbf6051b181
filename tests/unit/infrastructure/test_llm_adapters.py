"""Tests for LLM adapters (Ollama, OpenAI-compatible)."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from sageql.domain.ports.config import OllamaConfig, OpenAICompatibleConfig
from sageql.domain.ports.llm import LLMMessage
from sageql.infrastructure.llm.ollama import DEFAULT_MODEL, OllamaAdapter
from sageql.infrastructure.llm.openai_compatible import OpenAICompatibleAdapter


class TestOllamaAdapter:
    """Tests for OllamaAdapter."""

    @pytest.fixture
    def config(self):
        return OllamaConfig(host="http://localhost:11434", timeout=30, num_ctx=8192)

    @pytest.fixture
    def adapter(self, config):
        return OllamaAdapter(config)

    @pytest.mark.asyncio
    async def test_generate_calls_client(self, adapter):
        """Generate calls ollama client with correct params."""
        mock_response = MagicMock()
        mock_response.message = MagicMock(content="{ users { id } }")
        mock_response.model = "llama3"

        adapter._client.chat = AsyncMock(return_value=mock_response)

        messages = [LLMMessage(role="user", content="list users")]
        result = await adapter.generate(messages, model="llama3", temperature=0.0)

        assert result.content == "{ users { id } }"
        assert result.model == "llama3"
        kwargs = adapter._client.chat.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "list users"}]
        assert kwargs["options"] == {"temperature": 0.0, "num_ctx": 8192}

    @pytest.mark.asyncio
    async def test_generate_default_model(self, adapter):
        """Generate uses default model if not specified."""
        mock_response = MagicMock()
        mock_response.message = MagicMock(content="Response")
        mock_response.model = None

        adapter._client.chat = AsyncMock(return_value=mock_response)

        result = await adapter.generate([LLMMessage(role="user", content="Hi")])

        assert adapter._client.chat.call_args.kwargs["model"] == DEFAULT_MODEL
        assert result.model == DEFAULT_MODEL

    @pytest.mark.asyncio
    async def test_is_available_true(self, adapter):
        """is_available returns True when server responds."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        with patch("httpx.AsyncClient") as mock_client:
            get = AsyncMock(return_value=mock_response)
            mock_client.return_value.__aenter__.return_value.get = get
            result = await adapter.is_available()

        assert result is True
        get.assert_awaited_once_with("http://localhost:11434/api/tags")

    @pytest.mark.asyncio
    async def test_is_available_false_on_error(self, adapter):
        """is_available returns False on connection error."""
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            result = await adapter.is_available()

        assert result is False


class TestOpenAICompatibleAdapter:
    """Tests for OpenAICompatibleAdapter."""

    @pytest.fixture
    def config(self):
        return OpenAICompatibleConfig(
            base_url="http://localhost:1234/v1/",
            api_key="test-key",
            timeout=30,
            max_tokens=512,
        )

    def test_init_sets_headers(self, config):
        """Init sets authorization header if api_key provided."""
        adapter = OpenAICompatibleAdapter(config)
        assert adapter._headers["Authorization"] == "Bearer test-key"

    def test_init_no_auth_header_without_key(self):
        """No auth header if api_key is empty."""
        adapter = OpenAICompatibleAdapter(OpenAICompatibleConfig(base_url="http://localhost:1234/v1"))
        assert "Authorization" not in adapter._headers

    @pytest.mark.asyncio
    async def test_generate_posts_chat_completion(self, config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"model": "local-model", "choices": [{"message": {"content": "{ posts { id } }"}}]},
            )

        adapter = OpenAICompatibleAdapter(config, transport=httpx.MockTransport(handler))
        result = await adapter.generate(
            [LLMMessage(role="system", content="sys"), LLMMessage(role="user", content="posts")],
            model="local-model",
            temperature=0.0,
        )
        await adapter.close()

        assert result.content == "{ posts { id } }"
        assert result.model == "local-model"
        assert seen["url"] == "http://localhost:1234/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["max_tokens"] == 512
        assert seen["body"]["stream"] is False
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_generate_raises_on_http_error(self, config):
        adapter = OpenAICompatibleAdapter(
            config, transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        )

        with pytest.raises(httpx.HTTPStatusError):
            await adapter.generate([LLMMessage(role="user", content="Hi")])
        await adapter.close()

    @pytest.mark.asyncio
    async def test_is_available(self, config):
        adapter = OpenAICompatibleAdapter(
            config, transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"data": []}))
        )

        assert await adapter.is_available() is True
        await adapter.close()

    @pytest.mark.asyncio
    async def test_is_available_false_on_error(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        adapter = OpenAICompatibleAdapter(config, transport=httpx.MockTransport(handler))

        assert await adapter.is_available() is False
        await adapter.close()
