"""Query API integration tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from sageql.api.dependencies import get_config, get_llm_adapter, get_query_use_case
from sageql.application.query.use_case import QueryWorkflowUseCase
from sageql.domain.ports.config import AppConfig
from sageql.main import app

VALID_QUERY = "{ users(limit: 5) { id name } }"


@pytest.fixture
def client_app(mock_generator, mock_validator, mock_executor):
    llm = MagicMock()
    llm.is_available = AsyncMock(return_value=True)
    use_case = QueryWorkflowUseCase(mock_generator, mock_validator, mock_executor, max_retries=2)
    app.dependency_overrides[get_query_use_case] = lambda: use_case
    app.dependency_overrides[get_llm_adapter] = lambda: llm
    app.dependency_overrides[get_config] = lambda: AppConfig()
    yield app
    app.dependency_overrides.clear()


async def post(app, path: str, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.post(path, **kwargs)


@pytest.mark.asyncio
async def test_query_success(client_app, raw_schema):
    resp = await post(client_app, "/query", json={"intent": "list users", "schema": raw_schema, "run_id": "r1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["run_id"] == "r1"
    assert data["outcome"] == "success"
    assert data["query"] == VALID_QUERY
    assert data["result"] == {"users": [{"id": "1", "name": "Ada"}]}
    assert data["errors"] == []
    assert data["max_retries"] == 2


@pytest.mark.asyncio
async def test_query_without_schema_is_400(client_app):
    resp = await post(client_app, "/query", json={"intent": "list users"})

    assert resp.status_code == 400
    assert "No schema provided" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_empty_intent_rejected(client_app, raw_schema):
    resp = await post(client_app, "/query", json={"intent": "", "schema": raw_schema})

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_health(client_app):
    async with AsyncClient(transport=ASGITransport(app=client_app), base_url="http://test") as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "service": "sageql",
        "llm_provider": "ollama",
        "llm_available": True,
    }
