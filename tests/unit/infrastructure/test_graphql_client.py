"""Tests for GraphQLClient over httpx.MockTransport."""

import json

import httpx
import pytest
from tenacity import wait_none

from sageql.domain.errors import ExecutionError
from sageql.domain.ports.config import GraphQLConfig
from sageql.infrastructure.graphql.client import GraphQLClient


@pytest.fixture
def config():
    return GraphQLConfig(api_url="https://api.example.com/graphql", headers={"Authorization": "Bearer t"})


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(GraphQLClient._post.retry, "wait", wait_none())


def make_client(config, handler) -> GraphQLClient:
    return GraphQLClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_execute_posts_query_and_variables(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"user": {"id": "1"}}})

    client = make_client(config, handler)
    response = await client.execute("query($id: ID!) { user(id: $id) { id } }", {"id": "1"})
    await client.close()

    assert response.data == {"user": {"id": "1"}}
    assert seen["url"] == "https://api.example.com/graphql"
    assert seen["auth"] == "Bearer t"
    assert seen["body"] == {"query": "query($id: ID!) { user(id: $id) { id } }", "variables": {"id": "1"}}


@pytest.mark.asyncio
async def test_variables_omitted_when_empty(config):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"data": {}})

    client = make_client(config, handler)
    await client.execute("{ users { id } }")
    await client.close()

    assert bodies == [{"query": "{ users { id } }"}]


@pytest.mark.asyncio
async def test_http_error_status(config):
    client = make_client(config, lambda request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(ExecutionError, match="HTTP error! status: 502") as exc_info:
        await client.execute("{ users { id } }")
    await client.close()

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_graphql_errors_fail_execute(config):
    body = {"data": None, "errors": [{"message": "Not authorised"}, {"message": "Rate limited"}]}
    client = make_client(config, lambda request: httpx.Response(200, json=body))

    with pytest.raises(ExecutionError, match="GraphQL errors: Not authorised; Rate limited"):
        await client.execute("{ users { id } }")
    await client.close()


@pytest.mark.asyncio
async def test_request_returns_errors_without_raising(config):
    body = {"data": {"users": []}, "errors": [{"message": "partial", "path": ["users", 0]}]}
    client = make_client(config, lambda request: httpx.Response(200, json=body))

    response = await client.request("{ users { id } }")
    await client.close()

    assert response.failed
    assert response.errors[0].path == ["users", 0]


@pytest.mark.asyncio
async def test_malformed_body(config):
    client = make_client(config, lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(ExecutionError, match="Malformed GraphQL response"):
        await client.execute("{ users { id } }")
    await client.close()


@pytest.mark.asyncio
async def test_transport_error_retried_then_raised(config, no_backoff):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("Connection refused", request=request)

    client = make_client(config, handler)

    with pytest.raises(ExecutionError, match="GraphQL transport error"):
        await client.execute("{ users { id } }")
    await client.close()

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_transient_failure_recovers(config, no_backoff):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("Connection reset", request=request)
        return httpx.Response(200, json={"data": {"users": []}})

    client = make_client(config, handler)
    response = await client.execute("{ users { id } }")
    await client.close()

    assert response.data == {"users": []}
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_timeout(config, no_backoff):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(config, handler)

    with pytest.raises(ExecutionError, match="timed out after 30.0s"):
        await client.execute("{ users { id } }")
    await client.close()


@pytest.mark.asyncio
async def test_introspect(config, raw_schema):
    def handler(request: httpx.Request) -> httpx.Response:
        assert "__schema" in json.loads(request.content)["query"]
        return httpx.Response(200, json={"data": raw_schema})

    client = make_client(config, handler)
    schema = await client.introspect()
    await client.close()

    assert schema["__schema"]["queryType"]["name"] == "Query"


@pytest.mark.asyncio
async def test_introspect_requires_schema_root(config):
    client = make_client(config, lambda request: httpx.Response(200, json={"data": {}}))

    with pytest.raises(ExecutionError, match="no __schema"):
        await client.introspect()
    await client.close()
