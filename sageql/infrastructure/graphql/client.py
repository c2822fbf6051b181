"""GraphQL HTTP client - executes queries and fetches introspection."""

import logging
from typing import Any

import httpx
from graphql import get_introspection_query
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sageql.domain.errors import ExecutionError
from sageql.domain.ports.config import GraphQLConfig
from sageql.domain.ports.query import GraphQLResponse

logger = logging.getLogger(__name__)

INTROSPECTION_QUERY = get_introspection_query(descriptions=True)


class GraphQLClient:
    """Implements QueryExecutorPort over HTTP POST.

    Transport failures are retried with backoff; HTTP errors and GraphQL
    ``errors`` members surface as ExecutionError.
    """

    def __init__(
        self,
        config: GraphQLConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._headers = {"Content-Type": "application/json", **config.headers}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout, connect=10.0),
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        return await self._get_client().post(self._config.api_url, json=payload)

    async def request(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> GraphQLResponse:
        """Send one operation and return the parsed response, errors included."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            resp = await self._post(payload)
        except httpx.TimeoutException as e:
            raise ExecutionError(f"GraphQL request timed out after {self._config.timeout}s") from e
        except httpx.TransportError as e:
            raise ExecutionError(f"GraphQL transport error: {e}") from e

        if resp.status_code >= 400:
            logger.warning("GraphQL API error %s: %s", resp.status_code, resp.text[:500])
            raise ExecutionError(f"HTTP error! status: {resp.status_code}", status_code=resp.status_code)
        try:
            return GraphQLResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise ExecutionError(f"Malformed GraphQL response: {e}", status_code=resp.status_code) from e

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> GraphQLResponse:
        """Run a query; any GraphQL error is a failure."""
        response = await self.request(query, variables)
        if response.failed:
            messages = "; ".join(err.message for err in response.errors or [])
            raise ExecutionError(f"GraphQL errors: {messages}")
        return response

    async def introspect(self) -> dict[str, Any]:
        """Fetch the schema as an introspection result (``{"__schema": ...}``)."""
        response = await self.execute(INTROSPECTION_QUERY)
        data = response.data or {}
        if "__schema" not in data:
            raise ExecutionError("Introspection response has no __schema")
        return data
