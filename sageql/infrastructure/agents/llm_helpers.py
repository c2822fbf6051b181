"""LLM helpers: retry wrapper and response cleanup."""

import re

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sageql.domain.ports.llm import LLMMessage, LLMPort, LLMResponse

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_FENCE_RE = re.compile(r"```(?:graphql|gql)?\s*\n(.*?)```", re.DOTALL | re.IGNORECASE)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((TimeoutError, ConnectionError, httpx.TransportError)),
    reraise=True,
)
async def _generate_impl(
    llm: LLMPort,
    messages: list[LLMMessage],
    model: str,
    temperature: float,
) -> LLMResponse:
    """Internal: generate with retry."""
    return await llm.generate(
        messages=messages,
        model=model,
        temperature=temperature,
    )


async def generate_with_retry(
    llm: LLMPort,
    messages: list[LLMMessage],
    model: str,
    temperature: float = 0.7,
) -> LLMResponse:
    """Generate with retry on timeout/connection errors."""
    return await _generate_impl(llm, messages, model, temperature)


def extract_query_text(content: str) -> str:
    """Pull the query out of a model reply.

    Reasoning blocks are dropped; a fenced block wins over surrounding prose.
    """
    text = _THINK_RE.sub("", content or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip("`").strip()
