"""FastAPI dependencies - adapters and use cases built from config."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Union

from sageql.application.query.use_case import QueryWorkflowUseCase
from sageql.domain.ports.config import AppConfig
from sageql.domain.services.schema_compression import unwrap_introspection
from sageql.infrastructure.agents.query_generator import LLMQueryGenerator
from sageql.infrastructure.config import load_config
from sageql.infrastructure.graphql.client import GraphQLClient
from sageql.infrastructure.graphql.validator import GraphQLSchemaValidator
from sageql.infrastructure.llm.ollama import OllamaAdapter
from sageql.infrastructure.llm.openai_compatible import OpenAICompatibleAdapter

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> AppConfig:
    """Load config once at startup."""
    return load_config()


@lru_cache
def get_llm_adapter() -> Union[OllamaAdapter, OpenAICompatibleAdapter]:
    """Create LLM adapter based on config.llm.provider."""
    config = get_config()
    if config.llm.provider == "lm_studio":
        return OpenAICompatibleAdapter(config.openai_compatible)
    return OllamaAdapter(config.ollama)


@lru_cache
def get_graphql_client() -> GraphQLClient:
    """Shared GraphQL client (one connection pool per process)."""
    return GraphQLClient(get_config().graphql)


@lru_cache
def get_default_schema() -> dict[str, Any] | None:
    """Introspection JSON from graphql.schema_path, or None if the file is absent."""
    path = Path(get_config().graphql.schema_path)
    if not path.exists():
        logger.info("No default schema at %s; requests must carry one", path)
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load default schema %s: %s", path, e)
        return None
    return unwrap_introspection(data)


def get_query_use_case() -> QueryWorkflowUseCase:
    """Create QueryWorkflowUseCase with LLM generator, validator, executor and config."""
    config = get_config()
    generator = LLMQueryGenerator(
        get_llm_adapter(),
        model=config.llm.model,
        temperature=config.llm.temperature,
    )
    return QueryWorkflowUseCase(
        generator=generator,
        validator=GraphQLSchemaValidator(),
        executor=get_graphql_client(),
        max_retries=config.workflow.max_retries,
        search_limit=config.workflow.search_limit,
        default_schema=get_default_schema(),
    )
