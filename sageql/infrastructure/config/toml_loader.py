"""TOML configuration loader with env overrides."""

import json
import logging
import os
import tomllib
from pathlib import Path

from sageql.domain.ports.config import (
    AppConfig,
    GraphQLConfig,
    LLMConfig,
    OllamaConfig,
    OpenAICompatibleConfig,
    ServerConfig,
    WorkflowConfig,
)

logger = logging.getLogger(__name__)


def _load_toml(path: Path) -> dict:
    """Load TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _set_int(config: dict, section: str, key: str, env_name: str) -> None:
    raw = os.getenv(env_name)
    if not raw:
        return
    try:
        config.setdefault(section, {})[key] = int(raw)
    except ValueError:
        logger.warning("Invalid %s env value: %r, ignoring", env_name, raw)


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides."""
    if provider := os.getenv("LLM_PROVIDER"):
        config.setdefault("llm", {})["provider"] = provider
    if model := os.getenv("LLM_MODEL"):
        config.setdefault("llm", {})["model"] = model
    if host := os.getenv("OLLAMA_HOST"):
        config.setdefault("ollama", {})["host"] = host
    if base_url := os.getenv("OPENAI_BASE_URL"):
        config.setdefault("openai_compatible", {})["base_url"] = base_url
    if api_url := os.getenv("GRAPHQL_API_URL"):
        config.setdefault("graphql", {})["api_url"] = api_url.strip()
    if headers := os.getenv("GRAPHQL_API_HEADERS"):
        try:
            parsed = json.loads(headers)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            config.setdefault("graphql", {})["headers"] = {str(k): str(v) for k, v in parsed.items()}
        else:
            logger.warning("Invalid GRAPHQL_API_HEADERS env value (expected JSON object), ignoring")
    if schema_path := os.getenv("GRAPHQL_SCHEMA_PATH"):
        config.setdefault("graphql", {})["schema_path"] = schema_path.strip()
    _set_int(config, "workflow", "max_retries", "WORKFLOW_MAX_RETRIES")
    _set_int(config, "server", "port", "PORT")
    if level := os.getenv("LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = level.upper()
    if path := os.getenv("LOG_FILE"):
        config.setdefault("logging", {})["file"] = path.strip()
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load configuration from TOML files with env overrides.

    Loads default.toml, then development.toml if exists.
    """
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent.parent.parent / "config"

    config: dict = {}

    default_path = config_dir / "default.toml"
    if default_path.exists():
        config = _load_toml(default_path)

    dev_path = config_dir / "development.toml"
    if dev_path.exists():
        dev_config = _load_toml(dev_path)
        for key, value in dev_config.items():
            if isinstance(value, dict) and key in config and isinstance(config[key], dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value

    config = _apply_env_overrides(config)

    logging_raw = config.get("logging") or {}
    return AppConfig(
        server=ServerConfig(**(config.get("server") or {})),
        llm=LLMConfig(**(config.get("llm") or {})),
        ollama=OllamaConfig(**(config.get("ollama") or {})),
        openai_compatible=OpenAICompatibleConfig(**(config.get("openai_compatible") or {})),
        graphql=GraphQLConfig(**(config.get("graphql") or {})),
        workflow=WorkflowConfig(**(config.get("workflow") or {})),
        log_level=logging_raw.get("level", "INFO"),
        log_file=(logging_raw.get("file") or "").strip(),
        log_rotation_max_mb=int(logging_raw.get("log_rotation_max_mb", 5)),
        log_rotation_backups=int(logging_raw.get("log_rotation_backups", 3)),
    )
