"""Configuration models."""

from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM provider selection."""

    provider: str = "ollama"  # "ollama" | "lm_studio"
    model: str = "qwen2.5-coder:7b"
    temperature: float = 0.0


class OllamaConfig(BaseModel):
    """Ollama connection configuration."""

    host: str = "http://localhost:11434"
    timeout: int = 120
    num_ctx: int | None = None  # Context window. None = model default.


class OpenAICompatibleConfig(BaseModel):
    """LM Studio, vLLM, LocalAI - OpenAI-compatible API."""

    base_url: str = "http://localhost:1234/v1"
    api_key: str = ""
    timeout: int = 120
    max_tokens: int | None = None


class GraphQLConfig(BaseModel):
    """Target GraphQL API."""

    api_url: str = "http://localhost:4000/graphql"
    headers: dict[str, str] = {}
    timeout: float = 30.0
    # Introspection JSON used when a request carries no schema
    schema_path: str = "output/schema.json"
    introspection_output_dir: str = "output"


class WorkflowConfig(BaseModel):
    """Query workflow settings."""

    max_retries: int = Field(3, ge=0, le=20)
    search_limit: int = Field(5, ge=1, le=50)


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    llm: LLMConfig = LLMConfig()
    ollama: OllamaConfig = OllamaConfig()
    openai_compatible: OpenAICompatibleConfig = OpenAICompatibleConfig()
    graphql: GraphQLConfig = GraphQLConfig()
    workflow: WorkflowConfig = WorkflowConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout. Rotation when file exceeds max_mb.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3
