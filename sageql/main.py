"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI

from sageql.api.dependencies import (
    get_config,
    get_graphql_client,
    get_llm_adapter,
)
from sageql.api.routes.query import router as query_router
from sageql.domain.ports.config import AppConfig
from sageql.shared.logging import setup_logging

log = structlog.get_logger()


def _apply_logging_config(config: AppConfig) -> None:
    """Apply logging from config (stdout + optional file)."""
    setup_logging(
        level=config.log_level,
        file_path=config.log_file or "",
        rotation_max_mb=config.log_rotation_max_mb,
        rotation_backups=config.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load config, setup logging. Shutdown: close HTTP clients."""
    config = get_config()
    _apply_logging_config(config)
    log.info(
        "startup_complete",
        llm_provider=config.llm.provider,
        graphql_api=config.graphql.api_url,
        max_retries=config.workflow.max_retries,
    )
    yield
    log.info("shutdown_begin")
    await get_graphql_client().close()
    llm = get_llm_adapter()
    if hasattr(llm, "close"):
        try:
            await llm.close()
        except Exception:  # noqa: BLE001
            log.debug("llm_close_error", exc_info=True)
    log.info("shutdown_complete")


app = FastAPI(
    title="SageQL",
    version="0.1.0",
    description="Natural language to validated, executed GraphQL queries",
    lifespan=lifespan,
)

app.include_router(query_router)


@app.get("/health")
async def health(
    config: AppConfig = Depends(get_config),
    llm=Depends(get_llm_adapter),
) -> dict:
    """Health check with LLM availability."""
    return {
        "status": "ok",
        "service": "sageql",
        "llm_provider": config.llm.provider,
        "llm_available": await llm.is_available(),
    }
