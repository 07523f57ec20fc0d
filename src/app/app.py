"""Entrypoint da aplicação kyc-relay.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import (
    get_dead_letter_store,
    get_pipeline,
    initialize_app,
    validate_runtime_settings,
)
from app.bootstrap.clients import create_async_redis_client
from app.infra.http import HttpClient, HttpClientConfig
from config.logging import get_logger
from config.settings import get_downstream_settings, get_store_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

SHUTDOWN_DRAIN_SECONDS = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações (falha rápido em staging/production)
    - Inicializa dead-letter e cliente de health do downstream

    Shutdown:
    - Aguarda execuções autenticadas do pipeline
    - Fecha conexão Redis
    """
    logger.info("app_starting", extra={"service": "kyc-relay"})
    validate_runtime_settings()

    downstream = get_downstream_settings()
    app.state.dead_letter_store = get_dead_letter_store()
    app.state.downstream_http_client = HttpClient(
        HttpClientConfig(timeout_seconds=2.0, max_retries=0)
    )
    app.state.downstream_health_url = downstream.health_url if downstream.base_url else None

    yield

    logger.info("app_shutting_down", extra={"service": "kyc-relay"})
    await get_pipeline().drain(timeout=SHUTDOWN_DRAIN_SECONDS)

    if get_store_settings().dead_letter_backend == "redis":
        redis_client = create_async_redis_client()
        close_async = getattr(redis_client, "aclose", None)
        if callable(close_async):
            await close_async()
        else:
            await redis_client.close()


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="kyc-relay",
        description="Relay de eventos de verificação de identidade",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": "kyc-relay"})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting kyc-relay in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
