"""Agregador de rotas: registra todos os routers do serviço.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.admin.router import router as admin_router
from api.routes.health.router import router as health_router
from api.routes.sumsub.router import router as sumsub_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    # Provedor de verificação
    api_router.include_router(sumsub_router, prefix="/webhook/sumsub", tags=["sumsub"])

    # Operação (status, reset, dead-letter)
    api_router.include_router(admin_router, prefix="/admin", tags=["admin"])

    return api_router
