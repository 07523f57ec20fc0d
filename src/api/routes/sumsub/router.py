"""Router do provedor de verificação (Sumsub)."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.sumsub.webhook import router as webhook_router

router = APIRouter()

router.include_router(webhook_router)
