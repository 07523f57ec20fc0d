"""Router administrativo: agrega status de verificação e dead-letter."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.admin.dead_letters import router as dead_letters_router
from api.routes.admin.verifications import router as verifications_router

router = APIRouter()

router.include_router(verifications_router)
router.include_router(dead_letters_router)
