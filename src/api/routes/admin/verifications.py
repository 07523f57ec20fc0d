"""Endpoints administrativos de status de verificação.

Endpoints:
- GET  /admin/verifications/{subject_id}            status (read-through)
- POST /admin/verifications/{subject_id}/reset      reset no provedor + evict
- GET  /admin/verifications/{subject_id}/documents  documentos exigidos
- GET  /admin/verifications/{subject_id}/history    histórico de revisão
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from api.routes.admin.auth import unauthorized
from app.bootstrap import get_status_service
from utils.errors import ProviderRequestError, ProviderUnavailableError

router = APIRouter()


def _provider_error(exc: Exception) -> JSONResponse:
    if isinstance(exc, ProviderRequestError):
        status_code = (
            status.HTTP_404_NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else status.HTTP_502_BAD_GATEWAY
        )
        return JSONResponse(
            content={"error": "provider_request_rejected", "description": exc.description},
            status_code=status_code,
        )
    return JSONResponse(
        content={"error": "provider_unavailable"},
        status_code=status.HTTP_502_BAD_GATEWAY,
    )


@router.get("/verifications/{subject_id}", response_model=None)
async def get_verification_status(subject_id: str, request: Request) -> Response | dict[str, Any]:
    """Status atual do sujeito (cache, com fallback ao provedor)."""
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        record = await get_status_service().get_status(subject_id)
    except (ProviderRequestError, ProviderUnavailableError) as exc:
        return _provider_error(exc)
    return record.to_dict()


@router.post("/verifications/{subject_id}/reset", response_model=None)
async def reset_verification(subject_id: str, request: Request) -> Response | dict[str, Any]:
    """Reseta o perfil no provedor e remove o status local."""
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        evicted = await get_status_service().reset_profile(subject_id)
    except (ProviderRequestError, ProviderUnavailableError) as exc:
        return _provider_error(exc)
    return {"status": "reset", "evicted": evicted}


@router.get("/verifications/{subject_id}/documents", response_model=None)
async def get_required_documents(subject_id: str, request: Request) -> Response | dict[str, Any]:
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        return await get_status_service().get_required_docs(subject_id)
    except (ProviderRequestError, ProviderUnavailableError) as exc:
        return _provider_error(exc)


@router.get("/verifications/{subject_id}/history", response_model=None)
async def get_review_history(subject_id: str, request: Request) -> Response | dict[str, Any]:
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        return await get_status_service().get_review_history(subject_id)
    except (ProviderRequestError, ProviderUnavailableError) as exc:
        return _provider_error(exc)
