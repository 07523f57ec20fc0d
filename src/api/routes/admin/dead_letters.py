"""Endpoints administrativos do dead-letter.

Endpoints:
- GET    /admin/dead-letters             entradas pendentes
- POST   /admin/dead-letters/replay      replay (?include_permanent=true)
- DELETE /admin/dead-letters/{entry_id}  purge manual
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from api.routes.admin.auth import unauthorized
from app.bootstrap import get_dead_letter_store, get_replay_use_case
from app.protocols import DeadLetterEntryBusyError
from utils.errors import DeadLetterStorageError

logger = logging.getLogger(__name__)

router = APIRouter()


def _storage_unavailable() -> JSONResponse:
    return JSONResponse(
        content={"error": "dead_letter_unavailable"},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


@router.get("/dead-letters", response_model=None)
async def list_dead_letters(request: Request) -> Response | dict[str, Any]:
    """Entradas pendentes, mais antigas primeiro."""
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        entries = await get_dead_letter_store().list_pending()
    except DeadLetterStorageError:
        return _storage_unavailable()
    return {"count": len(entries), "entries": [entry.to_dict() for entry in entries]}


@router.post("/dead-letters/replay", response_model=None)
async def replay_dead_letters(request: Request) -> Response | dict[str, Any]:
    """Uma passada de replay do dead-letter."""
    if (denied := unauthorized(request)) is not None:
        return denied
    include_permanent = request.query_params.get("include_permanent", "").lower() in (
        "true",
        "1",
        "yes",
    )
    try:
        summary = await get_replay_use_case().execute(include_permanent=include_permanent)
    except DeadLetterStorageError:
        return _storage_unavailable()
    return summary.to_dict()


@router.delete("/dead-letters/{entry_id}", response_model=None)
async def purge_dead_letter(entry_id: str, request: Request) -> Response | dict[str, Any]:
    """Remove entrada manualmente (409 se estiver em replay)."""
    if (denied := unauthorized(request)) is not None:
        return denied
    try:
        removed = await get_dead_letter_store().purge(entry_id)
    except DeadLetterEntryBusyError:
        return JSONResponse(content={"error": "entry_busy"}, status_code=status.HTTP_409_CONFLICT)
    except DeadLetterStorageError:
        return _storage_unavailable()
    if not removed:
        return JSONResponse(content={"error": "not_found"}, status_code=status.HTTP_404_NOT_FOUND)
    logger.info("dead_letter_purged_by_operator", extra={"entry_id": entry_id})
    return {"status": "purged", "entry_id": entry_id}
