"""Autenticação dos endpoints administrativos (Bearer ADMIN_API_TOKEN).

Token vazio na configuração nega todas as chamadas.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from config.settings import get_base_settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def unauthorized(request: Request) -> Response | None:
    """Retorna 401 se o Bearer token não confere (None = autorizado)."""
    expected = get_base_settings().admin_api_token
    header = request.headers.get("authorization", "")
    provided = header[len(BEARER_PREFIX):] if header.startswith(BEARER_PREFIX) else ""

    if expected and provided and hmac.compare_digest(expected.encode(), provided.encode()):
        return None

    logger.warning("admin_unauthorized", extra={"path": request.url.path})
    return JSONResponse(
        content={"error": "unauthorized"},
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )
