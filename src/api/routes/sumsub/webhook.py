"""Endpoint de webhook do provedor de verificação (Sumsub).

Endpoint:
- POST /webhook/sumsub/: recebimento de eventos de status

Respostas:
- 403: assinatura ausente/inválida ou secret não configurado (Rejected)
- 400: payload ilegível ou sem subject_id recuperável (MalformedInput)
- 413: corpo acima do limite
- 200: aceito (Delivered ou Quarantined); falha do downstream nunca vira
  erro para o provedor

Segurança:
- O corpo é lido como bytes e repassado intacto à verificação HMAC,
  antes de qualquer parse
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status

from app.bootstrap import get_pipeline
from app.domain.verification import RawEvent
from app.observability import (
    CORRELATION_ID_HEADER,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.use_cases.verification import PipelineState
from config.settings import SIGNATURE_HEADER

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BODY_BYTES = 1024 * 1024


def _declared_length(request: Request) -> int | None:
    value = request.headers.get("content-length")
    if value is None or not value.isdigit():
        return None
    return int(value)


def _plain(content: str, status_code: int) -> Response:
    return Response(content=content, media_type="text/plain", status_code=status_code)


@router.post("/", response_model=None)
async def receive_webhook(request: Request) -> Response | dict[str, Any]:
    """Recebimento de eventos de verificação.

    Returns:
        Confirmação de recebimento ou Response de erro.
    """
    token = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))

    try:
        declared = _declared_length(request)
        if declared is not None and declared > MAX_BODY_BYTES:
            return _plain("Payload Too Large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

        # Bytes exatos do wire: a assinatura é calculada sobre eles
        raw_body = await request.body()
        if len(raw_body) > MAX_BODY_BYTES:
            return _plain("Payload Too Large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

        raw_event = RawEvent(
            body=raw_body,
            claimed_signature=request.headers.get(SIGNATURE_HEADER),
        )
        logger.info(
            "webhook_received",
            extra={
                "channel": "sumsub",
                "correlation_id": get_correlation_id(),
                "payload_size": len(raw_body),
                "has_signature": raw_event.claimed_signature is not None,
            },
        )

        result = await get_pipeline().execute(raw_event, get_correlation_id())

        if result.state is PipelineState.REJECTED:
            return _plain("Forbidden", status.HTTP_403_FORBIDDEN)

        if result.is_malformed_input:
            return _plain("Bad Request", status.HTTP_400_BAD_REQUEST)

        return {
            "status": "accepted",
            "state": result.state.value,
            "correlation_id": result.correlation_id,
        }

    finally:
        reset_correlation_id(token)
