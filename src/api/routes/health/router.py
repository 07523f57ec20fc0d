"""Endpoints de health check (liveness e readiness)."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.infra.http import HttpError

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "kyc-relay"


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe: verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe.

    O dead-letter é crítico: sem ele falhas de entrega se perderiam. O
    downstream indisponível apenas degrada (eventos vão para o dead-letter).
    """
    state = request.app.state
    dead_letter_check, downstream_check = await asyncio.gather(
        _check_dead_letter(getattr(state, "dead_letter_store", None)),
        _check_downstream(
            getattr(state, "downstream_http_client", None),
            getattr(state, "downstream_health_url", None),
        ),
    )

    ready = dead_letter_check.status == "ok"

    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "dead_letter": dead_letter_check.as_dict(),
            "downstream": downstream_check.as_dict(),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_dead_letter(store: Any | None) -> DependencyCheck:
    if store is None:
        return DependencyCheck(status="failed", error="not_configured")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(store.ping(), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


async def _check_downstream(http_client: Any | None, health_url: str | None) -> DependencyCheck:
    if http_client is None or not health_url:
        return DependencyCheck(status="degraded", error="not_configured")
    started_at = time.perf_counter()
    try:
        response = await asyncio.wait_for(http_client.get(health_url), timeout=3.0)
    except TimeoutError:
        return DependencyCheck(status="degraded", error="timeout")
    except HttpError as exc:
        logger.warning("readiness_downstream_check_failed", extra={"error": str(exc)})
        return DependencyCheck(status="degraded", error=str(exc))
    latency_ms = round((time.perf_counter() - started_at) * 1000, 2)
    if response.status_code >= 400:
        return DependencyCheck(
            status="degraded",
            latency_ms=latency_ms,
            error=f"status_{response.status_code}",
        )
    return DependencyCheck(status="ok", latency_ms=latency_ms)
