"""Forwarder: entrega do evento canônico ao sistema de registro.

Uma chamada por evento, com timeout total limitado e sem retry: recuperar
falhas é papel do replay do dead-letter. Nunca levanta exceção; toda falha
vira `Failed` classificada:

    timeout / transporte / 5xx / 429 / resposta malformada -> Transient
    erro inesperado do cliente HTTP                          -> Transient
    4xx (payload recusado)                                 -> Permanent
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from app.domain.delivery import Delivered, Failed, FailureKind
from app.infra.http import HttpClient, HttpClientConfig, HttpError
from config.settings import get_downstream_settings

if TYPE_CHECKING:
    import httpx

    from app.domain.delivery import DeliveryResult
    from app.domain.verification import CanonicalEvent
    from config.settings import DownstreamSettings

logger = logging.getLogger(__name__)

WEBHOOK_SOURCE_HEADER = "X-Webhook-Source"
WEBHOOK_SOURCE = "sumsub"


def build_downstream_payload(event: CanonicalEvent) -> dict[str, Any]:
    """Projeção JSON enviada ao downstream."""
    return event.to_dict()


class DownstreamForwarder:
    """Entrega eventos ao downstream (implementa ForwarderProtocol).

    Args:
        settings: Configuração do downstream
        http_client: Cliente HTTP (sem retry); criado a partir de settings se omitido
    """

    def __init__(
        self,
        settings: DownstreamSettings,
        http_client: HttpClient | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client or HttpClient(
            HttpClientConfig(timeout_seconds=settings.timeout_seconds, max_retries=0)
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.service_token}",
            "Content-Type": "application/json",
            WEBHOOK_SOURCE_HEADER: WEBHOOK_SOURCE,
        }

    async def forward(self, event: CanonicalEvent) -> DeliveryResult:
        """Entrega o evento uma única vez.

        Returns:
            Delivered(ack) ou Failed(kind, detail)
        """
        try:
            response = await asyncio.wait_for(
                self._http.post(
                    self._settings.webhook_url,
                    json=build_downstream_payload(event),
                    headers=self._headers(),
                ),
                timeout=self._settings.timeout_seconds,
            )
        except TimeoutError:
            return self._failed(FailureKind.TRANSIENT, "downstream_timeout")
        except HttpError as exc:
            return self._failed(FailureKind.TRANSIENT, str(exc), exc.status_code)
        except Exception as exc:
            logger.exception("event_forward_unexpected_error", extra={"error_type": type(exc).__name__})
            return self._failed(FailureKind.TRANSIENT, "downstream_unexpected_error")

        return self._classify(response)

    def _classify(self, response: httpx.Response) -> DeliveryResult:
        status = response.status_code
        if 400 <= status < 500:
            return self._failed(FailureKind.PERMANENT, "downstream_rejected", status)
        if not 200 <= status < 300:
            return self._failed(FailureKind.TRANSIENT, "downstream_unexpected_status", status)

        if not response.content:
            return Delivered(status_code=status, ack={})
        try:
            ack = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return self._failed(FailureKind.TRANSIENT, "downstream_malformed_response", status)
        if not isinstance(ack, dict):
            return self._failed(FailureKind.TRANSIENT, "downstream_malformed_response", status)

        logger.debug("event_forwarded", extra={"status_code": status})
        return Delivered(status_code=status, ack=ack)

    @staticmethod
    def _failed(kind: FailureKind, detail: str, status_code: int | None = None) -> Failed:
        logger.warning(
            "event_forward_failed",
            extra={"failure_kind": kind.value, "detail": detail, "status_code": status_code},
        )
        return Failed(kind=kind, detail=detail, status_code=status_code)


def create_downstream_forwarder(settings: DownstreamSettings | None = None) -> DownstreamForwarder:
    """Factory do Forwarder a partir das settings de ambiente."""
    return DownstreamForwarder(settings or get_downstream_settings())
