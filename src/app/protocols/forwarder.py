"""Protocolo de entrega ao sistema de registro downstream."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.delivery import DeliveryResult
    from app.domain.verification import CanonicalEvent


class ForwarderProtocol(Protocol):
    """Contrato mínimo do Forwarder: uma chamada, sem retry, sem exceções."""

    async def forward(self, event: CanonicalEvent) -> DeliveryResult: ...
