"""Protocolos de normalização inbound.

Os erros de normalização ficam aqui para que o orquestrador os trate sem
depender da camada api.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.verification import CanonicalEvent, RawEvent


class NormalizationError(ValueError):
    """Erro base de normalização."""


class MalformedPayloadError(NormalizationError):
    """Payload ilegível ou fora do formato esperado."""


class MissingSubjectIdError(NormalizationError):
    """Não foi possível recuperar um subject_id não vazio."""


class EventNormalizerProtocol(Protocol):
    """Contrato mínimo para normalização de webhook do provedor.

    Tipos desconhecidos não levantam erro: viram evento Unclassified.
    """

    def parse(self, body: bytes) -> dict[str, Any]:
        """Parse dos bytes exatos do corpo (MalformedPayloadError se ilegível)."""
        ...

    def normalize(
        self,
        payload: dict[str, Any],
        raw: RawEvent | None = None,
    ) -> CanonicalEvent: ...

    def normalize_status_document(
        self,
        document: dict[str, Any],
        subject_id: str,
    ) -> CanonicalEvent:
        """Converte documento da API de status (cache miss)."""
        ...
