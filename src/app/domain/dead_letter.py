"""Modelo de entrada de dead-letter.

Uma entrada guarda o evento canônico que não chegou ao downstream (ou o
payload bruto, quando a própria normalização falhou), com o motivo e o
histórico de tentativas.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from app.domain.verification import CanonicalEvent


class FailureReason(StrEnum):
    """Motivo pelo qual o evento foi para o dead-letter."""

    TRANSIENT = "Transient"
    PERMANENT = "Permanent"
    UNKNOWN_EVENT_TYPE = "UnknownEventType"
    MALFORMED_PAYLOAD = "MalformedPayload"
    MISSING_SUBJECT_ID = "MissingSubjectId"


# Motivos que nunca devem ser reenviados automaticamente ao downstream
NON_REPLAYABLE_REASONS = frozenset(
    {
        FailureReason.UNKNOWN_EVENT_TYPE,
        FailureReason.MALFORMED_PAYLOAD,
        FailureReason.MISSING_SUBJECT_ID,
    }
)


@dataclass(frozen=True, slots=True)
class DeadLetterEntry:
    """Evento aguardando replay ou ação do operador.

    Atributos:
        entry_id: Identificador opaco da entrada
        failure_reason: Classificação da falha
        failure_detail: Detalhe técnico da falha (sem PII)
        attempt_count: Tentativas de entrega feitas até agora
        first_failed_at: Momento da primeira falha
        last_attempt_at: Momento da última tentativa
        event: Evento canônico (None se a normalização falhou)
        raw_payload: Payload bruto decodificado (apenas se event for None)
    """

    entry_id: str
    failure_reason: FailureReason
    failure_detail: str
    attempt_count: int
    first_failed_at: datetime
    last_attempt_at: datetime
    event: CanonicalEvent | None = None
    raw_payload: str | None = None

    @classmethod
    def create(
        cls,
        *,
        failure_reason: FailureReason,
        failure_detail: str = "",
        event: CanonicalEvent | None = None,
        raw_payload: str | None = None,
    ) -> DeadLetterEntry:
        """Cria entrada para a primeira falha."""
        now = datetime.now(UTC)
        return cls(
            entry_id=uuid.uuid4().hex,
            failure_reason=failure_reason,
            failure_detail=failure_detail,
            attempt_count=1,
            first_failed_at=now,
            last_attempt_at=now,
            event=event,
            raw_payload=raw_payload,
        )

    @property
    def is_replayable(self) -> bool:
        """True se existe um evento classificado que pode ser reenviado."""
        return (
            self.event is not None
            and self.event.is_classified
            and self.failure_reason not in NON_REPLAYABLE_REASONS
        )

    def with_attempt(self, at: datetime | None = None) -> DeadLetterEntry:
        """Retorna cópia com mais uma tentativa registrada."""
        return replace(
            self,
            attempt_count=self.attempt_count + 1,
            last_attempt_at=at or datetime.now(UTC),
        )

    def with_failure(self, reason: FailureReason, detail: str) -> DeadLetterEntry:
        """Retorna cópia com o motivo da falha mais recente."""
        return replace(self, failure_reason=reason, failure_detail=detail)

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência."""
        return {
            "entry_id": self.entry_id,
            "failure_reason": self.failure_reason.value,
            "failure_detail": self.failure_detail,
            "attempt_count": self.attempt_count,
            "first_failed_at": self.first_failed_at.isoformat(),
            "last_attempt_at": self.last_attempt_at.isoformat(),
            "event": self.event.to_dict() if self.event else None,
            "raw_payload": self.raw_payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeadLetterEntry:
        """Deserializa de persistência."""
        event_data = data.get("event")
        return cls(
            entry_id=data["entry_id"],
            failure_reason=FailureReason(data["failure_reason"]),
            failure_detail=data.get("failure_detail", ""),
            attempt_count=int(data.get("attempt_count", 1)),
            first_failed_at=datetime.fromisoformat(data["first_failed_at"]),
            last_attempt_at=datetime.fromisoformat(data["last_attempt_at"]),
            event=CanonicalEvent.from_dict(event_data) if event_data else None,
            raw_payload=data.get("raw_payload"),
        )


@dataclass(frozen=True, slots=True)
class ReplaySummary:
    """Resultado de uma passada de replay do dead-letter."""

    delivered: int = 0
    failed: int = 0
    skipped: int = 0
    delivered_ids: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "delivered": self.delivered,
            "failed": self.failed,
            "skipped": self.skipped,
            "delivered_ids": list(self.delivered_ids),
        }
