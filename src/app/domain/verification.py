"""Modelos de domínio da verificação de identidade.

Define o evento canônico produzido a partir de um webhook do provedor
e o registro de status mantido por sujeito no cache local.

Os dois são imutáveis: o cache substitui o registro inteiro a cada
atualização, nunca o altera no lugar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    """Categoria de ciclo de vida de um evento canônico."""

    CREATED = "Created"
    PENDING = "Pending"
    ON_HOLD = "OnHold"
    REVIEWED = "Reviewed"
    UNCLASSIFIED = "Unclassified"


class ReviewOutcome(StrEnum):
    """Resultado da revisão (apenas para eventos Reviewed)."""

    APPROVED = "Approved"
    REJECTED = "Rejected"
    UNKNOWN = "Unknown"


KNOWN_EVENT_TYPES = frozenset(
    {EventType.CREATED, EventType.PENDING, EventType.ON_HOLD, EventType.REVIEWED}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True, slots=True)
class RawEvent:
    """Webhook recebido, exatamente como chegou.

    Atributos:
        body: Bytes do corpo, capturados antes de qualquer parse
        claimed_signature: Valor do header de assinatura (pode faltar)
        received_at: Momento do recebimento
    """

    body: bytes
    claimed_signature: str | None
    received_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class CanonicalEvent:
    """Representação interna normalizada de um webhook do provedor.

    Atributos:
        event_type: Categoria do evento (Unclassified para tipos desconhecidos)
        subject_id: Identificador externo estável do sujeito
        provider_applicant_id: Identificador do applicant no provedor
        review_outcome: Presente apenas quando event_type == Reviewed
        rejection_reasons: Labels de rejeição na ordem do provedor
        received_at: Momento do recebimento
        provider_type: Tipo original informado pelo provedor
        level_name: Nível de verificação solicitado (quando informado)
        provider_created_at: Timestamp do evento no provedor (quando informado)
        raw: Webhook de origem, apenas para auditoria
    """

    event_type: EventType
    subject_id: str
    provider_applicant_id: str
    review_outcome: ReviewOutcome | None = None
    rejection_reasons: tuple[str, ...] = ()
    received_at: datetime = field(default_factory=_utcnow)
    provider_type: str = ""
    level_name: str | None = None
    provider_created_at: datetime | None = None
    raw: RawEvent | None = field(default=None, compare=False, repr=False)

    @property
    def is_classified(self) -> bool:
        """True se o tipo pertence ao conjunto fechado de tipos conhecidos."""
        return self.event_type in KNOWN_EVENT_TYPES

    def to_dict(self) -> dict[str, Any]:
        """Projeção JSON enviada ao downstream e persistida no dead-letter."""
        return {
            "event_type": self.event_type.value,
            "subject_id": self.subject_id,
            "provider_applicant_id": self.provider_applicant_id,
            "review_outcome": self.review_outcome.value if self.review_outcome else None,
            "rejection_reasons": list(self.rejection_reasons),
            "received_at": self.received_at.isoformat(),
            "provider_type": self.provider_type,
            "level_name": self.level_name,
            "provider_created_at": (
                self.provider_created_at.isoformat() if self.provider_created_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CanonicalEvent:
        """Reconstrói evento persistido (sem o raw, que não é persistido)."""
        outcome = data.get("review_outcome")
        return cls(
            event_type=EventType(data["event_type"]),
            subject_id=data["subject_id"],
            provider_applicant_id=data.get("provider_applicant_id", ""),
            review_outcome=ReviewOutcome(outcome) if outcome else None,
            rejection_reasons=tuple(data.get("rejection_reasons") or ()),
            received_at=_parse_datetime(data.get("received_at")) or _utcnow(),
            provider_type=data.get("provider_type", ""),
            level_name=data.get("level_name"),
            provider_created_at=_parse_datetime(data.get("provider_created_at")),
        )


@dataclass(frozen=True, slots=True)
class StatusRecord:
    """Último status conhecido de um sujeito.

    Atributos:
        subject_id: Identificador externo do sujeito
        last_event_type: Tipo do último evento aplicado
        last_review_outcome: Resultado da última revisão aplicada
        level_name: Nível de verificação solicitado
        created_at: Primeira vez que o sujeito foi visto
        updated_at: Última atualização (ordem real de conclusão)
        last_provider_event_at: Timestamp do provedor do último evento aplicado
    """

    subject_id: str
    last_event_type: EventType
    last_review_outcome: ReviewOutcome | None
    level_name: str | None
    created_at: datetime
    updated_at: datetime
    last_provider_event_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serializa para resposta de API."""
        return {
            "subject_id": self.subject_id,
            "last_event_type": self.last_event_type.value,
            "last_review_outcome": (
                self.last_review_outcome.value if self.last_review_outcome else None
            ),
            "level_name": self.level_name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "last_provider_event_at": (
                self.last_provider_event_at.isoformat()
                if self.last_provider_event_at
                else None
            ),
        }
