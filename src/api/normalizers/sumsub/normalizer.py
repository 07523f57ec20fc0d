"""Normalizer Sumsub: converte webhooks e documentos de status em eventos canônicos.

Classificação fechada:

    applicantCreated  -> Created
    applicantPending  -> Pending
    applicantOnHold   -> OnHold
    applicantReviewed -> Reviewed (completed -> Approved, rejected -> Rejected,
                                   demais -> Unknown)

Tipos fora da tabela viram eventos `Unclassified`, distinguíveis dos quatro
conhecidos, para que a auditoria não perca nada em silêncio.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.verification import CanonicalEvent, EventType, ReviewOutcome

from .extractor import (
    MalformedPayloadError,
    extract_applicant_id,
    extract_event_type,
    extract_optional_str,
    extract_reject_labels,
    extract_review_result,
    extract_review_status,
    parse_body,
    parse_provider_timestamp,
    recover_subject_id,
)

if TYPE_CHECKING:
    from app.domain.verification import RawEvent

logger = logging.getLogger(__name__)

EVENT_TYPE_MAP: dict[str, EventType] = {
    "applicantCreated": EventType.CREATED,
    "applicantPending": EventType.PENDING,
    "applicantOnHold": EventType.ON_HOLD,
    "applicantReviewed": EventType.REVIEWED,
}

# Status da API de status (review.reviewStatus) -> tipo canônico
APPLICANT_STATUS_MAP: dict[str, EventType] = {
    "init": EventType.CREATED,
    "pending": EventType.PENDING,
    "queued": EventType.PENDING,
    "prechecked": EventType.PENDING,
    "onHold": EventType.ON_HOLD,
    "completed": EventType.REVIEWED,
}


def classify_review_outcome(review_status: str | None) -> ReviewOutcome:
    """Resultado da revisão a partir do status interno (reviewAnswer não entra)."""
    if review_status == "rejected":
        return ReviewOutcome.REJECTED
    if review_status == "completed":
        return ReviewOutcome.APPROVED
    return ReviewOutcome.UNKNOWN


def normalize_event(payload: dict[str, Any], raw: RawEvent | None = None) -> CanonicalEvent:
    """Normaliza webhook parseado em evento canônico.

    Args:
        payload: JSON do webhook
        raw: Webhook de origem (apenas referência de auditoria)

    Raises:
        MalformedPayloadError: Campos obrigatórios ausentes ou com tipo errado
        MissingSubjectIdError: subject_id irrecuperável

    Returns:
        CanonicalEvent (Unclassified para tipos desconhecidos)
    """
    provider_type = extract_event_type(payload)
    applicant_id = extract_applicant_id(payload)
    subject_id = recover_subject_id(applicant_id)

    event_type = EVENT_TYPE_MAP.get(provider_type, EventType.UNCLASSIFIED)
    if event_type is EventType.UNCLASSIFIED:
        logger.info("unknown_event_type_received", extra={"provider_type": provider_type})

    review_outcome: ReviewOutcome | None = None
    rejection_reasons: tuple[str, ...] = ()
    if event_type is EventType.REVIEWED:
        review_result = extract_review_result(payload)
        review_outcome = classify_review_outcome(extract_review_status(payload, review_result))
        if review_outcome is ReviewOutcome.REJECTED:
            rejection_reasons = extract_reject_labels(review_result)

    return CanonicalEvent(
        event_type=event_type,
        subject_id=subject_id,
        provider_applicant_id=applicant_id,
        review_outcome=review_outcome,
        rejection_reasons=rejection_reasons,
        received_at=raw.received_at if raw is not None else datetime.now(UTC),
        provider_type=provider_type,
        level_name=extract_optional_str(payload, "levelName"),
        provider_created_at=parse_provider_timestamp(
            payload.get("createdAtMs") or payload.get("createdAt")
        ),
        raw=raw,
    )


def normalize_applicant_document(document: dict[str, Any], subject_id: str) -> CanonicalEvent:
    """Converte o documento da API de status em evento canônico.

    Usado para popular o cache num cache miss.

    Args:
        document: Resposta de /applicants/-;externalUserId={id}/one
        subject_id: Sujeito consultado

    Raises:
        MalformedPayloadError: `review` ausente ou com tipo errado
    """
    review = document.get("review")
    if not isinstance(review, dict):
        raise MalformedPayloadError("missing_review")

    review_status = extract_optional_str(review, "reviewStatus")
    event_type = APPLICANT_STATUS_MAP.get(review_status or "", EventType.UNCLASSIFIED)

    review_outcome: ReviewOutcome | None = None
    rejection_reasons: tuple[str, ...] = ()
    if event_type is EventType.REVIEWED:
        review_result = extract_review_result(review)
        answer = extract_optional_str(review_result, "reviewAnswer")
        if answer == "GREEN":
            review_outcome = ReviewOutcome.APPROVED
        elif answer == "RED":
            review_outcome = ReviewOutcome.REJECTED
            rejection_reasons = extract_reject_labels(review_result)
        else:
            review_outcome = ReviewOutcome.UNKNOWN

    applicant_id = extract_optional_str(document, "id") or subject_id
    return CanonicalEvent(
        event_type=event_type,
        subject_id=subject_id,
        provider_applicant_id=applicant_id,
        review_outcome=review_outcome,
        rejection_reasons=rejection_reasons,
        provider_type=f"status:{review_status or 'unknown'}",
        level_name=extract_optional_str(review, "levelName")
        or extract_optional_str(document, "levelName"),
        provider_created_at=parse_provider_timestamp(review.get("reviewDate")),
    )


class SumsubEventNormalizer:
    """Normalizer de webhooks Sumsub (implementa EventNormalizerProtocol)."""

    def parse(self, body: bytes) -> dict[str, Any]:
        """Parseia o corpo bruto (MalformedPayloadError se ilegível)."""
        return parse_body(body)

    def normalize(self, payload: dict[str, Any], raw: RawEvent | None = None) -> CanonicalEvent:
        return normalize_event(payload, raw)

    def normalize_status_document(self, document: dict[str, Any], subject_id: str) -> CanonicalEvent:
        return normalize_applicant_document(document, subject_id)
