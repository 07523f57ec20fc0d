"""Extrator de campos dos webhooks Sumsub.

Responsabilidades:
- Parse do corpo bruto em objeto JSON
- Recuperação do subject_id a partir do applicantId
- Extração de status de revisão, labels de rejeição e timestamps

Não faz classificação - apenas extração estrutural, falhando fechado
quando um campo obrigatório está ausente ou com tipo errado.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from app.protocols.normalizer import (
    MalformedPayloadError,
    MissingSubjectIdError,
    NormalizationError,
)

EXTERNAL_ID_MARKER = ";externalUserId="

# Formatos de timestamp usados pelo provedor (createdAtMs / createdAt)
_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
)


__all__ = [
    "EXTERNAL_ID_MARKER",
    "MalformedPayloadError",
    "MissingSubjectIdError",
    "NormalizationError",
    "extract_applicant_id",
    "extract_event_type",
    "extract_optional_str",
    "extract_reject_labels",
    "extract_review_result",
    "extract_review_status",
    "parse_body",
    "parse_provider_timestamp",
    "recover_subject_id",
]


def parse_body(body: bytes) -> dict[str, Any]:
    """Parseia o corpo bruto em dict.

    Raises:
        MalformedPayloadError: JSON inválido ou não-objeto
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedPayloadError("invalid_json") from exc

    if not isinstance(payload, dict):
        raise MalformedPayloadError("payload_not_object")
    return payload


def extract_event_type(payload: dict[str, Any]) -> str:
    """Tipo do evento informado pelo provedor."""
    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise MalformedPayloadError("missing_type")
    return event_type


def extract_applicant_id(payload: dict[str, Any]) -> str:
    """applicantId como enviado pelo provedor."""
    applicant_id = payload.get("applicantId")
    if not isinstance(applicant_id, str) or not applicant_id.strip():
        raise MissingSubjectIdError("missing_applicant_id")
    return applicant_id


def recover_subject_id(applicant_id: str) -> str:
    """Recupera o id externo embutido no applicantId.

    Com o marcador presente, usa o restante após a primeira ocorrência;
    sem marcador, o próprio applicantId é o subject_id.

    Raises:
        MissingSubjectIdError: Marcador presente mas sem id após ele
    """
    if EXTERNAL_ID_MARKER in applicant_id:
        _, _, subject_id = applicant_id.partition(EXTERNAL_ID_MARKER)
    else:
        subject_id = applicant_id
    subject_id = subject_id.strip()
    if not subject_id:
        raise MissingSubjectIdError("unrecoverable_subject_id")
    return subject_id


def extract_review_result(container: dict[str, Any]) -> dict[str, Any]:
    """Objeto reviewResult (vazio se ausente)."""
    review_result = container.get("reviewResult")
    if review_result is None:
        return {}
    if not isinstance(review_result, dict):
        raise MalformedPayloadError("review_result_not_object")
    return review_result


def extract_review_status(payload: dict[str, Any], review_result: dict[str, Any]) -> str | None:
    """Status de revisão: reviewResult.reviewStatus, senão reviewStatus do topo."""
    status = review_result.get("reviewStatus", payload.get("reviewStatus"))
    return status if isinstance(status, str) else None


def extract_reject_labels(review_result: dict[str, Any]) -> tuple[str, ...]:
    """Labels de rejeição na ordem original (vazio se ausentes)."""
    labels = review_result.get("rejectLabels")
    if labels is None:
        return ()
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        raise MalformedPayloadError("reject_labels_not_string_list")
    return tuple(labels)


def extract_optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) and value else None


def parse_provider_timestamp(value: Any) -> datetime | None:
    """Converte timestamp do provedor para datetime UTC (None se ilegível)."""
    if not isinstance(value, str) or not value:
        return None
    for fmt in _TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None
