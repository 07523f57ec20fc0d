"""Normalizer Sumsub: extração e classificação de webhooks."""

from .extractor import (
    EXTERNAL_ID_MARKER,
    MalformedPayloadError,
    MissingSubjectIdError,
    NormalizationError,
    parse_body,
    recover_subject_id,
)
from .normalizer import (
    EVENT_TYPE_MAP,
    SumsubEventNormalizer,
    normalize_applicant_document,
    normalize_event,
)

__all__ = [
    "EVENT_TYPE_MAP",
    "EXTERNAL_ID_MARKER",
    "MalformedPayloadError",
    "MissingSubjectIdError",
    "NormalizationError",
    "SumsubEventNormalizer",
    "normalize_applicant_document",
    "normalize_event",
    "parse_body",
    "recover_subject_id",
]
