"""Normalizers: conversão de payloads externos para eventos canônicos.

Estrutura:
- sumsub/: webhooks e documentos de status do provedor de verificação

Cada provedor tem seu próprio extractor e normalizer, mantendo SRP.
"""

from .sumsub import SumsubEventNormalizer, normalize_applicant_document, normalize_event

__all__ = [
    "SumsubEventNormalizer",
    "normalize_applicant_document",
    "normalize_event",
]
