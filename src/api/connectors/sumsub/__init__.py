"""Conector Sumsub: assinatura de webhooks e API de status."""

from .http_client import SumsubHttpClient, create_sumsub_http_client
from .signature import SignatureResult, compute_payload_digest, verify, verify_payload_digest

__all__ = [
    "SignatureResult",
    "SumsubHttpClient",
    "compute_payload_digest",
    "create_sumsub_http_client",
    "verify",
    "verify_payload_digest",
]
