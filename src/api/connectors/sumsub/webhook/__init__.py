"""Webhook Sumsub: assinatura e autenticação segura."""

from ..signature import SignatureResult, verify_payload_digest
from .receive import (
    InvalidSignatureError,
    MissingSignatureError,
    SumsubWebhookAuthenticator,
    VerificationSkippedError,
    WebhookRequestError,
    authenticate_webhook,
)

__all__ = [
    "InvalidSignatureError",
    "MissingSignatureError",
    "SignatureResult",
    "SumsubWebhookAuthenticator",
    "VerificationSkippedError",
    "WebhookRequestError",
    "authenticate_webhook",
    "verify_payload_digest",
]
