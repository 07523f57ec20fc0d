"""Protocolos e contratos do core da aplicação."""

from .authenticator import AuthenticationFailedError, WebhookAuthenticatorProtocol
from .dead_letter_store import DeadLetterEntryBusyError, DeadLetterStoreProtocol
from .forwarder import ForwarderProtocol
from .normalizer import (
    EventNormalizerProtocol,
    MalformedPayloadError,
    MissingSubjectIdError,
    NormalizationError,
)
from .provider_client import ProviderStatusClientProtocol
from .status_cache import StatusCacheProtocol

__all__ = [
    "AuthenticationFailedError",
    "DeadLetterEntryBusyError",
    "DeadLetterStoreProtocol",
    "EventNormalizerProtocol",
    "ForwarderProtocol",
    "MalformedPayloadError",
    "MissingSubjectIdError",
    "NormalizationError",
    "ProviderStatusClientProtocol",
    "StatusCacheProtocol",
    "WebhookAuthenticatorProtocol",
]
