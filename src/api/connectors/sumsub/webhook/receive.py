"""Autenticação inicial do webhook (sem PII)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.authenticator import AuthenticationFailedError
from config.logging import log_fallback

from ..signature import (
    MISSING_SIGNATURE,
    VERIFICATION_SKIPPED,
    SignatureResult,
    verify_payload_digest,
)

if TYPE_CHECKING:
    from app.domain.verification import RawEvent

logger = logging.getLogger(__name__)


class WebhookRequestError(AuthenticationFailedError):
    """Erro base para falhas de autenticação do webhook."""


class MissingSignatureError(WebhookRequestError):
    """Header de assinatura ausente."""


class InvalidSignatureError(WebhookRequestError):
    """Assinatura não confere com o corpo recebido."""


class VerificationSkippedError(WebhookRequestError):
    """Secret não configurado e modo inseguro não habilitado."""


def authenticate_webhook(
    raw_event: RawEvent,
    secret: str | None,
    *,
    allow_unsigned: bool = False,
) -> SignatureResult:
    """Autentica o webhook ou levanta erro.

    Sem secret configurado o padrão é recusar tudo. Aceitar sem verificar
    exige `allow_unsigned=True` (modo inseguro, apenas development) e gera
    log de fallback a cada requisição.

    Args:
        raw_event: Webhook com os bytes exatos do corpo
        secret: Secret do webhook
        allow_unsigned: Modo inseguro explícito

    Raises:
        VerificationSkippedError: Secret ausente sem modo inseguro
        MissingSignatureError: Header ausente
        InvalidSignatureError: Assinatura divergente

    Returns:
        SignatureResult (valid=True, ou skipped=True no modo inseguro)
    """
    result = verify_payload_digest(raw_event.body, raw_event.claimed_signature, secret)
    if result.valid:
        return result

    if result.error == VERIFICATION_SKIPPED:
        if not allow_unsigned:
            raise VerificationSkippedError(VERIFICATION_SKIPPED)
        log_fallback(
            logger,
            "webhook_signature",
            reason="unsafe_unsigned_mode",
            level=logging.WARNING,
        )
        return result

    if result.error == MISSING_SIGNATURE:
        raise MissingSignatureError(MISSING_SIGNATURE)

    raise InvalidSignatureError(result.error or "invalid_signature")


class SumsubWebhookAuthenticator:
    """Autenticador do webhook (implementa WebhookAuthenticatorProtocol)."""

    def __init__(self, secret: str | None, *, allow_unsigned: bool = False) -> None:
        self._secret = secret
        self._allow_unsigned = allow_unsigned

    def authenticate(self, raw_event: RawEvent) -> None:
        authenticate_webhook(raw_event, self._secret, allow_unsigned=self._allow_unsigned)
