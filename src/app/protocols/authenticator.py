"""Protocolo de autenticação do webhook inbound."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.verification import RawEvent


class AuthenticationFailedError(ValueError):
    """Webhook não autenticado: terminal, nunca chega ao cache nem ao downstream."""


class WebhookAuthenticatorProtocol(Protocol):
    """Autentica os bytes exatos recebidos contra o secret compartilhado.

    Operação local (CPU apenas). Levanta AuthenticationFailedError ou
    subclasse quando o webhook não pode ser aceito.
    """

    def authenticate(self, raw_event: RawEvent) -> None: ...
