"""Settings específicas do provedor de verificação (Sumsub).

Credenciais da API de status e secret de assinatura dos webhooks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

SUMSUB_API_BASE_URL: str = "https://api.sumsub.com"
SIGNATURE_HEADER: str = "x-payload-digest"


@dataclass(frozen=True)
class SumsubSettings:
    """Configurações do provedor Sumsub.

    Attributes:
        app_token: Token da aplicação (X-App-Token)
        secret_key: Secret para assinar requisições à API
        api_base_url: URL base da API
        webhook_secret: Secret para validação HMAC dos webhooks
        allow_unsigned_webhooks: Modo inseguro explícito; aceita webhooks sem
            verificação quando o secret não está configurado (só development)
        request_timeout_seconds: Timeout das chamadas à API de status
    """

    # Credenciais
    app_token: str = ""
    secret_key: str = ""
    api_base_url: str = SUMSUB_API_BASE_URL

    # Webhook
    webhook_secret: str = ""
    allow_unsigned_webhooks: bool = False

    # Timeouts
    request_timeout_seconds: float = 15.0

    def validate(self, environment: str = "development") -> list[str]:
        """Valida configurações mínimas do provedor.

        Args:
            environment: Ambiente atual (development|staging|production)

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.webhook_secret:
            if not self.allow_unsigned_webhooks:
                errors.append("SUMSUB_WEBHOOK_SECRET não configurado")
            elif environment != "development":
                errors.append(
                    "SUMSUB_ALLOW_UNSIGNED_WEBHOOKS só é permitido em development"
                )

        if not self.app_token:
            errors.append("SUMSUB_APP_TOKEN não configurado")

        if not self.secret_key:
            errors.append("SUMSUB_SECRET_KEY não configurado")

        if self.request_timeout_seconds <= 0:
            errors.append("SUMSUB_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_from_env() -> SumsubSettings:
    """Carrega SumsubSettings a partir de variáveis de ambiente."""
    return SumsubSettings(
        app_token=os.getenv("SUMSUB_APP_TOKEN", ""),
        secret_key=os.getenv("SUMSUB_SECRET_KEY", ""),
        api_base_url=os.getenv("SUMSUB_BASE_URL", SUMSUB_API_BASE_URL).rstrip("/"),
        webhook_secret=os.getenv("SUMSUB_WEBHOOK_SECRET", ""),
        allow_unsigned_webhooks=os.getenv(
            "SUMSUB_ALLOW_UNSIGNED_WEBHOOKS", ""
        ).lower() in ("true", "1", "yes"),
        request_timeout_seconds=float(
            os.getenv("SUMSUB_REQUEST_TIMEOUT_SECONDS", "15")
        ),
    )


@lru_cache(maxsize=1)
def get_sumsub_settings() -> SumsubSettings:
    """Retorna instância cacheada de SumsubSettings.

    A cache garante singleton para múltiplas injeções.
    """
    return _load_from_env()
