"""Settings do sistema de registro downstream.

O downstream recebe o evento canônico via Forwarder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_WEBHOOK_PATH: str = "kyc/webhook/"


@dataclass(frozen=True)
class DownstreamSettings:
    """Configurações do downstream.

    Attributes:
        base_url: URL base do sistema de registro
        service_token: Bearer token de serviço
        webhook_path: Caminho relativo que recebe os eventos
        timeout_seconds: Timeout total de uma entrega
    """

    base_url: str = ""
    service_token: str = ""
    webhook_path: str = DEFAULT_WEBHOOK_PATH
    timeout_seconds: float = 5.0

    @property
    def webhook_url(self) -> str:
        """URL completa de entrega dos eventos."""
        return f"{self.base_url.rstrip('/')}/{self.webhook_path.lstrip('/')}"

    @property
    def health_url(self) -> str:
        """URL do health check do downstream."""
        return f"{self.base_url.rstrip('/')}/health/"

    def validate(self) -> list[str]:
        """Valida configurações do downstream.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.base_url:
            errors.append("DOWNSTREAM_BASE_URL não configurado")

        if not self.service_token:
            errors.append("DOWNSTREAM_SERVICE_TOKEN não configurado")

        if self.timeout_seconds <= 0:
            errors.append("DOWNSTREAM_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_from_env() -> DownstreamSettings:
    """Carrega DownstreamSettings a partir de variáveis de ambiente."""
    return DownstreamSettings(
        base_url=os.getenv("DOWNSTREAM_BASE_URL", ""),
        service_token=os.getenv("DOWNSTREAM_SERVICE_TOKEN", ""),
        webhook_path=os.getenv("DOWNSTREAM_WEBHOOK_PATH", DEFAULT_WEBHOOK_PATH),
        timeout_seconds=float(os.getenv("DOWNSTREAM_TIMEOUT_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_downstream_settings() -> DownstreamSettings:
    """Retorna instância cacheada de DownstreamSettings."""
    return _load_from_env()
