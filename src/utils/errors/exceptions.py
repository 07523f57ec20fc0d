"""Exceções de domínio para falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class DeadLetterStorageError(InfrastructureError):
    """Store de dead-letter indisponível (gravação ou leitura)."""


class ProviderUnavailableError(InfrastructureError):
    """API de status do provedor indisponível (timeout, 5xx, 429)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRequestError(Exception):
    """Provedor rejeitou a requisição (4xx não retentável)."""

    def __init__(
        self,
        message: str,
        status_code: int,
        description: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.description = description
