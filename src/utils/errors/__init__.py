"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    DeadLetterStorageError,
    InfrastructureError,
    ProviderRequestError,
    ProviderUnavailableError,
)

__all__ = [
    "DeadLetterStorageError",
    "InfrastructureError",
    "ProviderRequestError",
    "ProviderUnavailableError",
]
