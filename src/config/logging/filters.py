"""Filters de logging: contexto da requisição e mascaramento.

- CorrelationIdFilter: injeta correlation_id e service
- SensitiveFieldFilter: mascara campos de `extra` que carregam segredo ou
  payload bruto do provedor
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

REDACTED = "[redacted]"

SENSITIVE_FIELDS = frozenset(
    {
        "authorization",
        "signature",
        "claimed_signature",
        "webhook_secret",
        "secret_key",
        "service_token",
        "admin_api_token",
        "raw_payload",
        "body",
    }
)


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record.

    Um correlation_id passado explicitamente via `extra` tem precedência
    sobre o do contexto.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = self._get_correlation_id()
        record.service = self._service_name
        return True


class SensitiveFieldFilter(logging.Filter):
    """Substitui o valor de campos sensíveis por REDACTED (nunca descarta o record)."""

    def __init__(self, fields: Iterable[str] = SENSITIVE_FIELDS) -> None:
        super().__init__()
        self._fields = frozenset(fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for field in self._fields.intersection(record.__dict__):
            setattr(record, field, REDACTED)
        return True
