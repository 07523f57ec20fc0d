"""Formatter JSON dos logs do relay (python-json-logger).

Cada linha sai com os campos fixos em LOG_FIELDS, renomeados por
FIELD_RENAME_MAP, mais o que vier em `extra`.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Ordem de saída dos campos fixos
LOG_FIELDS: tuple[str, ...] = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

REQUIRED_LOG_FIELDS = frozenset(LOG_FIELDS)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria o formatter JSON do serviço.

    Exemplo de output:
        {"asctime": "2026-02-02 10:30:00,123", "level": "WARNING",
         "logger": "app.infra.downstream.forwarder",
         "message": "event_forward_failed", "correlation_id": "abc-123",
         "service": "kyc_relay", "failure_kind": "Transient"}
    """
    return JsonFormatter(
        " ".join(f"%({field})s" for field in LOG_FIELDS),
        rename_fields=FIELD_RENAME_MAP,
        json_ensure_ascii=False,
    )
