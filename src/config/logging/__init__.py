"""Logging estruturado JSON do kyc-relay.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="kyc_relay")

    logger = get_logger(__name__)
    logger.info("event_delivered", extra={"status_code": 200})

Mensagens são nomes de evento; o contexto vai em `extra`. Payload bruto,
assinaturas e secrets nunca são logados (e são mascarados se aparecerem).
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import REDACTED, CorrelationIdFilter, SensitiveFieldFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    LOG_FIELDS,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "LOG_FIELDS",
    "REDACTED",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "SensitiveFieldFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
]
