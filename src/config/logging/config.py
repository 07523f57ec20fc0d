"""Configuração centralizada de logging.

Um único StreamHandler JSON no root logger, com correlation_id, service e
mascaramento de campos sensíveis. Loggers de bibliotecas HTTP ficam em
WARNING: suas linhas de request trazem a URL completa, que inclui o
externalUserId do sujeito.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, SensitiveFieldFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "kyc_relay"

QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Chamada uma vez no bootstrap; chamadas repetidas substituem o handler.

    Args:
        level: Nível de log (case insensitive)
        service_name: Nome do serviço nos logs
        correlation_id_getter: Retorna o correlation_id do contexto atual

    Raises:
        ValueError: Nível de log inválido
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(SensitiveFieldFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
    level: int = logging.INFO,
) -> None:
    """Registra que um caminho degradado foi usado.

    Ex.: dead-letter indisponível depois de uma falha de entrega (ERROR),
    webhook aceito sem verificação no modo inseguro (WARNING).

    Args:
        logger: Logger do componente
        component: Componente degradado (ex.: "dead_letter")
        reason: Código curto, sem PII
        elapsed_ms: Tempo gasto até o fallback, quando medido
        level: Nível do log
    """
    extra: dict[str, object] = {"fallback_used": True, "component": component}
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.log(level, "fallback_applied", extra=extra)
