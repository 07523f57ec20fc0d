"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos. Cache de status,
dead-letter e Forwarder são singletons compartilhados por todas as
requisições.

Uso:
    from app.bootstrap import initialize_app, get_pipeline

    # Na inicialização do serviço
    initialize_app()

    # Nas rotas
    pipeline = get_pipeline()
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_downstream_settings,
    get_store_settings,
    get_sumsub_settings,
)

if TYPE_CHECKING:
    from app.protocols import DeadLetterStoreProtocol, ForwarderProtocol, StatusCacheProtocol
    from app.services import VerificationStatusService
    from app.use_cases.verification import (
        ProcessVerificationEventUseCase,
        ReplayDeadLettersUseCase,
    )

# Nome do serviço para logs e métricas
SERVICE_NAME = "kyc_relay"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa logging em nível DEBUG para testes."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
    )


def collect_settings_errors() -> list[str]:
    """Agrega erros de validação de todas as settings."""
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"sumsub: {error}" for error in get_sumsub_settings().validate(base.environment))
    errors.extend(f"downstream: {error}" for error in get_downstream_settings().validate())
    errors.extend(f"stores: {error}" for error in get_store_settings().validate(base))
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    environment = get_base_settings().environment
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_status_cache() -> StatusCacheProtocol:
    """Obtém cache de status (singleton)."""
    from app.bootstrap.dependencies import create_status_cache
    return create_status_cache()


@lru_cache(maxsize=1)
def get_dead_letter_store() -> DeadLetterStoreProtocol:
    """Obtém store de dead-letter (singleton)."""
    from app.bootstrap.dependencies import create_dead_letter_store
    return create_dead_letter_store()


@lru_cache(maxsize=1)
def get_forwarder() -> ForwarderProtocol:
    """Obtém Forwarder do downstream (singleton)."""
    from app.bootstrap.dependencies import create_forwarder
    return create_forwarder()


@lru_cache(maxsize=1)
def get_pipeline() -> ProcessVerificationEventUseCase:
    """Obtém pipeline do webhook (singleton)."""
    from app.bootstrap.dependencies import create_pipeline
    return create_pipeline(get_status_cache(), get_dead_letter_store(), get_forwarder())


@lru_cache(maxsize=1)
def get_replay_use_case() -> ReplayDeadLettersUseCase:
    """Obtém use case de replay (singleton)."""
    from app.bootstrap.dependencies import create_replay_use_case
    return create_replay_use_case(get_dead_letter_store(), get_forwarder())


@lru_cache(maxsize=1)
def get_status_service() -> VerificationStatusService:
    """Obtém serviço de status (singleton)."""
    from app.bootstrap.dependencies import create_status_service
    return create_status_service(get_status_cache())
