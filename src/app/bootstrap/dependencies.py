"""Factories: criação de implementações concretas a partir das settings.

Referência de wiring:
    StatusCache      -> MemoryStatusCache (process-wide)
    DeadLetterStore  -> RedisDeadLetterStore | MemoryDeadLetterStore
    Forwarder        -> DownstreamForwarder
    Provider client  -> SumsubHttpClient
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.connectors.sumsub import create_sumsub_http_client
from api.connectors.sumsub.webhook import SumsubWebhookAuthenticator
from api.normalizers.sumsub import SumsubEventNormalizer
from app.bootstrap.clients import create_async_redis_client
from app.infra.downstream import create_downstream_forwarder
from app.infra.stores import MemoryDeadLetterStore, MemoryStatusCache, RedisDeadLetterStore
from app.services import VerificationStatusService
from app.use_cases.verification import ProcessVerificationEventUseCase, ReplayDeadLettersUseCase
from config.settings import get_base_settings, get_store_settings, get_sumsub_settings

if TYPE_CHECKING:
    from app.protocols import (
        DeadLetterStoreProtocol,
        ForwarderProtocol,
        StatusCacheProtocol,
    )

logger = logging.getLogger(__name__)


def create_status_cache() -> StatusCacheProtocol:
    """Cria o cache de status."""
    settings = get_store_settings()
    cache = MemoryStatusCache(ignore_out_of_order=settings.ignore_out_of_order_events)
    logger.info(
        "status_cache_created",
        extra={"ignore_out_of_order": settings.ignore_out_of_order_events},
    )
    return cache


def create_dead_letter_store() -> DeadLetterStoreProtocol:
    """Cria store de dead-letter baseado na configuração.

    Lê DEAD_LETTER_BACKEND:
    - "memory": MemoryDeadLetterStore (dev only)
    - "redis": RedisDeadLetterStore (staging/production)
    """
    settings = get_store_settings()
    backend = settings.dead_letter_backend

    if backend == "redis":
        store = RedisDeadLetterStore(
            create_async_redis_client(),
            replay_lock_seconds=settings.replay_lock_seconds,
        )
        logger.info("dead_letter_store_created", extra={"backend": "redis"})
        return store

    if backend == "memory":
        environment = get_base_settings().environment
        if environment != "development":
            logger.warning(
                "memory_store_in_non_dev",
                extra={"backend": "memory", "environment": environment},
            )
        logger.info("dead_letter_store_created", extra={"backend": "memory"})
        return MemoryDeadLetterStore()

    msg = f"DEAD_LETTER_BACKEND inválido: {backend}"
    raise ValueError(msg)


def create_forwarder() -> ForwarderProtocol:
    """Cria o Forwarder do downstream."""
    return create_downstream_forwarder()


def create_pipeline(
    status_cache: StatusCacheProtocol,
    dead_letter_store: DeadLetterStoreProtocol,
    forwarder: ForwarderProtocol,
) -> ProcessVerificationEventUseCase:
    """Monta o pipeline do webhook."""
    sumsub = get_sumsub_settings()
    return ProcessVerificationEventUseCase(
        authenticator=SumsubWebhookAuthenticator(
            sumsub.webhook_secret or None,
            allow_unsigned=sumsub.allow_unsigned_webhooks,
        ),
        normalizer=SumsubEventNormalizer(),
        status_cache=status_cache,
        forwarder=forwarder,
        dead_letter_store=dead_letter_store,
    )


def create_replay_use_case(
    dead_letter_store: DeadLetterStoreProtocol,
    forwarder: ForwarderProtocol,
) -> ReplayDeadLettersUseCase:
    """Monta o replay do dead-letter."""
    return ReplayDeadLettersUseCase(
        dead_letter_store=dead_letter_store,
        forwarder=forwarder,
        max_attempts=get_store_settings().max_replay_attempts,
    )


def create_status_service(status_cache: StatusCacheProtocol) -> VerificationStatusService:
    """Monta o serviço de status (read-through)."""
    return VerificationStatusService(
        status_cache=status_cache,
        provider=create_sumsub_http_client(),
        normalizer=SumsubEventNormalizer(),
    )
