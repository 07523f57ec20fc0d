"""Settings dos stores compartilhados (dead-letter e cache de status).

O dead-letter precisa ser durável em staging/production: eventos que o
downstream não absorveu só podem ser recuperados a partir dele.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

DeadLetterBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class StoreSettings:
    """Configurações de dead-letter e cache de status.

    Attributes:
        dead_letter_backend: Backend do dead-letter (memory|redis)
        replay_lock_seconds: TTL do lock de replay de uma entrada
        max_replay_attempts: Tentativas máximas antes de exigir ação manual
        ignore_out_of_order_events: Cache descarta eventos mais antigos que o
            último evento aplicado ao mesmo sujeito
    """

    dead_letter_backend: DeadLetterBackend = "memory"
    replay_lock_seconds: int = 60
    max_replay_attempts: int = 5
    ignore_out_of_order_events: bool = False

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de stores.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.dead_letter_backend not in ("memory", "redis"):
            errors.append(f"DEAD_LETTER_BACKEND inválido: {self.dead_letter_backend}")

        if self.dead_letter_backend == "memory" and not base.is_development:
            errors.append(
                "DEAD_LETTER_BACKEND=memory proibido em staging/production. Use Redis."
            )

        if self.dead_letter_backend == "redis" and not base.redis_url:
            errors.append("DEAD_LETTER_BACKEND=redis requer REDIS_URL configurado")

        if self.replay_lock_seconds <= 0:
            errors.append("DEAD_LETTER_REPLAY_LOCK_SECONDS deve ser > 0")

        if self.max_replay_attempts <= 0:
            errors.append("DEAD_LETTER_MAX_REPLAY_ATTEMPTS deve ser > 0")

        return errors


def _default_backend_for_env(environment: str) -> DeadLetterBackend:
    return "redis" if environment in ("staging", "production") else "memory"


def _load_stores_from_env() -> StoreSettings:
    """Carrega StoreSettings de variáveis de ambiente."""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    backend_str = os.getenv(
        "DEAD_LETTER_BACKEND", _default_backend_for_env(environment)
    ).lower()
    return StoreSettings(
        dead_letter_backend=backend_str,  # type: ignore[arg-type]
        replay_lock_seconds=int(os.getenv("DEAD_LETTER_REPLAY_LOCK_SECONDS", "60")),
        max_replay_attempts=int(os.getenv("DEAD_LETTER_MAX_REPLAY_ATTEMPTS", "5")),
        ignore_out_of_order_events=os.getenv(
            "STATUS_CACHE_IGNORE_OUT_OF_ORDER", ""
        ).lower() in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Retorna instância cacheada de StoreSettings."""
    return _load_stores_from_env()
