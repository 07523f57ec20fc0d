"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: Cache de status e dead-letter em memória
    - redis_dead_letter_store: Dead-letter durável usando Redis
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryDeadLetterStore, MemoryStatusCache
from app.infra.stores.redis_dead_letter_store import RedisDeadLetterStore

__all__ = [
    # Memory
    "MemoryDeadLetterStore",
    "MemoryStatusCache",
    # Redis
    "RedisDeadLetterStore",
]
