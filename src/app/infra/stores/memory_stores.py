"""Stores em memória: cache de status e dead-letter.

O cache de status é process-wide por natureza (read-through na frente da API
do provedor). O dead-letter em memória serve apenas para desenvolvimento e
testes: sem persistência entre reinícios.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.domain.dead_letter import DeadLetterEntry, FailureReason
from app.domain.verification import EventType, StatusRecord
from app.protocols.dead_letter_store import DeadLetterEntryBusyError, DeadLetterStoreProtocol
from app.protocols.status_cache import StatusCacheProtocol

if TYPE_CHECKING:
    from app.domain.verification import CanonicalEvent

logger = logging.getLogger(__name__)


class MemoryStatusCache(StatusCacheProtocol):
    """Cache de status por sujeito com atomicidade por chave.

    Cada sujeito tem seu próprio asyncio.Lock; upserts de sujeitos diferentes
    nunca esperam um pelo outro.

    Args:
        ignore_out_of_order: Ignora eventos com timestamp do provedor anterior
            ao último aplicado (desligado por padrão: vence a última conclusão)
    """

    def __init__(self, *, ignore_out_of_order: bool = False) -> None:
        self._records: dict[str, StatusRecord] = {}
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._ignore_out_of_order = ignore_out_of_order

    def _lock_for(self, subject_id: str) -> asyncio.Lock:
        lock = self._locks.get(subject_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[subject_id] = lock
        return lock

    def _is_stale(self, current: StatusRecord, event: CanonicalEvent) -> bool:
        if not self._ignore_out_of_order:
            return False
        if event.provider_created_at is None or current.last_provider_event_at is None:
            return False
        return event.provider_created_at < current.last_provider_event_at

    async def upsert(self, event: CanonicalEvent) -> StatusRecord:
        lock = self._lock_for(event.subject_id)
        async with lock:
            current = self._records.get(event.subject_id)
            now = datetime.now(UTC)

            if current is None:
                record = StatusRecord(
                    subject_id=event.subject_id,
                    last_event_type=event.event_type,
                    last_review_outcome=event.review_outcome,
                    level_name=event.level_name,
                    created_at=now,
                    updated_at=now,
                    last_provider_event_at=event.provider_created_at,
                )
            elif self._is_stale(current, event):
                logger.info(
                    "status_cache_out_of_order_ignored",
                    extra={"event_type": event.event_type.value},
                )
                return current
            elif event.event_type is EventType.UNCLASSIFIED:
                # Tipo desconhecido só marca o último tipo; resultado e nível ficam
                record = replace(
                    current,
                    last_event_type=event.event_type,
                    updated_at=max(now, current.updated_at),
                )
            else:
                record = replace(
                    current,
                    last_event_type=event.event_type,
                    last_review_outcome=event.review_outcome,
                    level_name=event.level_name or current.level_name,
                    # Relógio de parede pode recuar; updated_at nunca recua
                    updated_at=max(now, current.updated_at),
                    last_provider_event_at=(
                        event.provider_created_at or current.last_provider_event_at
                    ),
                )

            self._records[event.subject_id] = record
            return record

    async def lookup(self, subject_id: str) -> StatusRecord | None:
        return self._records.get(subject_id)

    async def evict(self, subject_id: str) -> bool:
        async with self._lock_for(subject_id):
            return self._records.pop(subject_id, None) is not None


class MemoryDeadLetterStore(DeadLetterStoreProtocol):
    """Dead-letter em memória: apenas para dev/test."""

    def __init__(self) -> None:
        # Ordem de inserção == ordem de primeira falha
        self._entries: dict[str, DeadLetterEntry] = {}
        self._claimed: set[str] = set()
        self._lock = asyncio.Lock()

    async def record(
        self,
        *,
        failure_reason: FailureReason,
        failure_detail: str = "",
        event: CanonicalEvent | None = None,
        raw_payload: str | None = None,
    ) -> DeadLetterEntry:
        entry = DeadLetterEntry.create(
            failure_reason=failure_reason,
            failure_detail=failure_detail,
            event=event,
            raw_payload=raw_payload,
        )
        async with self._lock:
            self._entries[entry.entry_id] = entry
        logger.debug(
            "dead_letter_recorded",
            extra={"entry_id": entry.entry_id, "failure_reason": failure_reason.value},
        )
        return entry

    async def list_pending(self) -> list[DeadLetterEntry]:
        async with self._lock:
            return list(self._entries.values())

    async def get(self, entry_id: str) -> DeadLetterEntry | None:
        return self._entries.get(entry_id)

    async def claim(self, entry_id: str) -> DeadLetterEntry | None:
        async with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None or entry_id in self._claimed:
                return None
            entry = entry.with_attempt()
            self._entries[entry_id] = entry
            self._claimed.add(entry_id)
            return entry

    async def release(self, entry: DeadLetterEntry) -> None:
        async with self._lock:
            if entry.entry_id in self._entries:
                self._entries[entry.entry_id] = entry
            self._claimed.discard(entry.entry_id)

    async def mark_delivered(self, entry: DeadLetterEntry) -> None:
        async with self._lock:
            self._entries.pop(entry.entry_id, None)
            self._claimed.discard(entry.entry_id)

    async def purge(self, entry_id: str) -> bool:
        async with self._lock:
            if entry_id in self._claimed:
                raise DeadLetterEntryBusyError(entry_id)
            return self._entries.pop(entry_id, None) is not None

    async def ping(self) -> bool:
        """Sempre disponível."""
        return True
