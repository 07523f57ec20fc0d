"""Redis Dead-Letter Store: registro durável de eventos não entregues.

Layout de keys:
    deadletter:entry:{entry_id}      JSON da entrada
    deadletter:pending               ZSET (score = first_failed_at)
    deadletter:replaying:{entry_id}  Lock de replay (SET NX EX)

O lock de replay impede que a mesma entrada seja reenviada duas vezes em
paralelo ou removida pelo operador durante o replay. O TTL do lock libera
entradas de processos que morreram no meio do replay.

entry_id é um UUID opaco; nenhuma key carrega PII.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.domain.dead_letter import DeadLetterEntry, FailureReason
from app.protocols.dead_letter_store import DeadLetterEntryBusyError, DeadLetterStoreProtocol
from utils.errors import DeadLetterStorageError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

    from app.domain.verification import CanonicalEvent

logger = logging.getLogger(__name__)

DEAD_LETTER_PREFIX = "deadletter:"
PENDING_INDEX_KEY = f"{DEAD_LETTER_PREFIX}pending"


class RedisDeadLetterStore(DeadLetterStoreProtocol):
    """Dead-letter usando Redis assíncrono.

    Args:
        redis_client: Cliente redis.asyncio
        replay_lock_seconds: TTL do lock de replay
    """

    def __init__(self, redis_client: AsyncRedis[bytes], replay_lock_seconds: int = 60) -> None:
        self._redis = redis_client
        self._lock_ttl = replay_lock_seconds

    def _entry_key(self, entry_id: str) -> str:
        return f"{DEAD_LETTER_PREFIX}entry:{entry_id}"

    def _lock_key(self, entry_id: str) -> str:
        return f"{DEAD_LETTER_PREFIX}replaying:{entry_id}"

    @staticmethod
    def _decode(raw: bytes | str | None) -> DeadLetterEntry | None:
        if raw is None:
            return None
        try:
            return DeadLetterEntry.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise DeadLetterStorageError("Entrada de dead-letter corrompida no Redis") from exc

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
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.set(self._entry_key(entry.entry_id), json.dumps(entry.to_dict()))
            pipeline.zadd(PENDING_INDEX_KEY, {entry.entry_id: entry.first_failed_at.timestamp()})
            await pipeline.execute()
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao gravar dead-letter no Redis") from exc

        logger.info(
            "dead_letter_recorded",
            extra={"entry_id": entry.entry_id, "failure_reason": failure_reason.value},
        )
        return entry

    async def list_pending(self) -> list[DeadLetterEntry]:
        try:
            ids = await self._redis.zrange(PENDING_INDEX_KEY, 0, -1)
            if not ids:
                return []
            entry_ids = [i.decode() if isinstance(i, bytes) else i for i in ids]
            values = await self._redis.mget([self._entry_key(i) for i in entry_ids])
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao listar dead-letter no Redis") from exc

        entries: list[DeadLetterEntry] = []
        for entry_id, raw in zip(entry_ids, values, strict=True):
            entry = self._decode(raw)
            if entry is None:
                # Índice órfão (entrada removida entre zrange e mget)
                logger.debug("dead_letter_index_orphan", extra={"entry_id": entry_id})
                continue
            entries.append(entry)
        return entries

    async def get(self, entry_id: str) -> DeadLetterEntry | None:
        try:
            raw = await self._redis.get(self._entry_key(entry_id))
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao ler dead-letter no Redis") from exc
        return self._decode(raw)

    async def claim(self, entry_id: str) -> DeadLetterEntry | None:
        lock_key = self._lock_key(entry_id)
        try:
            acquired = await self._redis.set(lock_key, "replay", nx=True, ex=self._lock_ttl)
            if not acquired:
                return None
            raw = await self._redis.get(self._entry_key(entry_id))
            if raw is None:
                await self._redis.delete(lock_key)
                return None
            entry = DeadLetterEntry.from_dict(json.loads(raw)).with_attempt()
            await self._redis.set(self._entry_key(entry_id), json.dumps(entry.to_dict()))
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao reservar dead-letter no Redis") from exc
        return entry

    async def release(self, entry: DeadLetterEntry) -> None:
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.set(
                self._entry_key(entry.entry_id),
                json.dumps(entry.to_dict()),
                xx=True,
            )
            pipeline.delete(self._lock_key(entry.entry_id))
            await pipeline.execute()
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao liberar dead-letter no Redis") from exc

    async def mark_delivered(self, entry: DeadLetterEntry) -> None:
        try:
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.delete(self._entry_key(entry.entry_id))
            pipeline.zrem(PENDING_INDEX_KEY, entry.entry_id)
            pipeline.delete(self._lock_key(entry.entry_id))
            await pipeline.execute()
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao remover dead-letter no Redis") from exc
        logger.info("dead_letter_delivered", extra={"entry_id": entry.entry_id})

    async def purge(self, entry_id: str) -> bool:
        lock_key = self._lock_key(entry_id)
        try:
            # Purge toma o mesmo lock do replay
            acquired = await self._redis.set(lock_key, "purge", nx=True, ex=self._lock_ttl)
            if not acquired:
                raise DeadLetterEntryBusyError(entry_id)
            pipeline = self._redis.pipeline(transaction=True)
            pipeline.delete(self._entry_key(entry_id))
            pipeline.zrem(PENDING_INDEX_KEY, entry_id)
            pipeline.delete(lock_key)
            deleted, _, _ = await pipeline.execute()
        except DeadLetterEntryBusyError:
            raise
        except Exception as exc:
            raise DeadLetterStorageError("Falha ao remover dead-letter no Redis") from exc

        if deleted:
            logger.info("dead_letter_purged", extra={"entry_id": entry_id})
        return bool(deleted)

    async def ping(self) -> bool:
        """Verifica disponibilidade do Redis."""
        try:
            return bool(await self._redis.ping())
        except Exception as exc:
            raise DeadLetterStorageError("Redis indisponível") from exc
