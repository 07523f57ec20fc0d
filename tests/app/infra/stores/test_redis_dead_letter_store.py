"""Testes do RedisDeadLetterStore com mock."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.dead_letter import DeadLetterEntry, FailureReason
from app.domain.verification import CanonicalEvent, EventType
from app.infra.stores.redis_dead_letter_store import PENDING_INDEX_KEY, RedisDeadLetterStore
from app.protocols import DeadLetterEntryBusyError
from utils.errors import DeadLetterStorageError


def _event() -> CanonicalEvent:
    return CanonicalEvent(
        event_type=EventType.PENDING,
        subject_id="user_42",
        provider_applicant_id="app;externalUserId=user_42",
    )


def _pipeline(result: list[object] | None = None) -> MagicMock:
    pipeline = MagicMock()
    pipeline.execute = AsyncMock(return_value=result or [True, 1])
    return pipeline


def _stored(entry: DeadLetterEntry) -> bytes:
    return json.dumps(entry.to_dict()).encode()


class TestRedisDeadLetterStore:
    """Testes do RedisDeadLetterStore."""

    @pytest.mark.asyncio
    async def test_record_writes_entry_and_index(self) -> None:
        redis = MagicMock()
        pipeline = _pipeline()
        redis.pipeline.return_value = pipeline
        store = RedisDeadLetterStore(redis)

        entry = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())

        key, value = pipeline.set.call_args[0]
        assert key == f"deadletter:entry:{entry.entry_id}"
        assert json.loads(value)["failure_reason"] == "Transient"
        pipeline.zadd.assert_called_once()
        assert pipeline.zadd.call_args[0][0] == PENDING_INDEX_KEY
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_record_wraps_redis_errors(self) -> None:
        redis = MagicMock()
        pipeline = MagicMock()
        pipeline.execute = AsyncMock(side_effect=ConnectionError("down"))
        redis.pipeline.return_value = pipeline
        store = RedisDeadLetterStore(redis)

        with pytest.raises(DeadLetterStorageError):
            await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())

    @pytest.mark.asyncio
    async def test_list_pending_skips_orphan_index_entries(self) -> None:
        entry = DeadLetterEntry.create(failure_reason=FailureReason.TRANSIENT, event=_event())
        redis = MagicMock()
        redis.zrange = AsyncMock(return_value=[entry.entry_id.encode(), b"gone"])
        redis.mget = AsyncMock(return_value=[_stored(entry), None])
        store = RedisDeadLetterStore(redis)

        pending = await store.list_pending()

        assert [item.entry_id for item in pending] == [entry.entry_id]
        assert pending[0].event == entry.event
        redis.mget.assert_awaited_once_with(
            [f"deadletter:entry:{entry.entry_id}", "deadletter:entry:gone"]
        )

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_storage_error(self) -> None:
        redis = MagicMock()
        redis.zrange = AsyncMock(return_value=[b"bad"])
        redis.mget = AsyncMock(return_value=[b"{not json"])
        redis.get = AsyncMock(return_value=b'{"entry_id": "bad"}')
        store = RedisDeadLetterStore(redis)

        with pytest.raises(DeadLetterStorageError):
            await store.list_pending()
        with pytest.raises(DeadLetterStorageError):
            await store.get("bad")

    @pytest.mark.asyncio
    async def test_list_pending_empty(self) -> None:
        redis = MagicMock()
        redis.zrange = AsyncMock(return_value=[])
        redis.mget = AsyncMock()

        assert await RedisDeadLetterStore(redis).list_pending() == []
        redis.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_claim_takes_lock_and_counts_attempt(self) -> None:
        entry = DeadLetterEntry.create(failure_reason=FailureReason.TRANSIENT, event=_event())
        redis = MagicMock()
        redis.set = AsyncMock(return_value=True)
        redis.get = AsyncMock(return_value=_stored(entry))
        store = RedisDeadLetterStore(redis, replay_lock_seconds=30)

        claimed = await store.claim(entry.entry_id)

        assert claimed is not None
        assert claimed.attempt_count == 2
        redis.set.assert_any_await(
            f"deadletter:replaying:{entry.entry_id}", "replay", nx=True, ex=30
        )

    @pytest.mark.asyncio
    async def test_claim_returns_none_when_locked(self) -> None:
        redis = MagicMock()
        redis.set = AsyncMock(return_value=None)
        redis.get = AsyncMock()
        store = RedisDeadLetterStore(redis)

        assert await store.claim("busy") is None
        redis.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_claim_missing_entry_releases_lock(self) -> None:
        redis = MagicMock()
        redis.set = AsyncMock(return_value=True)
        redis.get = AsyncMock(return_value=None)
        redis.delete = AsyncMock()
        store = RedisDeadLetterStore(redis)

        assert await store.claim("gone") is None
        redis.delete.assert_awaited_once_with("deadletter:replaying:gone")

    @pytest.mark.asyncio
    async def test_mark_delivered_removes_entry_index_and_lock(self) -> None:
        entry = DeadLetterEntry.create(failure_reason=FailureReason.TRANSIENT, event=_event())
        redis = MagicMock()
        pipeline = _pipeline([1, 1, 1])
        redis.pipeline.return_value = pipeline

        await RedisDeadLetterStore(redis).mark_delivered(entry)

        pipeline.delete.assert_any_call(f"deadletter:entry:{entry.entry_id}")
        pipeline.delete.assert_any_call(f"deadletter:replaying:{entry.entry_id}")
        pipeline.zrem.assert_called_once_with(PENDING_INDEX_KEY, entry.entry_id)

    @pytest.mark.asyncio
    async def test_purge_busy_when_lock_held(self) -> None:
        redis = MagicMock()
        redis.set = AsyncMock(return_value=None)
        store = RedisDeadLetterStore(redis)

        with pytest.raises(DeadLetterEntryBusyError):
            await store.purge("entry-1")

    @pytest.mark.asyncio
    async def test_purge_deletes(self) -> None:
        redis = MagicMock()
        redis.set = AsyncMock(return_value=True)
        redis.pipeline.return_value = _pipeline([1, 1, 1])
        store = RedisDeadLetterStore(redis)

        assert await store.purge("entry-1") is True

    @pytest.mark.asyncio
    async def test_ping_wraps_errors(self) -> None:
        redis = MagicMock()
        redis.ping = AsyncMock(side_effect=OSError("refused"))

        with pytest.raises(DeadLetterStorageError):
            await RedisDeadLetterStore(redis).ping()
