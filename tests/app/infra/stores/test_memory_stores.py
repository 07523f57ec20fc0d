"""Testes dos stores em memória (cache de status e dead-letter)."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.domain.dead_letter import FailureReason
from app.domain.verification import CanonicalEvent, EventType, ReviewOutcome
from app.infra.stores.memory_stores import MemoryDeadLetterStore, MemoryStatusCache
from app.protocols import DeadLetterEntryBusyError


def _event(
    event_type: EventType = EventType.PENDING,
    subject_id: str = "user_42",
    outcome: ReviewOutcome | None = None,
    provider_created_at: datetime | None = None,
    level_name: str | None = "basic-kyc-level",
) -> CanonicalEvent:
    return CanonicalEvent(
        event_type=event_type,
        subject_id=subject_id,
        provider_applicant_id=f"app;externalUserId={subject_id}",
        review_outcome=outcome,
        level_name=level_name,
        provider_created_at=provider_created_at,
    )


class TestMemoryStatusCache:
    """Testes do MemoryStatusCache."""

    @pytest.mark.asyncio
    async def test_first_upsert_creates_record(self) -> None:
        cache = MemoryStatusCache()

        record = await cache.upsert(_event())

        assert record.subject_id == "user_42"
        assert record.last_event_type is EventType.PENDING
        assert record.created_at == record.updated_at
        assert await cache.lookup("user_42") == record

    @pytest.mark.asyncio
    async def test_upsert_merges_and_preserves_created_at(self) -> None:
        cache = MemoryStatusCache()
        first = await cache.upsert(_event())

        second = await cache.upsert(_event(EventType.REVIEWED, outcome=ReviewOutcome.APPROVED))

        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert second.last_event_type is EventType.REVIEWED
        assert second.last_review_outcome is ReviewOutcome.APPROVED

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent_modulo_updated_at(self) -> None:
        cache = MemoryStatusCache()
        event = _event(EventType.REVIEWED, outcome=ReviewOutcome.REJECTED)

        first = await cache.upsert(event)
        second = await cache.upsert(event)

        first_fields = {k: v for k, v in first.to_dict().items() if k != "updated_at"}
        second_fields = {k: v for k, v in second.to_dict().items() if k != "updated_at"}
        assert first_fields == second_fields

    @pytest.mark.asyncio
    async def test_unclassified_event_only_touches_event_type(self) -> None:
        cache = MemoryStatusCache()
        first = await cache.upsert(_event(EventType.REVIEWED, outcome=ReviewOutcome.REJECTED))

        second = await cache.upsert(_event(EventType.UNCLASSIFIED, level_name=None))

        assert second.last_event_type is EventType.UNCLASSIFIED
        assert second.last_review_outcome is ReviewOutcome.REJECTED
        assert second.level_name == "basic-kyc-level"
        assert second.created_at == first.created_at

    @pytest.mark.asyncio
    async def test_evict_then_lookup_is_absent(self) -> None:
        cache = MemoryStatusCache()
        await cache.upsert(_event())

        assert await cache.evict("user_42") is True
        assert await cache.lookup("user_42") is None
        assert await cache.evict("user_42") is False

    @pytest.mark.asyncio
    async def test_lookup_unknown_subject(self) -> None:
        assert await MemoryStatusCache().lookup("nobody") is None

    @pytest.mark.asyncio
    async def test_concurrent_upserts_keep_one_record_per_subject(self) -> None:
        cache = MemoryStatusCache()
        events = [
            _event(EventType.PENDING if i % 2 else EventType.ON_HOLD, subject_id=f"user_{i % 3}")
            for i in range(60)
        ]

        await asyncio.gather(*(cache.upsert(event) for event in events))

        for subject in ("user_0", "user_1", "user_2"):
            record = await cache.lookup(subject)
            assert record is not None
            assert record.subject_id == subject

    @pytest.mark.asyncio
    async def test_last_completion_wins_by_default(self) -> None:
        cache = MemoryStatusCache()
        newer = datetime(2024, 3, 2, tzinfo=UTC)
        await cache.upsert(_event(EventType.REVIEWED, outcome=ReviewOutcome.APPROVED, provider_created_at=newer))

        record = await cache.upsert(
            _event(EventType.PENDING, provider_created_at=newer - timedelta(days=1))
        )

        assert record.last_event_type is EventType.PENDING

    @pytest.mark.asyncio
    async def test_out_of_order_events_ignored_when_enabled(self) -> None:
        cache = MemoryStatusCache(ignore_out_of_order=True)
        newer = datetime(2024, 3, 2, tzinfo=UTC)
        await cache.upsert(_event(EventType.REVIEWED, outcome=ReviewOutcome.APPROVED, provider_created_at=newer))

        record = await cache.upsert(
            _event(EventType.PENDING, provider_created_at=newer - timedelta(days=1))
        )

        assert record.last_event_type is EventType.REVIEWED
        assert record.last_review_outcome is ReviewOutcome.APPROVED

    @pytest.mark.asyncio
    async def test_level_name_kept_when_event_omits_it(self) -> None:
        cache = MemoryStatusCache()
        await cache.upsert(_event(level_name="basic-kyc-level"))

        record = await cache.upsert(_event(EventType.ON_HOLD, level_name=None))

        assert record.level_name == "basic-kyc-level"


class TestMemoryDeadLetterStore:
    """Testes do MemoryDeadLetterStore."""

    @pytest.mark.asyncio
    async def test_record_and_list_in_failure_order(self) -> None:
        store = MemoryDeadLetterStore()
        first = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())
        second = await store.record(
            failure_reason=FailureReason.MALFORMED_PAYLOAD, raw_payload="{broken"
        )

        pending = await store.list_pending()

        assert [entry.entry_id for entry in pending] == [first.entry_id, second.entry_id]
        assert first.attempt_count == 1
        assert second.event is None
        assert second.raw_payload == "{broken"

    @pytest.mark.asyncio
    async def test_claim_increments_attempt_and_blocks_second_claim(self) -> None:
        store = MemoryDeadLetterStore()
        entry = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())

        claimed = await store.claim(entry.entry_id)

        assert claimed is not None
        assert claimed.attempt_count == 2
        assert await store.claim(entry.entry_id) is None

    @pytest.mark.asyncio
    async def test_release_persists_and_unlocks(self) -> None:
        store = MemoryDeadLetterStore()
        entry = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())
        claimed = await store.claim(entry.entry_id)
        assert claimed is not None

        await store.release(claimed.with_failure(FailureReason.PERMANENT, "downstream_rejected"))

        stored = await store.get(entry.entry_id)
        assert stored is not None
        assert stored.failure_reason is FailureReason.PERMANENT
        assert stored.attempt_count == 2
        assert await store.claim(entry.entry_id) is not None

    @pytest.mark.asyncio
    async def test_mark_delivered_removes(self) -> None:
        store = MemoryDeadLetterStore()
        entry = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())
        claimed = await store.claim(entry.entry_id)
        assert claimed is not None

        await store.mark_delivered(claimed)

        assert await store.list_pending() == []
        assert await store.get(entry.entry_id) is None

    @pytest.mark.asyncio
    async def test_purge_while_claimed_is_busy(self) -> None:
        store = MemoryDeadLetterStore()
        entry = await store.record(failure_reason=FailureReason.TRANSIENT, event=_event())
        await store.claim(entry.entry_id)

        with pytest.raises(DeadLetterEntryBusyError):
            await store.purge(entry.entry_id)

    @pytest.mark.asyncio
    async def test_purge(self) -> None:
        store = MemoryDeadLetterStore()
        entry = await store.record(failure_reason=FailureReason.PERMANENT, event=_event())

        assert await store.purge(entry.entry_id) is True
        assert await store.purge(entry.entry_id) is False

    @pytest.mark.asyncio
    async def test_claim_unknown_entry(self) -> None:
        assert await MemoryDeadLetterStore().claim("missing") is None

    @pytest.mark.asyncio
    async def test_concurrent_records_are_all_kept(self) -> None:
        store = MemoryDeadLetterStore()

        await asyncio.gather(
            *(store.record(failure_reason=FailureReason.TRANSIENT, event=_event()) for _ in range(25))
        )

        assert len(await store.list_pending()) == 25
