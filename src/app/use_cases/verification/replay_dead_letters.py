"""Use case de replay do dead-letter (disparado pelo operador).

Uma passada sobre as entradas pendentes, sem backoff automático:

- Entradas sem evento canônico (normalização falhou) e eventos Unclassified
  nunca são reenviados; ficam para inspeção.
- Falhas Permanent só são reenviadas com include_permanent=True.
- Entradas que atingiram max_attempts são puladas.
- Cada entrada é reservada (claim) antes do envio e liberada ao fim da
  tentativa, mesmo com erro inesperado; uma entrada reservada não
  pode ser reenviada em paralelo nem removida pelo operador.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from app.domain.dead_letter import FailureReason, ReplaySummary
from app.domain.delivery import Delivered
from app.observability import get_correlation_id, record_latency, record_replay_summary

if TYPE_CHECKING:
    from app.domain.dead_letter import DeadLetterEntry
    from app.protocols import DeadLetterStoreProtocol, ForwarderProtocol

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class ReplayDeadLettersUseCase:
    """Reenvia entradas do dead-letter ao downstream."""

    def __init__(
        self,
        *,
        dead_letter_store: DeadLetterStoreProtocol,
        forwarder: ForwarderProtocol,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._store = dead_letter_store
        self._forwarder = forwarder
        self._max_attempts = max_attempts

    def _skip_reason(self, entry: DeadLetterEntry, include_permanent: bool) -> str | None:
        if not entry.is_replayable:
            return "not_replayable"
        if entry.failure_reason is FailureReason.PERMANENT and not include_permanent:
            return "permanent_failure"
        if entry.attempt_count >= self._max_attempts:
            return "max_attempts_reached"
        return None

    async def execute(self, *, include_permanent: bool = False) -> ReplaySummary:
        """Executa uma passada de replay.

        Args:
            include_permanent: Também reenvia falhas Permanent (4xx do downstream)

        Raises:
            DeadLetterStorageError: Se o store estiver indisponível

        Returns:
            ReplaySummary com contagens e ids entregues.
        """
        started = time.perf_counter()
        delivered_ids: list[str] = []
        failed = skipped = 0

        for pending in await self._store.list_pending():
            skip_reason = self._skip_reason(pending, include_permanent)
            if skip_reason is not None:
                logger.debug(
                    "dead_letter_replay_skipped",
                    extra={"entry_id": pending.entry_id, "reason": skip_reason},
                )
                skipped += 1
                continue

            entry = await self._store.claim(pending.entry_id)
            if entry is None or entry.event is None:
                # Já reservada por outro replay ou removida nesse meio tempo
                skipped += 1
                continue

            try:
                result = await self._forwarder.forward(entry.event)
                if isinstance(result, Delivered):
                    await self._store.mark_delivered(entry)
                    delivered_ids.append(entry.entry_id)
                    continue
                reason = FailureReason.PERMANENT if result.is_permanent else FailureReason.TRANSIENT
                detail = result.detail
            except Exception as exc:
                # Entrada reservada sempre volta liberada
                logger.exception(
                    "dead_letter_replay_error",
                    extra={"entry_id": entry.entry_id, "error_type": type(exc).__name__},
                )
                reason = FailureReason.TRANSIENT
                detail = "replay_unexpected_error"

            await self._store.release(entry.with_failure(reason, detail))
            failed += 1
            logger.info(
                "dead_letter_replay_failed",
                extra={
                    "entry_id": entry.entry_id,
                    "failure_reason": reason.value,
                    "attempt_count": entry.attempt_count,
                },
            )

        summary = ReplaySummary(
            delivered=len(delivered_ids),
            failed=failed,
            skipped=skipped,
            delivered_ids=tuple(delivered_ids),
        )
        correlation_id = get_correlation_id() or None
        record_latency("dead_letter", "replay", (time.perf_counter() - started) * 1000, correlation_id)
        record_replay_summary(summary.delivered, summary.failed, summary.skipped, correlation_id)
        return summary
