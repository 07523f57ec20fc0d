"""Use case do pipeline de webhook de verificação.

Fluxo por requisição:

    Received -> Authenticated -> Normalized -> CacheUpdated -> Delivered
        |              |                            |
        v              v                            v
    Rejected      Quarantined                  Quarantined
  (assinatura)  (normalização)          (tipo desconhecido / entrega)

- Falha de autenticação encerra antes de tocar cache ou downstream.
- Falha de normalização encerra antes de tocar o cache.
- O cache é atualizado antes da entrega: reflete o que o provedor disse,
  independente do downstream ter absorvido.
- Depois de autenticado o processamento roda numa task protegida por
  asyncio.shield; cancelar a requisição não deixa estado pela metade.
- Falha do próprio storage (cache ou dead-letter) degrada para "aceito",
  com log de fallback.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from app.domain.dead_letter import FailureReason
from app.domain.delivery import Delivered
from app.observability import (
    get_correlation_id,
    record_delivery_failure,
    record_latency,
    record_pipeline_outcome,
)
from app.protocols.authenticator import AuthenticationFailedError
from app.protocols.normalizer import MissingSubjectIdError, NormalizationError
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.domain.verification import CanonicalEvent, RawEvent, StatusRecord
    from app.protocols import (
        DeadLetterStoreProtocol,
        EventNormalizerProtocol,
        ForwarderProtocol,
        StatusCacheProtocol,
        WebhookAuthenticatorProtocol,
    )

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    """Estados do pipeline (os três últimos são terminais)."""

    RECEIVED = "Received"
    AUTHENTICATED = "Authenticated"
    NORMALIZED = "Normalized"
    CACHE_UPDATED = "CacheUpdated"
    DELIVERED = "Delivered"
    REJECTED = "Rejected"
    QUARANTINED = "Quarantined"


MALFORMED_INPUT_REASONS = frozenset(
    {FailureReason.MALFORMED_PAYLOAD, FailureReason.MISSING_SUBJECT_ID}
)


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Desfecho de uma execução do pipeline.

    Atributos:
        state: Estado terminal (Delivered, Rejected ou Quarantined)
        correlation_id: ID de correlação da requisição
        reason: Motivo de rejeição/quarentena (código curto)
        failure_reason: Motivo do dead-letter, quando houve quarentena
        event: Evento canônico, se a normalização aconteceu
        record: Registro do cache após o upsert (None se não houve)
        dead_letter_entry_id: Entrada gravada no dead-letter (None se não houve
            ou se o próprio storage falhou)
    """

    state: PipelineState
    correlation_id: str
    reason: str | None = None
    failure_reason: FailureReason | None = None
    event: CanonicalEvent | None = None
    record: StatusRecord | None = None
    dead_letter_entry_id: str | None = None

    @property
    def is_malformed_input(self) -> bool:
        """True se o payload foi recusado por formato (MalformedInput)."""
        return self.failure_reason in MALFORMED_INPUT_REASONS

    @property
    def accepted(self) -> bool:
        """True se o provedor deve ver "aceito"."""
        return self.state is not PipelineState.REJECTED and not self.is_malformed_input


class ProcessVerificationEventUseCase:
    """Orquestra autenticação, normalização, cache, entrega e dead-letter."""

    def __init__(
        self,
        *,
        authenticator: WebhookAuthenticatorProtocol,
        normalizer: EventNormalizerProtocol,
        status_cache: StatusCacheProtocol,
        forwarder: ForwarderProtocol,
        dead_letter_store: DeadLetterStoreProtocol,
    ) -> None:
        self._authenticator = authenticator
        self._normalizer = normalizer
        self._cache = status_cache
        self._forwarder = forwarder
        self._dead_letter = dead_letter_store
        self._inflight: set[asyncio.Task[PipelineResult]] = set()

    async def execute(
        self,
        raw_event: RawEvent,
        correlation_id: str | None = None,
    ) -> PipelineResult:
        """Executa o pipeline para um webhook recebido.

        Args:
            raw_event: Bytes exatos do corpo + assinatura informada
            correlation_id: ID de correlação (padrão: o do contexto)

        Returns:
            PipelineResult em estado terminal.
        """
        correlation_id = correlation_id or get_correlation_id()
        started = time.perf_counter()

        try:
            self._authenticator.authenticate(raw_event)
        except AuthenticationFailedError as exc:
            logger.warning(
                "webhook_authentication_failed",
                extra={"reason": str(exc), "correlation_id": correlation_id},
            )
            return self._finish(
                PipelineResult(
                    state=PipelineState.REJECTED,
                    correlation_id=correlation_id,
                    reason=str(exc),
                ),
                started,
            )

        # Autenticado: daqui em diante a execução vai até um estado terminal
        task = asyncio.create_task(self._process_authenticated(raw_event, correlation_id))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        result = await asyncio.shield(task)
        return self._finish(result, started)

    async def drain(self, timeout: float | None = None) -> None:
        """Aguarda execuções autenticadas em andamento (shutdown)."""
        if not self._inflight:
            return
        logger.info("pipeline_draining", extra={"inflight": len(self._inflight)})
        await asyncio.wait(set(self._inflight), timeout=timeout)

    async def _process_authenticated(
        self,
        raw_event: RawEvent,
        correlation_id: str,
    ) -> PipelineResult:
        try:
            payload = self._normalizer.parse(raw_event.body)
            event = self._normalizer.normalize(payload, raw_event)
        except NormalizationError as exc:
            reason = (
                FailureReason.MISSING_SUBJECT_ID
                if isinstance(exc, MissingSubjectIdError)
                else FailureReason.MALFORMED_PAYLOAD
            )
            logger.warning(
                "event_normalization_failed",
                extra={"reason": str(exc), "correlation_id": correlation_id},
            )
            entry_id = await self._record_dead_letter(
                reason,
                str(exc),
                correlation_id,
                raw_payload=raw_event.body.decode("utf-8", errors="replace"),
            )
            return PipelineResult(
                state=PipelineState.QUARANTINED,
                correlation_id=correlation_id,
                reason=str(exc),
                failure_reason=reason,
                dead_letter_entry_id=entry_id,
            )

        record = await self._update_cache(event, correlation_id)

        if not event.is_classified:
            entry_id = await self._record_dead_letter(
                FailureReason.UNKNOWN_EVENT_TYPE,
                f"unknown_event_type:{event.provider_type}",
                correlation_id,
                event=event,
            )
            return PipelineResult(
                state=PipelineState.QUARANTINED,
                correlation_id=correlation_id,
                reason="unknown_event_type",
                failure_reason=FailureReason.UNKNOWN_EVENT_TYPE,
                event=event,
                record=record,
                dead_letter_entry_id=entry_id,
            )

        delivery = await self._forwarder.forward(event)
        if isinstance(delivery, Delivered):
            logger.info(
                "event_delivered",
                extra={
                    "event_type": event.event_type.value,
                    "status_code": delivery.status_code,
                    "correlation_id": correlation_id,
                },
            )
            return PipelineResult(
                state=PipelineState.DELIVERED,
                correlation_id=correlation_id,
                event=event,
                record=record,
            )

        record_delivery_failure(
            delivery.kind.value,
            delivery.detail,
            correlation_id,
            delivery.status_code,
        )
        reason = FailureReason.PERMANENT if delivery.is_permanent else FailureReason.TRANSIENT
        entry_id = await self._record_dead_letter(
            reason,
            delivery.detail,
            correlation_id,
            event=event,
        )
        return PipelineResult(
            state=PipelineState.QUARANTINED,
            correlation_id=correlation_id,
            reason=delivery.detail,
            failure_reason=reason,
            event=event,
            record=record,
            dead_letter_entry_id=entry_id,
        )

    async def _update_cache(
        self,
        event: CanonicalEvent,
        correlation_id: str,
    ) -> StatusRecord | None:
        try:
            return await self._cache.upsert(event)
        except Exception:
            logger.exception(
                "status_cache_update_failed",
                extra={"event_type": event.event_type.value, "correlation_id": correlation_id},
            )
            log_fallback(
                logger,
                "status_cache",
                reason="upsert_failed",
                level=logging.ERROR,
            )
            return None

    async def _record_dead_letter(
        self,
        reason: FailureReason,
        detail: str,
        correlation_id: str,
        *,
        event: CanonicalEvent | None = None,
        raw_payload: str | None = None,
    ) -> str | None:
        try:
            entry = await self._dead_letter.record(
                failure_reason=reason,
                failure_detail=detail,
                event=event,
                raw_payload=raw_payload,
            )
        except Exception:
            # Falha dupla: entrega (ou normalização) e storage do dead-letter
            logger.exception(
                "dead_letter_record_failed",
                extra={"failure_reason": reason.value, "correlation_id": correlation_id},
            )
            log_fallback(
                logger,
                "dead_letter",
                reason="record_failed",
                level=logging.ERROR,
            )
            return None
        return entry.entry_id

    @staticmethod
    def _finish(result: PipelineResult, started: float) -> PipelineResult:
        record_latency(
            "pipeline",
            "process_event",
            (time.perf_counter() - started) * 1000,
            result.correlation_id,
        )
        record_pipeline_outcome(
            result.state.value,
            result.event.event_type.value if result.event else None,
            result.correlation_id,
            result.failure_reason.value if result.failure_reason else result.reason,
        )
        return result
