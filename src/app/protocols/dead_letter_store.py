"""Protocolo do store de dead-letter.

Interface leve (ABC) dependida por Application.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.dead_letter import DeadLetterEntry, FailureReason
    from app.domain.verification import CanonicalEvent


class DeadLetterEntryBusyError(RuntimeError):
    """Entrada está em replay e não pode ser removida agora."""


class DeadLetterStoreProtocol(ABC):
    """Contrato do dead-letter durável.

    Métodos canônicos:
    - record(...) -> DeadLetterEntry
    - list_pending() -> list[DeadLetterEntry] (ordem de primeira falha)
    - claim(entry_id) -> DeadLetterEntry | None
      Reserva a entrada para replay e conta mais uma tentativa. Retorna None
      se a entrada não existe ou já está reservada.
    - release(entry) grava o resultado da tentativa e libera a reserva.
    - mark_delivered(entry) remove a entrada após entrega bem-sucedida.
    - purge(entry_id) remoção manual pelo operador.
    - ping() readiness do backend.
    """

    @abstractmethod
    async def record(
        self,
        *,
        failure_reason: FailureReason,
        failure_detail: str = "",
        event: CanonicalEvent | None = None,
        raw_payload: str | None = None,
    ) -> DeadLetterEntry:
        """Grava nova entrada.

        Raises:
            DeadLetterStorageError: Se o storage estiver indisponível
        """

    @abstractmethod
    async def list_pending(self) -> list[DeadLetterEntry]:
        """Lista entradas pendentes, mais antigas primeiro."""

    @abstractmethod
    async def get(self, entry_id: str) -> DeadLetterEntry | None:
        """Retorna a entrada ou None."""

    @abstractmethod
    async def claim(self, entry_id: str) -> DeadLetterEntry | None:
        """Reserva entrada para replay."""

    @abstractmethod
    async def release(self, entry: DeadLetterEntry) -> None:
        """Persiste estado da entrada e libera a reserva."""

    @abstractmethod
    async def mark_delivered(self, entry: DeadLetterEntry) -> None:
        """Remove entrada entregue."""

    @abstractmethod
    async def purge(self, entry_id: str) -> bool:
        """Remove entrada manualmente.

        Raises:
            DeadLetterEntryBusyError: Se a entrada estiver em replay
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Verifica disponibilidade do backend (readiness).

        Raises:
            DeadLetterStorageError: Se o backend estiver indisponível
        """
