"""Protocolo do cache de status por sujeito.

Interface leve (ABC) dependida por Application.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.verification import CanonicalEvent, StatusRecord


class StatusCacheProtocol(ABC):
    """Contrato do cache de status.

    Métodos canônicos:
    - upsert(event) -> StatusRecord
      Cria o registro na primeira vez que o sujeito aparece; depois substitui
      tipo/resultado, preserva created_at e renova updated_at.
    - lookup(subject_id) -> StatusRecord | None
    - evict(subject_id) -> bool
      Remove o registro (reset de perfil no provedor).

    Implementações devem garantir atomicidade por chave sob concorrência.
    O cache nunca chama a rede.
    """

    @abstractmethod
    async def upsert(self, event: CanonicalEvent) -> StatusRecord:
        """Aplica evento canônico ao registro do sujeito.

        Args:
            event: Evento já normalizado

        Returns:
            Registro resultante.
        """

    @abstractmethod
    async def lookup(self, subject_id: str) -> StatusRecord | None:
        """Retorna o registro do sujeito ou None."""

    @abstractmethod
    async def evict(self, subject_id: str) -> bool:
        """Remove o registro do sujeito.

        Returns:
            True se havia registro.
        """
