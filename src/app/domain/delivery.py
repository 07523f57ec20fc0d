"""Resultado de entrega ao downstream.

`Delivered` e `Failed` formam uma união fechada: o Forwarder nunca levanta
exceção para falhas de entrega, sempre devolve um dos dois.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FailureKind(StrEnum):
    """Classificação da falha de entrega."""

    TRANSIENT = "Transient"
    PERMANENT = "Permanent"


@dataclass(frozen=True, slots=True)
class Delivered:
    """Downstream confirmou o recebimento."""

    status_code: int
    ack: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Failed:
    """Entrega falhou; `kind` orienta a política de replay."""

    kind: FailureKind
    detail: str
    status_code: int | None = None

    @property
    def is_permanent(self) -> bool:
        return self.kind == FailureKind.PERMANENT


DeliveryResult = Delivered | Failed
