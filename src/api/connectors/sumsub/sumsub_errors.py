"""Erros e helpers de parsing para a API Sumsub."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SumsubApiError:
    """Erro retornado pela API Sumsub."""

    code: int
    description: str
    correlation_id: str | None = None
    error_name: str | None = None


def parse_sumsub_error(
    response_data: Any,
    status_code: int,
) -> SumsubApiError:
    """Extrai informações de erro do response do provedor.

    O provedor responde `{"description", "code", "correlationId", "errorName"}`;
    corpos fora desse formato viram descrição genérica.

    Args:
        response_data: JSON do response (qualquer tipo)
        status_code: Status HTTP recebido

    Returns:
        SumsubApiError com os campos disponíveis.
    """
    if not isinstance(response_data, dict):
        return SumsubApiError(code=status_code, description="Unknown error")

    code = response_data.get("code")
    return SumsubApiError(
        code=code if isinstance(code, int) else status_code,
        description=str(response_data.get("description") or "Unknown error"),
        correlation_id=response_data.get("correlationId"),
        error_name=response_data.get("errorName"),
    )
