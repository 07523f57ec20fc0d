"""Protocolo do cliente da API de status do provedor.

Evita dependência direta da camada api.
"""

from __future__ import annotations

from typing import Any, Protocol


class ProviderStatusClientProtocol(Protocol):
    """Contrato mínimo para consultas e reset no provedor."""

    async def get_applicant_status(self, subject_id: str) -> dict[str, Any]: ...

    async def get_required_docs_status(self, subject_id: str) -> dict[str, Any]: ...

    async def get_review_history(self, subject_id: str) -> dict[str, Any]: ...

    async def reset_applicant(self, applicant_id: str) -> dict[str, Any]: ...
