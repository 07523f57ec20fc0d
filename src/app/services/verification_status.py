"""Serviço de status de verificação (read-through + reset de perfil).

O cache local fica na frente da API de status do provedor: num cache miss o
documento do provedor é convertido em evento canônico e aplicado ao cache.
Falhas do provedor sobem como ProviderUnavailableError, nunca como
"não verificado".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.protocols.normalizer import NormalizationError
from utils.errors import ProviderUnavailableError

if TYPE_CHECKING:
    from app.domain.verification import StatusRecord
    from app.protocols import (
        EventNormalizerProtocol,
        ProviderStatusClientProtocol,
        StatusCacheProtocol,
    )

logger = logging.getLogger(__name__)


class VerificationStatusService:
    """Consultas de status e reset de perfil."""

    def __init__(
        self,
        *,
        status_cache: StatusCacheProtocol,
        provider: ProviderStatusClientProtocol,
        normalizer: EventNormalizerProtocol,
    ) -> None:
        self._cache = status_cache
        self._provider = provider
        self._normalizer = normalizer

    async def get_status(self, subject_id: str) -> StatusRecord:
        """Retorna o status do sujeito, consultando o provedor num cache miss.

        Raises:
            ProviderUnavailableError: Provedor indisponível ou resposta inválida
            ProviderRequestError: Provedor recusou (ex.: 404 sem applicant)
        """
        record = await self._cache.lookup(subject_id)
        if record is not None:
            return record

        logger.info("status_cache_miss")
        document = await self._provider.get_applicant_status(subject_id)
        try:
            event = self._normalizer.normalize_status_document(document, subject_id)
        except NormalizationError as exc:
            raise ProviderUnavailableError("sumsub_invalid_response") from exc
        return await self._cache.upsert(event)

    async def reset_profile(self, subject_id: str) -> bool:
        """Reseta o perfil no provedor e remove o registro local.

        Em falha do provedor o cache fica intacto (a exceção sobe).

        Returns:
            True se havia registro no cache.
        """
        document = await self._provider.get_applicant_status(subject_id)
        applicant_id = document.get("id")
        if not isinstance(applicant_id, str) or not applicant_id:
            raise ProviderUnavailableError("sumsub_invalid_response")

        await self._provider.reset_applicant(applicant_id)
        evicted = await self._cache.evict(subject_id)
        logger.info("verification_profile_reset", extra={"evicted": evicted})
        return evicted

    async def get_required_docs(self, subject_id: str) -> dict[str, Any]:
        return await self._provider.get_required_docs_status(subject_id)

    async def get_review_history(self, subject_id: str) -> dict[str, Any]:
        return await self._provider.get_review_history(subject_id)
