"""Cliente HTTP da API de status do provedor (Sumsub).

Estende HttpClient genérico com:
- Assinatura de cada requisição (X-App-Token, X-App-Access-Ts, X-App-Access-Sig)
- Classificação de falhas: indisponível (timeout, 5xx, 429) vs rejeitada (4xx)
- Logging estruturado sem tokens nem identificadores completos
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from api.connectors.sumsub.sumsub_errors import parse_sumsub_error
from app.infra.http import HttpClient, HttpClientConfig, HttpError
from utils.errors import ProviderRequestError, ProviderUnavailableError

if TYPE_CHECKING:
    import httpx

    from config.settings import SumsubSettings

logger: logging.Logger = logging.getLogger(__name__)

APPLICANTS_PATH = "/resources/applicants"


def _by_external_id(subject_id: str) -> str:
    return f"{APPLICANTS_PATH}/-;externalUserId={quote(subject_id, safe='')}"


class SumsubHttpClient(HttpClient):
    """Cliente da API de status do provedor.

    Todas as respostas de sucesso são objetos JSON; qualquer outra coisa é
    tratada como indisponibilidade, nunca como "não verificado".
    """

    def __init__(
        self,
        settings: SumsubSettings,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config, transport)
        self._settings = settings

    def sign_request(
        self,
        method: str,
        path: str,
        body: bytes = b"",
        timestamp: int | None = None,
    ) -> dict[str, str]:
        """Monta headers assinados para a requisição.

        Args:
            method: Método HTTP
            path: Caminho com query string, relativo à URL base
            body: Corpo enviado (vazio em GET)
            timestamp: Unix time em segundos (padrão: agora)

        Returns:
            Headers de autenticação do provedor.
        """
        ts = str(timestamp if timestamp is not None else int(time.time()))
        message = ts.encode("utf-8") + method.upper().encode("utf-8") + path.encode("utf-8")
        signature = hmac.new(
            self._settings.secret_key.encode("utf-8"),
            message + body,
            hashlib.sha256,
        ).hexdigest()
        return {
            "X-App-Token": self._settings.app_token,
            "X-App-Access-Ts": ts,
            "X-App-Access-Sig": signature,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def get_applicant_status(self, subject_id: str) -> dict[str, Any]:
        """Documento do applicant (inclui `review`)."""
        return await self._call("GET", f"{_by_external_id(subject_id)}/one")

    async def get_required_docs_status(self, subject_id: str) -> dict[str, Any]:
        """Status dos documentos exigidos pelo nível de verificação."""
        return await self._call("GET", f"{_by_external_id(subject_id)}/requiredIdDocsStatus")

    async def get_review_history(self, subject_id: str) -> dict[str, Any]:
        """Histórico de revisão do applicant."""
        return await self._call("GET", f"{_by_external_id(subject_id)}/status")

    async def reset_applicant(self, applicant_id: str) -> dict[str, Any]:
        """Reseta o perfil do applicant (id interno do provedor, não o externo)."""
        return await self._call("POST", f"{APPLICANTS_PATH}/{quote(applicant_id, safe='')}/reset")

    async def _call(self, method: str, path: str) -> dict[str, Any]:
        url = f"{self._settings.api_base_url}{path}"
        headers = self.sign_request(method, path)
        logger.debug("sumsub_request", extra={"method": method, "path_prefix": path[:40]})

        try:
            response = await self.request(method, url, headers=headers)
        except HttpError as exc:
            logger.warning(
                "sumsub_unavailable",
                extra={"method": method, "status_code": exc.status_code, "error": str(exc)},
            )
            raise ProviderUnavailableError(str(exc), status_code=exc.status_code) from exc

        data = _safe_json(response)

        if response.status_code >= 400:
            api_error = parse_sumsub_error(data, response.status_code)
            logger.warning(
                "sumsub_request_rejected",
                extra={
                    "method": method,
                    "status_code": response.status_code,
                    "correlation_id_provider": api_error.correlation_id,
                },
            )
            raise ProviderRequestError(
                f"Sumsub API error: {response.status_code}",
                status_code=response.status_code,
                description=api_error.description,
            )

        if not isinstance(data, dict):
            raise ProviderUnavailableError(
                "sumsub_invalid_response", status_code=response.status_code
            )

        return data


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return None


def create_sumsub_http_client(
    settings: SumsubSettings | None = None,
) -> SumsubHttpClient:
    """Factory para criar cliente do provedor com config padrão.

    Args:
        settings: SumsubSettings opcional. Se None, carrega do ambiente.

    Returns:
        Cliente HTTP configurado.
    """
    # Import local para evitar dependência circular
    from config.settings import get_sumsub_settings

    sumsub = settings or get_sumsub_settings()
    config = HttpClientConfig(
        timeout_seconds=sumsub.request_timeout_seconds,
        max_retries=1,
        backoff_base_seconds=0.5,
    )
    return SumsubHttpClient(sumsub, config=config)
