"""Teste E2E do relay: webhook -> cache -> downstream -> dead-letter -> replay."""

from __future__ import annotations

import hashlib
import hmac
import json

import httpx
import pytest

from app.app import create_app
from app.bootstrap import dependencies
from app.infra.downstream import DownstreamForwarder
from app.infra.http import HttpClient, HttpClientConfig
from config.settings import get_downstream_settings

WEBHOOK_SECRET = "whsec"
ADMIN_TOKEN = "admin-token"

REVIEWED_REJECTED = {
    "type": "applicantReviewed",
    "applicantId": "app_1;externalUserId=user_42",
    "levelName": "basic-kyc-level",
    "reviewResult": {
        "reviewStatus": "rejected",
        "rejectLabels": ["FORGERY", "SELFIE_MISMATCH", "BLURRY"],
    },
}


class _Downstream:
    """Downstream controlável: registra payloads e responde com `status`."""

    def __init__(self) -> None:
        self.status = 200
        self.received: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.status >= 300:
            return httpx.Response(self.status)
        self.received.append(json.loads(request.content))
        return httpx.Response(self.status, json={"ok": True})


@pytest.fixture
def downstream(monkeypatch: pytest.MonkeyPatch) -> _Downstream:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("SUMSUB_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("ADMIN_API_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("DOWNSTREAM_BASE_URL", "https://registry.internal")
    monkeypatch.setenv("DOWNSTREAM_SERVICE_TOKEN", "svc")
    monkeypatch.setenv("DEAD_LETTER_BACKEND", "memory")

    fake = _Downstream()

    def _create_forwarder() -> DownstreamForwarder:
        http = HttpClient(
            HttpClientConfig(max_retries=0),
            transport=httpx.MockTransport(fake.handler),
        )
        return DownstreamForwarder(get_downstream_settings(), http_client=http)

    monkeypatch.setattr(dependencies, "create_forwarder", _create_forwarder)
    return fake


def _signed_headers(body: bytes) -> dict[str, str]:
    digest = hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()
    return {"x-payload-digest": digest, "content-type": "application/json"}


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=create_app()),
        base_url="http://relay.test",
    )


ADMIN_HEADERS = {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.mark.asyncio
async def test_signed_event_is_cached_and_forwarded(downstream: _Downstream) -> None:
    body = json.dumps(REVIEWED_REJECTED).encode()

    async with _client() as client:
        response = await client.post("/webhook/sumsub/", content=body, headers=_signed_headers(body))
        status = await client.get("/admin/verifications/user_42", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["state"] == "Delivered"
    [forwarded] = downstream.received
    assert forwarded["subject_id"] == "user_42"
    assert forwarded["rejection_reasons"] == ["FORGERY", "SELFIE_MISMATCH", "BLURRY"]
    assert status.json()["last_review_outcome"] == "Rejected"
    assert status.json()["level_name"] == "basic-kyc-level"


@pytest.mark.asyncio
async def test_bad_signature_is_forbidden(downstream: _Downstream) -> None:
    body = json.dumps(REVIEWED_REJECTED).encode()

    async with _client() as client:
        response = await client.post(
            "/webhook/sumsub/",
            content=body,
            headers={"x-payload-digest": "0" * 64},
        )

    assert response.status_code == 403
    assert downstream.received == []


@pytest.mark.asyncio
async def test_downstream_outage_is_recovered_by_replay(downstream: _Downstream) -> None:
    body = json.dumps(REVIEWED_REJECTED).encode()
    downstream.status = 503

    async with _client() as client:
        accepted = await client.post("/webhook/sumsub/", content=body, headers=_signed_headers(body))
        pending = await client.get("/admin/dead-letters", headers=ADMIN_HEADERS)

        downstream.status = 200
        replay = await client.post("/admin/dead-letters/replay", headers=ADMIN_HEADERS)
        after = await client.get("/admin/dead-letters", headers=ADMIN_HEADERS)

    assert accepted.status_code == 200
    assert accepted.json()["state"] == "Quarantined"
    assert pending.json()["count"] == 1
    assert pending.json()["entries"][0]["failure_reason"] == "Transient"
    assert replay.json()["delivered"] == 1
    assert after.json()["count"] == 0
    assert len(downstream.received) == 1


@pytest.mark.asyncio
async def test_malformed_body_is_bad_request(downstream: _Downstream) -> None:
    body = b"{not json"

    async with _client() as client:
        response = await client.post("/webhook/sumsub/", content=body, headers=_signed_headers(body))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_requires_token(downstream: _Downstream) -> None:
    async with _client() as client:
        response = await client.get("/admin/dead-letters")

    assert response.status_code == 401
