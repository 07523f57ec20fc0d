"""Testes das settings carregadas do ambiente."""

from __future__ import annotations

import pytest

from config.settings import (
    BaseSettings,
    DownstreamSettings,
    StoreSettings,
    SumsubSettings,
    get_base_settings,
    get_downstream_settings,
    get_store_settings,
    get_sumsub_settings,
)


def test_base_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("ADMIN_API_TOKEN", "secret")

    settings = get_base_settings()

    assert settings.environment == "production"
    assert settings.is_production
    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.validate() == []


def test_admin_token_required_outside_development() -> None:
    errors = BaseSettings(environment="staging").validate()

    assert "ADMIN_API_TOKEN não configurado" in errors
    assert BaseSettings(environment="development").validate() == []


def test_sumsub_settings_trims_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUMSUB_BASE_URL", "https://api.sumsub.test/")
    monkeypatch.setenv("SUMSUB_ALLOW_UNSIGNED_WEBHOOKS", "true")

    settings = get_sumsub_settings()

    assert settings.api_base_url == "https://api.sumsub.test"
    assert settings.allow_unsigned_webhooks is True


def test_missing_webhook_secret_fails_closed() -> None:
    errors = SumsubSettings(app_token="t", secret_key="k").validate()

    assert errors == ["SUMSUB_WEBHOOK_SECRET não configurado"]


def test_unsigned_mode_only_in_development() -> None:
    settings = SumsubSettings(app_token="t", secret_key="k", allow_unsigned_webhooks=True)

    assert settings.validate("development") == []
    assert settings.validate("production") == [
        "SUMSUB_ALLOW_UNSIGNED_WEBHOOKS só é permitido em development"
    ]


def test_downstream_urls(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOWNSTREAM_BASE_URL", "https://registry.internal/")
    monkeypatch.setenv("DOWNSTREAM_SERVICE_TOKEN", "svc")
    monkeypatch.setenv("DOWNSTREAM_TIMEOUT_SECONDS", "2.5")

    settings = get_downstream_settings()

    assert settings.webhook_url == "https://registry.internal/kyc/webhook/"
    assert settings.health_url == "https://registry.internal/health/"
    assert settings.timeout_seconds == 2.5
    assert settings.validate() == []


def test_downstream_validation() -> None:
    errors = DownstreamSettings(timeout_seconds=0).validate()

    assert len(errors) == 3


def test_store_backend_defaults_by_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.delenv("DEAD_LETTER_BACKEND", raising=False)

    assert get_store_settings().dead_letter_backend == "redis"


def test_store_out_of_order_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATUS_CACHE_IGNORE_OUT_OF_ORDER", "1")

    assert get_store_settings().ignore_out_of_order_events is True


def test_memory_dead_letter_forbidden_outside_development() -> None:
    errors = StoreSettings(dead_letter_backend="memory").validate(
        BaseSettings(environment="production")
    )

    assert any("memory proibido" in error for error in errors)


def test_redis_dead_letter_requires_url() -> None:
    errors = StoreSettings(dead_letter_backend="redis").validate(BaseSettings())

    assert errors == ["DEAD_LETTER_BACKEND=redis requer REDIS_URL configurado"]
