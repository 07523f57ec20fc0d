"""Testes do composition root."""

from __future__ import annotations

import pytest

from app import bootstrap
from app.bootstrap import dependencies
from app.infra.stores import MemoryDeadLetterStore, MemoryStatusCache, RedisDeadLetterStore
from app.use_cases.verification import ProcessVerificationEventUseCase


def _minimal_env(monkeypatch: pytest.MonkeyPatch, environment: str = "development") -> None:
    monkeypatch.setenv("ENVIRONMENT", environment)
    monkeypatch.setenv("SUMSUB_WEBHOOK_SECRET", "whsec")
    monkeypatch.setenv("SUMSUB_APP_TOKEN", "app")
    monkeypatch.setenv("SUMSUB_SECRET_KEY", "key")
    monkeypatch.setenv("DOWNSTREAM_BASE_URL", "https://registry.internal")
    monkeypatch.setenv("DOWNSTREAM_SERVICE_TOKEN", "svc")
    monkeypatch.delenv("DEAD_LETTER_BACKEND", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)


def test_singletons_share_stores(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch)

    pipeline = bootstrap.get_pipeline()

    assert isinstance(pipeline, ProcessVerificationEventUseCase)
    assert bootstrap.get_pipeline() is pipeline
    assert isinstance(bootstrap.get_status_cache(), MemoryStatusCache)
    assert isinstance(bootstrap.get_dead_letter_store(), MemoryDeadLetterStore)
    assert bootstrap.get_replay_use_case() is bootstrap.get_replay_use_case()


def test_redis_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch)
    monkeypatch.setenv("DEAD_LETTER_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")

    assert isinstance(dependencies.create_dead_letter_store(), RedisDeadLetterStore)


def test_invalid_backend_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch)
    monkeypatch.setenv("DEAD_LETTER_BACKEND", "firestore")

    with pytest.raises(ValueError, match="DEAD_LETTER_BACKEND"):
        dependencies.create_dead_letter_store()


def test_validation_passes_in_development(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch)

    assert bootstrap.collect_settings_errors() == []
    bootstrap.validate_runtime_settings()


def test_validation_is_strict_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch, "production")

    with pytest.raises(RuntimeError, match="ADMIN_API_TOKEN"):
        bootstrap.validate_runtime_settings()


def test_validation_only_warns_in_development(monkeypatch: pytest.MonkeyPatch) -> None:
    _minimal_env(monkeypatch)
    monkeypatch.delenv("SUMSUB_WEBHOOK_SECRET")

    errors = bootstrap.collect_settings_errors()

    assert errors == ["sumsub: SUMSUB_WEBHOOK_SECRET não configurado"]
    bootstrap.validate_runtime_settings()
