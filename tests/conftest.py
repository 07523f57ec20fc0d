"""Configuração do pytest para o projeto kyc-relay."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings e singletons são lru_cache; cada teste lê o próprio ambiente."""
    from app import bootstrap
    from app.bootstrap import clients
    from config.settings import (
        get_base_settings,
        get_downstream_settings,
        get_store_settings,
        get_sumsub_settings,
    )

    cached = (
        get_base_settings,
        get_downstream_settings,
        get_store_settings,
        get_sumsub_settings,
        clients.create_async_redis_client,
        bootstrap.get_status_cache,
        bootstrap.get_dead_letter_store,
        bootstrap.get_forwarder,
        bootstrap.get_pipeline,
        bootstrap.get_replay_use_case,
        bootstrap.get_status_service,
    )
    for fn in cached:
        fn.cache_clear()
    yield
    for fn in cached:
        fn.cache_clear()
