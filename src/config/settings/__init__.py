"""Agregador de settings do kyc-relay.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    DeadLetterBackend,
    Environment,
    StoreSettings,
    get_base_settings,
    get_store_settings,
)

# Downstream
from config.settings.downstream import (
    DEFAULT_WEBHOOK_PATH,
    DownstreamSettings,
    get_downstream_settings,
)

# Provedor
from config.settings.sumsub import (
    SIGNATURE_HEADER,
    SUMSUB_API_BASE_URL,
    SumsubSettings,
    get_sumsub_settings,
)

__all__ = [
    # Constants
    "DEFAULT_WEBHOOK_PATH",
    "SIGNATURE_HEADER",
    "SUMSUB_API_BASE_URL",
    # Base
    "BaseSettings",
    "DeadLetterBackend",
    # Downstream
    "DownstreamSettings",
    "Environment",
    "StoreSettings",
    # Provedor
    "SumsubSettings",
    "get_base_settings",
    "get_downstream_settings",
    "get_store_settings",
    "get_sumsub_settings",
]
