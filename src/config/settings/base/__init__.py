"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.stores import (
    DeadLetterBackend,
    StoreSettings,
    get_store_settings,
)

__all__ = [
    # Core
    "BaseSettings",
    # Stores
    "DeadLetterBackend",
    # Types
    "Environment",
    "StoreSettings",
    "get_base_settings",
    "get_store_settings",
]
