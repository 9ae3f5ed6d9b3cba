"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.dedupe import (
    DedupeBackend,
    DedupeSettings,
    get_dedupe_settings,
)
from config.settings.base.tenant_lock import (
    TenantLockBackend,
    TenantLockSettings,
    get_tenant_lock_settings,
)

__all__ = [
    "BaseSettings",
    "DedupeBackend",
    "DedupeSettings",
    "Environment",
    "TenantLockBackend",
    "TenantLockSettings",
    "get_base_settings",
    "get_dedupe_settings",
    "get_tenant_lock_settings",
]
