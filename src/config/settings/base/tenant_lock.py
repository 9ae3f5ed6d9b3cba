"""Settings do lock por tenant (mutação de canal primário)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

TenantLockBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class TenantLockSettings:
    """Configurações do lock por tenant.

    Attributes:
        backend: memory (processo único) ou redis (várias réplicas)
        ttl_seconds: Expiração do lock
        wait_timeout_seconds: Espera máxima para adquirir
    """

    backend: TenantLockBackend = "memory"
    ttl_seconds: float = 10.0
    wait_timeout_seconds: float = 5.0

    def validate(self, base: BaseSettings) -> list[str]:
        errors: list[str] = []
        if self.backend not in {"memory", "redis"}:
            errors.append(f"TENANT_LOCK_BACKEND inválido: {self.backend}")
        if self.backend == "redis" and not base.redis_url:
            errors.append("TENANT_LOCK_BACKEND=redis requer REDIS_URL configurado")
        if self.ttl_seconds <= 0:
            errors.append("TENANT_LOCK_TTL_SECONDS deve ser > 0")
        if self.wait_timeout_seconds <= 0:
            errors.append("TENANT_LOCK_WAIT_TIMEOUT_SECONDS deve ser > 0")
        return errors


def _load_tenant_lock_from_env() -> TenantLockSettings:
    backend_str = os.getenv("TENANT_LOCK_BACKEND", "memory").lower()
    backend: TenantLockBackend = "redis" if backend_str == "redis" else "memory"
    return TenantLockSettings(
        backend=backend,
        ttl_seconds=float(os.getenv("TENANT_LOCK_TTL_SECONDS", "10")),
        wait_timeout_seconds=float(os.getenv("TENANT_LOCK_WAIT_TIMEOUT_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_tenant_lock_settings() -> TenantLockSettings:
    """Retorna instância cacheada de TenantLockSettings."""
    return _load_tenant_lock_from_env()
