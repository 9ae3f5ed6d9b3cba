"""Factories de stores — criação de implementações concretas.

Backends escolhidos pelas settings de ambiente:
- DEDUPE_BACKEND: memory | redis
- TENANT_LOCK_BACKEND: memory | redis
"""

from __future__ import annotations

import logging

from app.bootstrap.clients import create_async_redis_client
from app.infra.stores import (
    MemoryDedupeStore,
    MemoryTenantLock,
    RedisDedupeStore,
    RedisTenantLock,
)
from app.protocols.dedupe import AsyncDedupeProtocol
from app.protocols.tenant_lock import TenantLockProtocol
from config.settings import get_base_settings, get_dedupe_settings, get_tenant_lock_settings

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Dedupe Store Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_dedupe_store() -> AsyncDedupeProtocol:
    """Cria store de dedupe inbound conforme DEDUPE_BACKEND."""
    backend = get_dedupe_settings().backend

    if backend == "redis":
        store: AsyncDedupeProtocol = RedisDedupeStore(create_async_redis_client())
        logger.info("dedupe_store_created", extra={"backend": "redis"})
        return store

    environment = get_base_settings().environment
    if environment != "development":
        logger.warning(
            "memory_dedupe_in_non_dev",
            extra={"backend": "memory", "environment": environment},
        )
    store = MemoryDedupeStore()
    logger.info("dedupe_store_created", extra={"backend": "memory"})
    return store


# ──────────────────────────────────────────────────────────────────────────────
# Tenant Lock Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_tenant_lock() -> TenantLockProtocol:
    """Cria lock por tenant conforme TENANT_LOCK_BACKEND.

    Com mais de uma réplica o backend precisa ser redis; memory só
    serializa dentro do processo.
    """
    settings = get_tenant_lock_settings()

    if settings.backend == "redis":
        lock: TenantLockProtocol = RedisTenantLock(
            create_async_redis_client(),
            ttl_seconds=settings.ttl_seconds,
            wait_timeout_seconds=settings.wait_timeout_seconds,
        )
        logger.info("tenant_lock_created", extra={"backend": "redis"})
        return lock

    lock = MemoryTenantLock()
    logger.info("tenant_lock_created", extra={"backend": "memory"})
    return lock
