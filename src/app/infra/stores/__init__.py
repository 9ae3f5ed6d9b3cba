"""Stores — implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: CRM, dedupe, lock e settings em memória (dev/test)
    - memory_partner_store: programa de parceiros em memória (dev/test)
    - redis_dedupe_store: dedupe inbound usando Redis
    - redis_tenant_lock: lock por tenant usando Redis
"""

from __future__ import annotations

from app.infra.stores.memory_partner_store import MemoryPartnerStore
from app.infra.stores.memory_stores import (
    MemoryCrmStore,
    MemoryDedupeStore,
    MemorySettingsStore,
    MemoryTenantLock,
)
from app.infra.stores.redis_dedupe_store import RedisDedupeStore
from app.infra.stores.redis_tenant_lock import RedisTenantLock

__all__ = [
    # Memory (dev/test)
    "MemoryCrmStore",
    "MemoryDedupeStore",
    "MemoryPartnerStore",
    "MemorySettingsStore",
    "MemoryTenantLock",
    # Redis
    "RedisDedupeStore",
    "RedisTenantLock",
]
