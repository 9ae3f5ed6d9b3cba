"""Lock por tenant em Redis (SET NX com TTL via redis.asyncio.lock).

Serializa "limpar primários, marcar um" entre réplicas do serviço.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from redis.exceptions import LockError, RedisError

from app.protocols.tenant_lock import TenantLockProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

LOCK_PREFIX = "crm:tenant_lock:"


class RedisTenantLock(TenantLockProtocol):
    """Lock distribuído por tenant.

    Args:
        redis_client: Cliente redis.asyncio
        ttl_seconds: Expiração do lock (libera se o dono morrer)
        wait_timeout_seconds: Tempo máximo aguardando o lock
    """

    def __init__(
        self,
        redis_client: AsyncRedis[bytes],
        ttl_seconds: float = 10.0,
        wait_timeout_seconds: float = 5.0,
    ) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds
        self._wait_timeout = wait_timeout_seconds

    @asynccontextmanager
    async def hold(self, tenant_id: str) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{LOCK_PREFIX}{tenant_id}",
            timeout=self._ttl,
            blocking_timeout=self._wait_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise RedisConnectionError("Falha ao adquirir lock do tenant no Redis") from exc
        if not acquired:
            msg = "Timeout aguardando lock do tenant"
            raise RedisConnectionError(msg)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("tenant_lock_expired_before_release", extra={"tenant_id": tenant_id})
