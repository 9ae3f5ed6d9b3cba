"""Testes do RedisTenantLock com mock."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisClientConnectionError
from redis.exceptions import LockError

from app.infra.stores.redis_tenant_lock import RedisTenantLock
from utils.errors import RedisConnectionError


def _redis_with_lock(acquired: bool = True) -> tuple[MagicMock, MagicMock]:
    redis = MagicMock()
    lock = MagicMock()
    lock.acquire = AsyncMock(return_value=acquired)
    lock.release = AsyncMock()
    redis.lock.return_value = lock
    return redis, lock


class TestRedisTenantLock:
    @pytest.mark.asyncio
    async def test_hold_acquires_and_releases(self) -> None:
        redis, lock = _redis_with_lock()
        tenant_lock = RedisTenantLock(redis, ttl_seconds=7, wait_timeout_seconds=2)

        async with tenant_lock.hold("t1"):
            lock.release.assert_not_awaited()

        redis.lock.assert_called_once_with("crm:tenant_lock:t1", timeout=7, blocking_timeout=2)
        lock.acquire.assert_awaited_once()
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_releases_when_body_raises(self) -> None:
        redis, lock = _redis_with_lock()
        tenant_lock = RedisTenantLock(redis)

        with pytest.raises(ValueError, match="boom"):
            async with tenant_lock.hold("t1"):
                raise ValueError("boom")

        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_raises_connection_error(self) -> None:
        """Lock não adquirido dentro do prazo vira RedisConnectionError."""
        redis, _ = _redis_with_lock(acquired=False)
        tenant_lock = RedisTenantLock(redis)

        with pytest.raises(RedisConnectionError):
            async with tenant_lock.hold("t1"):
                pass

    @pytest.mark.asyncio
    async def test_client_error_is_wrapped(self) -> None:
        redis, lock = _redis_with_lock()
        lock.acquire = AsyncMock(side_effect=RedisClientConnectionError("down"))
        tenant_lock = RedisTenantLock(redis)

        with pytest.raises(RedisConnectionError):
            async with tenant_lock.hold("t1"):
                pass

    @pytest.mark.asyncio
    async def test_expired_lock_on_release_is_tolerated(self) -> None:
        redis, lock = _redis_with_lock()
        lock.release = AsyncMock(side_effect=LockError("expired"))
        tenant_lock = RedisTenantLock(redis)

        async with tenant_lock.hold("t1"):
            pass

        lock.release.assert_awaited_once()
