"""Testes do RedisDedupeStore com mock."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infra.stores.redis_dedupe_store import RedisDedupeStore
from utils.errors import RedisConnectionError


def _redis_with_pipeline(result: list[int] | None = None) -> tuple[MagicMock, MagicMock]:
    redis = MagicMock()
    pipeline = MagicMock()
    pipeline.exists.return_value = pipeline
    pipeline.execute = AsyncMock(return_value=result or [])
    redis.pipeline.return_value = pipeline
    return redis, pipeline


class TestRedisDedupeStore:
    """Testes do RedisDedupeStore."""

    @pytest.mark.asyncio
    async def test_is_duplicate_checks_processed_and_processing(self) -> None:
        """is_duplicate deve considerar chave processada e lock de processamento."""
        redis, pipeline = _redis_with_pipeline([0, 1])
        store = RedisDedupeStore(redis)

        result = await store.is_duplicate("msg-1")

        assert result is True
        pipeline.exists.assert_any_call("crm:dedupe:msg-1")
        pipeline.exists.assert_any_call("crm:dedupe:processing:msg-1")
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_is_duplicate_false_for_new_key(self) -> None:
        redis, _ = _redis_with_pipeline([0, 0])
        store = RedisDedupeStore(redis)

        assert await store.is_duplicate("fresh") is False

    @pytest.mark.asyncio
    async def test_mark_processing_uses_set_nx_with_ttl(self) -> None:
        """mark_processing deve criar lock temporário sem sobrescrever."""
        redis = MagicMock()
        redis.set = AsyncMock(return_value=True)
        store = RedisDedupeStore(redis)

        await store.mark_processing("msg-2", ttl=45)

        redis.set.assert_awaited_once_with("crm:dedupe:processing:msg-2", "1", nx=True, ex=45)

    @pytest.mark.asyncio
    async def test_mark_processed_promotes_and_clears_processing_lock(self) -> None:
        redis, pipeline = _redis_with_pipeline([True, 1])
        store = RedisDedupeStore(redis)

        await store.mark_processed("msg-3", ttl=120)

        pipeline.setex.assert_called_once_with("crm:dedupe:msg-3", 120, "1")
        pipeline.delete.assert_called_once_with("crm:dedupe:processing:msg-3")
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unmark_processing_deletes_lock(self) -> None:
        redis = MagicMock()
        redis.delete = AsyncMock(return_value=1)
        store = RedisDedupeStore(redis)

        await store.unmark_processing("msg-4")

        redis.delete.assert_awaited_once_with("crm:dedupe:processing:msg-4")

    @pytest.mark.asyncio
    async def test_redis_failure_is_wrapped(self) -> None:
        """Erros do cliente viram RedisConnectionError."""
        redis, pipeline = _redis_with_pipeline()
        pipeline.execute = AsyncMock(side_effect=OSError("connection reset"))
        store = RedisDedupeStore(redis)

        with pytest.raises(RedisConnectionError):
            await store.is_duplicate("msg-5")
