"""Redis Dedupe Store — fast path de dedupe de webhooks inbound.

Contrato de Keys:
    As keys devem ser IDs opacos ou hashes (SHA256 de canal/tenant/id).
    NUNCA passar dados sensíveis (PII, telefones) como key.

A chave única do message store segue sendo a garantia final; este
store só evita reprocessar retries do provider.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.dedupe import AsyncDedupeProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

DEDUPE_PREFIX = "crm:dedupe:"


class RedisDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe usando Redis assíncrono.

    Args:
        redis_client: Cliente redis.asyncio
    """

    def __init__(self, redis_client: AsyncRedis[bytes]) -> None:
        self._redis = redis_client

    def _key(self, key: str) -> str:
        return f"{DEDUPE_PREFIX}{key}"

    def _processing_key(self, key: str) -> str:
        return f"{DEDUPE_PREFIX}processing:{key}"

    async def is_duplicate(self, key: str) -> bool:
        """Consulta chave processada e lock de processamento num pipeline."""
        try:
            pipeline = self._redis.pipeline()
            pipeline.exists(self._key(key))
            pipeline.exists(self._processing_key(key))
            exists_processed, exists_processing = await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao consultar dedupe no Redis") from exc

        duplicate = bool(exists_processed or exists_processing)
        if duplicate:
            logger.debug("dedupe_duplicate_detected", extra={"key": key[:8] + "..."})
        return duplicate

    async def mark_processing(self, key: str, ttl: int = 30) -> None:
        try:
            await self._redis.set(self._processing_key(key), "1", nx=True, ex=ttl)
        except Exception as exc:
            raise RedisConnectionError("Falha ao marcar processamento no Redis") from exc

    async def mark_processed(self, key: str, ttl: int = 86400) -> None:
        try:
            pipeline = self._redis.pipeline()
            pipeline.setex(self._key(key), ttl, "1")
            pipeline.delete(self._processing_key(key))
            await pipeline.execute()
        except Exception as exc:
            raise RedisConnectionError("Falha ao concluir dedupe no Redis") from exc

    async def unmark_processing(self, key: str) -> None:
        try:
            await self._redis.delete(self._processing_key(key))
        except Exception as exc:
            raise RedisConnectionError("Falha ao remover lock de dedupe no Redis") from exc
