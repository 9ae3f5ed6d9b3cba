"""Protocolo de dedupe de mensagens inbound (fast path).

A chave única do message store continua sendo a garantia de
idempotência; o dedupe evita trabalho repetido em retries do provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AsyncDedupeProtocol(ABC):
    """Contrato assíncrono para stores de deduplicação.

    Fluxo:
    - is_duplicate(key) antes de processar
    - mark_processing(key) durante o processamento (TTL curto)
    - mark_processed(key) ao concluir / unmark_processing(key) em falha
    """

    @abstractmethod
    async def is_duplicate(self, key: str) -> bool:
        """True se a chave já foi processada ou está em processamento."""

    @abstractmethod
    async def mark_processing(self, key: str, ttl: int = 30) -> None:
        """Marca a chave como em processamento."""

    @abstractmethod
    async def mark_processed(self, key: str, ttl: int = 86400) -> None:
        """Marca a chave como processada e libera o lock temporário."""

    @abstractmethod
    async def unmark_processing(self, key: str) -> None:
        """Libera o lock temporário para permitir retry."""
