"""Use case de processamento inbound de qualquer canal.

Fluxo por mensagem: normaliza (adapter) → dedupe rápido → Router.route
(resolver + persistência). O store de mensagens continua sendo a fonte
de verdade da deduplicação; o dedupe aqui só evita ida ao store.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.domain.errors import ChannelNotConfiguredError

if TYPE_CHECKING:
    from app.domain.channels import ChannelType
    from app.domain.messaging import IncomingMessage
    from app.protocols import AsyncDedupeProtocol
    from app.services.channel_router import ChannelRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InboundProcessingResult:
    """Resultado do processamento de um webhook."""

    received: int
    processed: int
    skipped: int
    dropped: int


def inbound_dedupe_key(message: IncomingMessage) -> str | None:
    """Chave de dedupe (tenant, canal, id externo); None se não houver id."""
    if not message.external_message_id:
        return None
    material = f"{message.tenant_id}:{message.channel_type.value}:{message.external_message_id}"
    return hashlib.sha256(material.encode()).hexdigest()


class ProcessChannelWebhookUseCase:
    """Processa payload de webhook de um tenant/canal."""

    def __init__(
        self,
        *,
        router: ChannelRouter,
        dedupe: AsyncDedupeProtocol,
        processing_ttl: int = 30,
        processed_ttl: int = 86400,
    ) -> None:
        self._router = router
        self._dedupe = dedupe
        self._processing_ttl = processing_ttl
        self._processed_ttl = processed_ttl

    async def execute(
        self,
        *,
        tenant_id: str,
        channel_type: ChannelType,
        payload: dict[str, Any],
    ) -> InboundProcessingResult:
        """Normaliza e roteia todas as mensagens do payload.

        Raises:
            UnsupportedChannelError: sem adapter para o canal.
        """
        adapter = self._router.adapter_for(channel_type)
        messages = adapter.normalize(tenant_id, payload)
        processed = skipped = dropped = 0

        for message in messages:
            key = inbound_dedupe_key(message)
            if key and await self._dedupe.is_duplicate(key):
                skipped += 1
                continue
            if key:
                await self._dedupe.mark_processing(key, ttl=self._processing_ttl)

            try:
                await self._router.route(message)
            except ChannelNotConfiguredError as exc:
                if key:
                    await self._dedupe.unmark_processing(key)
                logger.warning(
                    "inbound_message_dropped",
                    extra={
                        "tenant_id": tenant_id,
                        "channel_type": channel_type.value,
                        "error_kind": exc.error_kind,
                    },
                )
                dropped += 1
                continue
            except Exception:
                if key:
                    await self._dedupe.unmark_processing(key)
                raise

            if key:
                await self._dedupe.mark_processed(key, ttl=self._processed_ttl)
            processed += 1

        return InboundProcessingResult(
            received=len(messages),
            processed=processed,
            skipped=skipped,
            dropped=dropped,
        )
