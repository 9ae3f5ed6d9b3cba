"""Resolução idempotente de contato e conversa.

Padrão "busca ou insere; se o insert perder a corrida, busca de novo":
a chave única do store é a fonte de verdade, a leitura prévia é só o
caminho rápido.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from app.domain.messaging import Contact, Conversation, ResolvedConversation
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from app.domain.channels import ChannelType
    from app.protocols.crm_store import ContactStoreProtocol

logger = logging.getLogger(__name__)


class ContactConversationResolver:
    """Find-or-create de Contact e Conversation por (tenant, canal, id externo)."""

    def __init__(self, store: ContactStoreProtocol) -> None:
        self._store = store

    async def resolve(
        self,
        tenant_id: str,
        channel_type: ChannelType,
        external_contact_id: str,
        contact_name: str | None = None,
    ) -> ResolvedConversation:
        contact = await self._resolve_contact(tenant_id, channel_type, external_contact_id, contact_name)
        conversation = await self._resolve_conversation(tenant_id, contact.id, channel_type)
        return ResolvedConversation(contact=contact, conversation=conversation)

    async def _resolve_contact(
        self,
        tenant_id: str,
        channel_type: ChannelType,
        external_id: str,
        name: str | None,
    ) -> Contact:
        existing = await self._store.find_contact(tenant_id, channel_type, external_id)
        if existing is not None:
            return existing

        candidate = Contact(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            channel_type=channel_type,
            external_id=external_id,
            name=name,
        )
        try:
            created = await self._store.insert_contact(candidate)
        except UniqueConstraintViolation:
            winner = await self._store.find_contact(tenant_id, channel_type, external_id)
            if winner is None:
                raise
            logger.debug(
                "contact_insert_race_resolved",
                extra={"tenant_id": tenant_id, "channel_type": channel_type.value},
            )
            return winner

        logger.info(
            "contact_created",
            extra={"tenant_id": tenant_id, "channel_type": channel_type.value, "contact_id": created.id},
        )
        return created

    async def _resolve_conversation(
        self,
        tenant_id: str,
        contact_id: str,
        channel_type: ChannelType,
    ) -> Conversation:
        existing = await self._store.find_active_conversation(tenant_id, contact_id, channel_type)
        if existing is not None:
            return existing

        candidate = Conversation(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            contact_id=contact_id,
            channel_type=channel_type,
        )
        try:
            return await self._store.insert_conversation(candidate)
        except UniqueConstraintViolation:
            winner = await self._store.find_active_conversation(tenant_id, contact_id, channel_type)
            if winner is None:
                raise
            logger.debug(
                "conversation_insert_race_resolved",
                extra={"tenant_id": tenant_id, "channel_type": channel_type.value},
            )
            return winner
