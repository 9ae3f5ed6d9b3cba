"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.

Os stores aplicam as mesmas chaves únicas exigidas pelos protocolos e
cedem o loop (`await asyncio.sleep(0)`) no início de cada chamada, como
um data store remoto faria, para que corridas entre corrotinas sejam
exercitadas em testes.
"""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.messaging import ConversationStatus
from app.protocols.crm_store import (
    ChannelStoreProtocol,
    ContactStoreProtocol,
    TenantStoreProtocol,
)
from app.protocols.dedupe import AsyncDedupeProtocol
from app.protocols.settings_store import PartnerSettingsStoreProtocol
from app.protocols.tenant_lock import TenantLockProtocol
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from app.domain.channels import Channel, ChannelType, Tenant
    from app.domain.messaging import Contact, Conversation, MessageRecord


async def _suspend() -> None:
    """Ponto de suspensão equivalente a uma chamada de rede."""
    await asyncio.sleep(0)


class MemoryDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._processed: dict[str, float] = {}  # key -> expires_at
        self._processing: dict[str, float] = {}

    @staticmethod
    def _alive(store: dict[str, float], key: str) -> bool:
        expires_at = store.get(key)
        if expires_at is None:
            return False
        if expires_at < time.time():
            del store[key]
            return False
        return True

    async def is_duplicate(self, key: str) -> bool:
        return self._alive(self._processed, key) or self._alive(self._processing, key)

    async def mark_processing(self, key: str, ttl: int = 30) -> None:
        self._processing[key] = time.time() + ttl

    async def mark_processed(self, key: str, ttl: int = 86400) -> None:
        self._processed[key] = time.time() + ttl
        self._processing.pop(key, None)

    async def unmark_processing(self, key: str) -> None:
        self._processing.pop(key, None)


class MemoryTenantLock(TenantLockProtocol):
    """Lock por tenant com asyncio.Lock (um processo apenas)."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def hold(self, tenant_id: str) -> AsyncIterator[None]:
        async with self._locks[tenant_id]:
            yield


class MemorySettingsStore(PartnerSettingsStoreProtocol):
    """Configurações do programa de parceiros em memória."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._settings: dict[str, Any] = dict(initial or {})

    async def get_setting(self, key: str) -> Any | None:
        await _suspend()
        return self._settings.get(key)

    async def set_setting(self, key: str, value: Any) -> None:
        await _suspend()
        self._settings[key] = value


class MemoryCrmStore(TenantStoreProtocol, ChannelStoreProtocol, ContactStoreProtocol):
    """Tenants, canais, contatos, conversas e mensagens em memória."""

    def __init__(self) -> None:
        self._tenants: dict[str, Tenant] = {}
        self._channels: dict[str, Channel] = {}
        self._contacts: dict[tuple[str, str, str], Contact] = {}
        self._conversations: dict[str, Conversation] = {}
        self._messages: list[MessageRecord] = []
        self._message_keys: dict[tuple[str, str, str], MessageRecord] = {}

    # ── Tenants ─────────────────────────────────────────────────────────

    def add_tenant(self, tenant: Tenant) -> None:
        """Registra tenant (o billing externo é o dono real do plano)."""
        self._tenants[tenant.id] = tenant

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        await _suspend()
        return self._tenants.get(tenant_id)

    # ── Channels ────────────────────────────────────────────────────────

    async def list_channels(self, tenant_id: str, *, active_only: bool = False) -> list[Channel]:
        await _suspend()
        channels = [
            c
            for c in self._channels.values()
            if c.tenant_id == tenant_id and (c.is_active or not active_only)
        ]
        return list(reversed(channels))

    async def get_channel(self, tenant_id: str, channel_id: str) -> Channel | None:
        await _suspend()
        channel = self._channels.get(channel_id)
        if channel is None or channel.tenant_id != tenant_id:
            return None
        return channel

    async def insert_channel(self, channel: Channel) -> Channel:
        await _suspend()
        if channel.id in self._channels:
            raise UniqueConstraintViolation("channel", (channel.id,))
        self._channels[channel.id] = channel
        return channel

    async def update_channel(
        self, tenant_id: str, channel_id: str, **changes: Any
    ) -> Channel | None:
        await _suspend()
        channel = self._channels.get(channel_id)
        if channel is None or channel.tenant_id != tenant_id:
            return None
        updated = replace(channel, updated_at=datetime.now(UTC), **changes)
        self._channels[channel_id] = updated
        return updated

    async def delete_channel(self, tenant_id: str, channel_id: str) -> bool:
        await _suspend()
        channel = self._channels.get(channel_id)
        if channel is None or channel.tenant_id != tenant_id:
            return False
        del self._channels[channel_id]
        return True

    async def clear_primary(self, tenant_id: str) -> None:
        await _suspend()
        self._clear_primary_now(tenant_id)

    async def set_primary(self, tenant_id: str, channel_id: str) -> Channel | None:
        await _suspend()
        channel = self._channels.get(channel_id)
        if channel is None or channel.tenant_id != tenant_id:
            return None
        self._clear_primary_now(tenant_id)
        updated = replace(channel, is_primary=True, updated_at=datetime.now(UTC))
        self._channels[channel_id] = updated
        return updated

    def _clear_primary_now(self, tenant_id: str) -> None:
        for channel_id, channel in list(self._channels.items()):
            if channel.tenant_id == tenant_id and channel.is_primary:
                self._channels[channel_id] = replace(channel, is_primary=False)

    # ── Contacts / Conversations ────────────────────────────────────────

    async def find_contact(
        self, tenant_id: str, channel_type: ChannelType, external_id: str
    ) -> Contact | None:
        await _suspend()
        return self._contacts.get((tenant_id, channel_type.value, external_id))

    async def insert_contact(self, contact: Contact) -> Contact:
        await _suspend()
        key = (contact.tenant_id, contact.channel_type.value, contact.external_id)
        if key in self._contacts:
            raise UniqueConstraintViolation("contact", key)
        self._contacts[key] = contact
        return contact

    async def find_active_conversation(
        self, tenant_id: str, contact_id: str, channel_type: ChannelType
    ) -> Conversation | None:
        await _suspend()
        return self._find_active_now(tenant_id, contact_id, channel_type)

    def _find_active_now(
        self, tenant_id: str, contact_id: str, channel_type: ChannelType
    ) -> Conversation | None:
        for conversation in self._conversations.values():
            if (
                conversation.tenant_id == tenant_id
                and conversation.contact_id == contact_id
                and conversation.channel_type is channel_type
                and conversation.status is ConversationStatus.ACTIVE
            ):
                return conversation
        return None

    async def insert_conversation(self, conversation: Conversation) -> Conversation:
        await _suspend()
        if conversation.status is ConversationStatus.ACTIVE and self._find_active_now(
            conversation.tenant_id, conversation.contact_id, conversation.channel_type
        ):
            key = (conversation.tenant_id, conversation.contact_id, conversation.channel_type.value)
            raise UniqueConstraintViolation("conversation", key)
        self._conversations[conversation.id] = conversation
        return conversation

    def count_contacts(self) -> int:
        return len(self._contacts)

    def count_conversations(self) -> int:
        return len(self._conversations)

    # ── Messages ────────────────────────────────────────────────────────

    async def insert_message(self, message: MessageRecord) -> MessageRecord:
        await _suspend()
        if message.external_message_id:
            key = (message.tenant_id, message.channel_type.value, message.external_message_id)
            if key in self._message_keys:
                raise UniqueConstraintViolation("message", key)
            self._message_keys[key] = message
        self._messages.append(message)
        return message

    async def find_message_by_external_id(
        self, tenant_id: str, channel_type: ChannelType, external_message_id: str
    ) -> MessageRecord | None:
        await _suspend()
        return self._message_keys.get((tenant_id, channel_type.value, external_message_id))

    async def list_messages_since(self, tenant_id: str, since: datetime) -> list[MessageRecord]:
        await _suspend()
        return [m for m in self._messages if m.tenant_id == tenant_id and m.timestamp >= since]
