"""Testes dos stores em memória (CRM, dedupe, lock, settings)."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.domain.channels import Channel, ChannelType, Plan, Tenant
from app.domain.messaging import Contact, Conversation, ConversationStatus, MessageRecord, SenderType
from app.infra.stores.memory_stores import (
    MemoryCrmStore,
    MemoryDedupeStore,
    MemorySettingsStore,
    MemoryTenantLock,
)
from utils.errors import UniqueConstraintViolation


def _channel(channel_id: str, tenant_id: str = "t1", **kwargs: object) -> Channel:
    return Channel(id=channel_id, tenant_id=tenant_id, channel_type=ChannelType.WHATSAPP, **kwargs)


class TestMemoryCrmStoreChannels:
    @pytest.mark.asyncio
    async def test_list_channels_newest_first_and_active_filter(self) -> None:
        store = MemoryCrmStore()
        await store.insert_channel(_channel("c1"))
        await store.insert_channel(_channel("c2", is_active=False))
        await store.insert_channel(_channel("other", tenant_id="t2"))

        all_channels = await store.list_channels("t1")
        active = await store.list_channels("t1", active_only=True)

        assert [c.id for c in all_channels] == ["c2", "c1"]
        assert [c.id for c in active] == ["c1"]

    @pytest.mark.asyncio
    async def test_get_channel_is_scoped_by_tenant(self) -> None:
        store = MemoryCrmStore()
        await store.insert_channel(_channel("c1"))

        assert await store.get_channel("t1", "c1") is not None
        assert await store.get_channel("t2", "c1") is None

    @pytest.mark.asyncio
    async def test_set_primary_clears_others(self) -> None:
        store = MemoryCrmStore()
        await store.insert_channel(_channel("c1", is_primary=True))
        await store.insert_channel(_channel("c2"))

        updated = await store.set_primary("t1", "c2")

        assert updated is not None and updated.is_primary
        primaries = [c.id for c in await store.list_channels("t1") if c.is_primary]
        assert primaries == ["c2"]

    @pytest.mark.asyncio
    async def test_update_and_delete_unknown_channel(self) -> None:
        store = MemoryCrmStore()

        assert await store.update_channel("t1", "missing", is_active=False) is None
        assert await store.delete_channel("t1", "missing") is False

    @pytest.mark.asyncio
    async def test_add_tenant_and_get(self) -> None:
        store = MemoryCrmStore()
        store.add_tenant(Tenant(id="t1", plan=Plan.PRO))

        tenant = await store.get_tenant("t1")

        assert tenant is not None and tenant.plan is Plan.PRO
        assert await store.get_tenant("t2") is None


class TestMemoryCrmStoreContacts:
    @pytest.mark.asyncio
    async def test_duplicate_contact_key_raises(self) -> None:
        store = MemoryCrmStore()
        await store.insert_contact(
            Contact(id="a", tenant_id="t1", channel_type=ChannelType.TELEGRAM, external_id="42")
        )

        with pytest.raises(UniqueConstraintViolation) as exc_info:
            await store.insert_contact(
                Contact(id="b", tenant_id="t1", channel_type=ChannelType.TELEGRAM, external_id="42")
            )

        assert exc_info.value.entity == "contact"

    @pytest.mark.asyncio
    async def test_second_active_conversation_raises_but_closed_is_allowed(self) -> None:
        store = MemoryCrmStore()
        await store.insert_conversation(
            Conversation(id="v1", tenant_id="t1", contact_id="a", channel_type=ChannelType.TELEGRAM)
        )

        with pytest.raises(UniqueConstraintViolation):
            await store.insert_conversation(
                Conversation(id="v2", tenant_id="t1", contact_id="a", channel_type=ChannelType.TELEGRAM)
            )
        await store.insert_conversation(
            Conversation(
                id="v3",
                tenant_id="t1",
                contact_id="a",
                channel_type=ChannelType.TELEGRAM,
                status=ConversationStatus.CLOSED,
            )
        )
        assert store.count_conversations() == 2

    @pytest.mark.asyncio
    async def test_message_external_id_unique_and_listing_window(self) -> None:
        store = MemoryCrmStore()
        now = datetime.now(UTC)
        message = MessageRecord(
            id="m1",
            tenant_id="t1",
            conversation_id="v1",
            channel_type=ChannelType.INSTAGRAM,
            sender_type=SenderType.CONTACT,
            timestamp=now,
            external_message_id="mid.1",
        )
        await store.insert_message(message)

        with pytest.raises(UniqueConstraintViolation):
            await store.insert_message(
                MessageRecord(
                    id="m2",
                    tenant_id="t1",
                    conversation_id="v1",
                    channel_type=ChannelType.INSTAGRAM,
                    sender_type=SenderType.CONTACT,
                    timestamp=now,
                    external_message_id="mid.1",
                )
            )

        found = await store.find_message_by_external_id("t1", ChannelType.INSTAGRAM, "mid.1")
        assert found is message
        assert await store.list_messages_since("t1", now - timedelta(minutes=1)) == [message]
        assert await store.list_messages_since("t1", now + timedelta(minutes=1)) == []


class TestMemoryDedupeStore:
    @pytest.mark.asyncio
    async def test_processing_then_processed_flow(self) -> None:
        store = MemoryDedupeStore()

        assert await store.is_duplicate("k") is False
        await store.mark_processing("k", ttl=30)
        assert await store.is_duplicate("k") is True
        await store.unmark_processing("k")
        assert await store.is_duplicate("k") is False
        await store.mark_processed("k", ttl=60)
        assert await store.is_duplicate("k") is True

    @pytest.mark.asyncio
    async def test_expired_keys_are_not_duplicates(self) -> None:
        store = MemoryDedupeStore()
        await store.mark_processed("old", ttl=-1)

        assert await store.is_duplicate("old") is False


class TestMemoryTenantLock:
    @pytest.mark.asyncio
    async def test_hold_serializes_same_tenant(self) -> None:
        lock = MemoryTenantLock()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with lock.hold("t1"):
                events.append(f"{name}:in")
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                events.append(f"{name}:out")

        await asyncio.gather(worker("a"), worker("b"))

        assert events in (
            ["a:in", "a:out", "b:in", "b:out"],
            ["b:in", "b:out", "a:in", "a:out"],
        )


class TestMemorySettingsStore:
    @pytest.mark.asyncio
    async def test_get_and_set(self) -> None:
        store = MemorySettingsStore({"payment_schedule": {"minimum_amount": 50}})

        assert await store.get_setting("payment_schedule") == {"minimum_amount": 50}
        assert await store.get_setting("missing") is None
        await store.set_setting("missing", 1)
        assert await store.get_setting("missing") == 1
