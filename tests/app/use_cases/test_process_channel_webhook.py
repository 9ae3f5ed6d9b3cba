"""Testes do use case de processamento inbound com adapter Telegram real."""

from __future__ import annotations

import pytest

from app.domain.channels import ChannelType, Plan, Tenant
from app.domain.errors import UnsupportedChannelError
from app.infra.stores.memory_stores import MemoryCrmStore, MemoryDedupeStore, MemoryTenantLock
from app.services.channel_router import ChannelRouter
from app.services.conversation_resolver import ContactConversationResolver
from app.use_cases.inbound import ProcessChannelWebhookUseCase, inbound_dedupe_key
from api.connectors.telegram import TelegramChannelAdapter
from api.normalizers.telegram import normalize_messages
from config.settings import TelegramSettings


def _update(message_id: int = 10, text: str = "Oi") -> dict:
    return {
        "update_id": 900 + message_id,
        "message": {
            "message_id": message_id,
            "date": 1_700_000_000,
            "chat": {"id": 555, "type": "private"},
            "from": {"id": 555, "first_name": "Ana", "last_name": "Souza"},
            "text": text,
        },
    }


class RecordingDedupe(MemoryDedupeStore):
    def __init__(self) -> None:
        super().__init__()
        self.unmarked: list[str] = []

    async def unmark_processing(self, key: str) -> None:
        self.unmarked.append(key)
        await super().unmark_processing(key)


async def _build(plan: Plan = Plan.PREMIUM, configure: bool = True):
    store = MemoryCrmStore()
    store.add_tenant(Tenant(id="t1", plan=plan))
    router = ChannelRouter(
        tenants=store,
        channels=store,
        contacts=store,
        adapters={ChannelType.TELEGRAM: TelegramChannelAdapter(TelegramSettings())},
        resolver=ContactConversationResolver(store),
        tenant_lock=MemoryTenantLock(),
    )
    if configure:
        await router.setup("t1", ChannelType.TELEGRAM, {"bot_token": "123:abc"})
    dedupe = RecordingDedupe()
    use_case = ProcessChannelWebhookUseCase(router=router, dedupe=dedupe)
    return use_case, router, store, dedupe


def test_inbound_dedupe_key_scoped_by_tenant_and_channel() -> None:
    message = normalize_messages("t1", _update())[0]
    other_tenant = normalize_messages("t2", _update())[0]

    assert inbound_dedupe_key(message) != inbound_dedupe_key(other_tenant)
    assert len(inbound_dedupe_key(message) or "") == 64


@pytest.mark.asyncio
async def test_execute_persists_message_and_creates_conversation() -> None:
    use_case, _, store, _ = await _build()

    result = await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())

    assert (result.received, result.processed, result.skipped, result.dropped) == (1, 1, 0, 0)
    stored = await store.find_message_by_external_id("t1", ChannelType.TELEGRAM, "555:10")
    assert stored is not None
    assert stored.content == "Oi"
    contact = await store.find_contact("t1", ChannelType.TELEGRAM, "555")
    assert contact is not None
    assert contact.name == "Ana Souza"


@pytest.mark.asyncio
async def test_execute_skips_redelivered_update() -> None:
    use_case, _, store, _ = await _build()

    await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())
    second = await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())

    assert second.skipped == 1
    assert second.processed == 0
    assert store.count_conversations() == 1


@pytest.mark.asyncio
async def test_execute_ignores_unsupported_update() -> None:
    use_case, _, _, _ = await _build()

    result = await use_case.execute(
        tenant_id="t1",
        channel_type=ChannelType.TELEGRAM,
        payload={"update_id": 1, "edited_message": {"message_id": 3}},
    )

    assert result.received == 0
    assert result.processed == 0


@pytest.mark.asyncio
async def test_execute_drops_message_when_channel_not_configured() -> None:
    use_case, _, store, dedupe = await _build(configure=False)

    result = await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())

    assert result.dropped == 1
    assert result.processed == 0
    assert store.count_contacts() == 0
    assert len(dedupe.unmarked) == 1


@pytest.mark.asyncio
async def test_execute_drops_message_when_plan_denies_channel() -> None:
    use_case, _, store, _ = await _build(configure=False)
    store.add_tenant(Tenant(id="t2", plan=Plan.BASIC))

    result = await use_case.execute(tenant_id="t2", channel_type=ChannelType.TELEGRAM, payload=_update())

    assert result.dropped == 1


@pytest.mark.asyncio
async def test_execute_dropped_message_can_be_processed_after_setup() -> None:
    use_case, router, store, _ = await _build(configure=False)
    await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())

    await router.setup("t1", ChannelType.TELEGRAM, {"bot_token": "123:abc"})
    retry = await use_case.execute(tenant_id="t1", channel_type=ChannelType.TELEGRAM, payload=_update())

    assert retry.processed == 1
    assert store.count_contacts() == 1


@pytest.mark.asyncio
async def test_execute_raises_for_channel_without_adapter() -> None:
    use_case, _, _, _ = await _build()

    with pytest.raises(UnsupportedChannelError):
        await use_case.execute(tenant_id="t1", channel_type=ChannelType.WHATSAPP, payload={})
