"""Channel Router — hub de despacho entre tenants, canais e adapters.

Stateless: toda decisão de roteamento é reidratada do store a cada
chamada. A mesma `can_use_channel` protege setup, ativação, roteamento
inbound e envio outbound.

Mutação de primário (setup com make_primary, set_primary, update) é
serializada por tenant via TenantLockProtocol.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import Counter
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.domain.channels import (
    Channel,
    ChannelHealth,
    ChannelListing,
    ChannelSummary,
    ChannelType,
)
from app.domain.errors import (
    ChannelNotConfiguredError,
    ChannelNotFoundError,
    InvalidChannelConfigError,
    InvalidOutboundMessageError,
    PlanRestrictionError,
    PrimaryChannelRequiredError,
    ProviderCallFailedError,
    TenantNotFoundError,
    UnsupportedChannelError,
)
from app.domain.messaging import (
    Attachment,
    DeliveryResult,
    MessageRecord,
    SenderType,
    SendOptions,
)
from app.observability import record_delivery, record_latency
from app.services.channel_access_policy import (
    available_channels,
    can_use_channel,
    max_active_channels,
)
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.domain.channels import Tenant
    from app.domain.messaging import IncomingMessage
    from app.protocols.channel_adapter import ChannelAdapterProtocol
    from app.protocols.crm_store import (
        ChannelStoreProtocol,
        ContactStoreProtocol,
        TenantStoreProtocol,
    )
    from app.protocols.tenant_lock import TenantLockProtocol
    from app.services.conversation_resolver import ContactConversationResolver

logger = logging.getLogger(__name__)

SECRET_CONFIG_KEYS = frozenset(
    {"access_token", "bot_token", "page_access_token", "app_secret", "secret_token"}
)
MASKED_VALUE = "[OCULTO]"
PROVIDER_CALL_FAILED = "PROVIDER_CALL_FAILED"


def parse_channel_type(raw: str) -> ChannelType:
    """Converte string de rota em ChannelType.

    Raises:
        UnsupportedChannelError: canal desconhecido.
    """
    try:
        return ChannelType(raw.lower())
    except ValueError as exc:
        raise UnsupportedChannelError(raw) from exc


def mask_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Substitui credenciais por marcador antes de expor o canal."""
    return {key: MASKED_VALUE if key in SECRET_CONFIG_KEYS and value else value for key, value in config.items()}


class ChannelRouter:
    """Setup, roteamento e envio por canal para cada tenant."""

    def __init__(
        self,
        *,
        tenants: TenantStoreProtocol,
        channels: ChannelStoreProtocol,
        contacts: ContactStoreProtocol,
        adapters: Mapping[ChannelType, ChannelAdapterProtocol],
        resolver: ContactConversationResolver,
        tenant_lock: TenantLockProtocol,
    ) -> None:
        self._tenants = tenants
        self._channels = channels
        self._contacts = contacts
        self._adapters = dict(adapters)
        self._resolver = resolver
        self._lock = tenant_lock

    # ──────────────────────────────────────────────────────────────────────
    # Lookups
    # ──────────────────────────────────────────────────────────────────────

    def adapter_for(self, channel_type: ChannelType) -> ChannelAdapterProtocol:
        adapter = self._adapters.get(channel_type)
        if adapter is None:
            raise UnsupportedChannelError(str(channel_type))
        return adapter

    async def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = await self._tenants.get_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    async def _require_channel(self, tenant_id: str, channel_id: str) -> Channel:
        channel = await self._channels.get_channel(tenant_id, channel_id)
        if channel is None:
            raise ChannelNotFoundError(tenant_id, channel_id)
        return channel

    async def active_channel(self, tenant_id: str, channel_type: ChannelType) -> Channel | None:
        """Canal ativo usado para o par (tenant, tipo).

        Primário ativo tem preferência; senão o ativo mais recente.
        """
        candidates = [
            c
            for c in await self._channels.list_channels(tenant_id, active_only=True)
            if c.channel_type is channel_type
        ]
        if not candidates:
            return None
        primary = next((c for c in candidates if c.is_primary), None)
        return primary or max(candidates, key=lambda c: c.created_at)

    async def _active_types(self, tenant_id: str, exclude_id: str | None = None) -> list[ChannelType]:
        return [
            c.channel_type
            for c in await self._channels.list_channels(tenant_id, active_only=True)
            if c.id != exclude_id
        ]

    async def _routable_channel(self, tenant_id: str, channel_type: ChannelType) -> Channel:
        """Canal ativo e permitido pelo plano, ou ChannelNotConfiguredError."""
        tenant = await self._tenants.get_tenant(tenant_id)
        if tenant is None:
            raise ChannelNotConfiguredError(tenant_id, channel_type, "Tenant não encontrado")

        channel = await self.active_channel(tenant_id, channel_type)
        if channel is None:
            raise ChannelNotConfiguredError(tenant_id, channel_type)

        decision = can_use_channel(tenant.plan, channel_type, await self._active_types(tenant_id))
        if not decision.allowed:
            raise ChannelNotConfiguredError(tenant_id, channel_type, decision.reason)
        return channel

    # ──────────────────────────────────────────────────────────────────────
    # Setup / gestão
    # ──────────────────────────────────────────────────────────────────────

    def _validate_config(self, channel_type: ChannelType, config: Mapping[str, Any] | None) -> None:
        errors = self.adapter_for(channel_type).validate_config(dict(config or {}))
        if errors:
            raise InvalidChannelConfigError(errors)

    async def setup(
        self,
        tenant_id: str,
        channel_type: ChannelType,
        config: Mapping[str, Any] | None,
        make_primary: bool = False,
    ) -> Channel:
        """Cria canal ativo após política de plano.

        Raises:
            InvalidChannelConfigError: config vazia ou sem credenciais.
            PlanRestrictionError: plano não permite o canal.
        """
        self._validate_config(channel_type, config)
        tenant = await self.get_tenant(tenant_id)

        async with self._lock.hold(tenant_id):
            decision = can_use_channel(tenant.plan, channel_type, await self._active_types(tenant_id))
            if not decision.allowed:
                logger.info(
                    "channel_setup_denied",
                    extra={
                        "tenant_id": tenant_id,
                        "channel_type": channel_type.value,
                        "plan": tenant.plan.value,
                        "required_plan": decision.required_plan.value if decision.required_plan else None,
                    },
                )
                raise PlanRestrictionError(decision, channel_type)

            if make_primary:
                await self._channels.clear_primary(tenant_id)

            channel = await self._channels.insert_channel(
                Channel(
                    id=str(uuid.uuid4()),
                    tenant_id=tenant_id,
                    channel_type=channel_type,
                    channel_config=dict(config or {}),
                    is_active=True,
                    is_primary=make_primary,
                )
            )

        logger.info(
            "channel_setup_completed",
            extra={
                "tenant_id": tenant_id,
                "channel_id": channel.id,
                "channel_type": channel_type.value,
                "is_primary": make_primary,
            },
        )
        return channel

    async def update_channel(
        self,
        tenant_id: str,
        channel_id: str,
        *,
        config: Mapping[str, Any] | None = None,
        is_active: bool | None = None,
        is_primary: bool | None = None,
    ) -> Channel:
        """Atualiza config/flags; ativação e primário seguem as mesmas regras dos endpoints dedicados.

        Raises:
            PrimaryChannelRequiredError: is_primary=False no canal primário.
        """
        channel = await self._require_channel(tenant_id, channel_id)
        if config is not None:
            self._validate_config(channel.channel_type, config)
        if is_primary is False and channel.is_primary:
            raise PrimaryChannelRequiredError(tenant_id, channel_id)

        async with self._lock.hold(tenant_id):
            if is_active and not channel.is_active:
                await self._check_activation(tenant_id, channel)

            changes: dict[str, Any] = {}
            if config is not None:
                changes["channel_config"] = dict(config)
            if is_active is not None:
                changes["is_active"] = is_active
            if is_primary is not None:
                if is_primary:
                    await self._channels.clear_primary(tenant_id)
                changes["is_primary"] = is_primary

            updated = await self._channels.update_channel(tenant_id, channel_id, **changes)
        if updated is None:
            raise ChannelNotFoundError(tenant_id, channel_id)

        logger.info(
            "channel_updated",
            extra={"tenant_id": tenant_id, "channel_id": channel_id, "fields": sorted(changes)},
        )
        return updated

    async def _check_activation(self, tenant_id: str, channel: Channel) -> None:
        tenant = await self.get_tenant(tenant_id)
        active = await self._active_types(tenant_id, exclude_id=channel.id)
        decision = can_use_channel(tenant.plan, channel.channel_type, active)
        if not decision.allowed:
            raise PlanRestrictionError(decision, channel.channel_type)

    async def activate(self, tenant_id: str, channel_id: str) -> Channel:
        """Reativa canal reexecutando a política (plano pode ter mudado)."""
        channel = await self._require_channel(tenant_id, channel_id)
        async with self._lock.hold(tenant_id):
            await self._check_activation(tenant_id, channel)
            updated = await self._channels.update_channel(tenant_id, channel_id, is_active=True)
        if updated is None:
            raise ChannelNotFoundError(tenant_id, channel_id)
        logger.info("channel_activated", extra={"tenant_id": tenant_id, "channel_id": channel_id})
        return updated

    async def deactivate(self, tenant_id: str, channel_id: str) -> Channel:
        updated = await self._channels.update_channel(tenant_id, channel_id, is_active=False)
        if updated is None:
            raise ChannelNotFoundError(tenant_id, channel_id)
        logger.info("channel_deactivated", extra={"tenant_id": tenant_id, "channel_id": channel_id})
        return updated

    async def set_primary(self, tenant_id: str, channel_id: str) -> Channel:
        """Marca o canal como primário; exatamente um primário ao final."""
        async with self._lock.hold(tenant_id):
            await self._require_channel(tenant_id, channel_id)
            updated = await self._channels.set_primary(tenant_id, channel_id)
        if updated is None:
            raise ChannelNotFoundError(tenant_id, channel_id)
        logger.info("channel_primary_set", extra={"tenant_id": tenant_id, "channel_id": channel_id})
        return updated

    async def delete_channel(self, tenant_id: str, channel_id: str) -> None:
        """Remove o canal; sem o primário, o ativo mais recente assume."""
        async with self._lock.hold(tenant_id):
            channel = await self._require_channel(tenant_id, channel_id)
            if not await self._channels.delete_channel(tenant_id, channel_id):
                raise ChannelNotFoundError(tenant_id, channel_id)
            promoted = await self._promote_primary(tenant_id) if channel.is_primary else None
        logger.info(
            "channel_deleted",
            extra={
                "tenant_id": tenant_id,
                "channel_id": channel_id,
                "promoted_channel_id": promoted.id if promoted else None,
            },
        )

    async def _promote_primary(self, tenant_id: str) -> Channel | None:
        remaining = await self._channels.list_channels(tenant_id, active_only=True)
        if not remaining:
            return None
        newest = max(remaining, key=lambda c: c.created_at)
        return await self._channels.set_primary(tenant_id, newest.id)

    async def get_channel(self, tenant_id: str, channel_id: str) -> Channel:
        """Canal com credenciais mascaradas."""
        channel = await self._require_channel(tenant_id, channel_id)
        return replace(channel, channel_config=mask_config(channel.channel_config))

    async def list_channels(self, tenant_id: str) -> ChannelListing:
        tenant = await self.get_tenant(tenant_id)
        channels = await self._channels.list_channels(tenant_id)
        active = [c for c in channels if c.is_active]
        limit = max_active_channels(tenant.plan)
        summary = ChannelSummary(
            total_active=len(active),
            available_channels=available_channels(tenant.plan),
            can_add_more=limit is None or len(active) < limit,
            primary_channel=next((c for c in channels if c.is_primary), None),
        )
        masked = tuple(replace(c, channel_config=mask_config(c.channel_config)) for c in channels)
        return ChannelListing(plan=tenant.plan, channels=masked, summary=summary)

    async def available_channels(self, tenant_id: str) -> tuple[ChannelType, ...]:
        tenant = await self.get_tenant(tenant_id)
        return available_channels(tenant.plan)

    async def validate_all(self, tenant_id: str) -> list[ChannelHealth]:
        """Health check de cada canal ativo; falhas isoladas por canal."""
        results: list[ChannelHealth] = []
        for channel in await self._channels.list_channels(tenant_id, active_only=True):
            results.append(await self._health(channel))
        return results

    async def _health(self, channel: Channel) -> ChannelHealth:
        adapter = self.adapter_for(channel.channel_type)
        try:
            details = await adapter.health_check(channel.channel_config)
        except (ProviderCallFailedError, ValueError) as exc:
            logger.warning(
                "channel_health_check_failed",
                extra={
                    "tenant_id": channel.tenant_id,
                    "channel_id": channel.id,
                    "channel_type": channel.channel_type.value,
                    "error_type": type(exc).__name__,
                },
            )
            return ChannelHealth(
                channel_id=channel.id,
                channel_type=channel.channel_type,
                healthy=False,
                message=str(exc),
            )
        return ChannelHealth(
            channel_id=channel.id,
            channel_type=channel.channel_type,
            healthy=True,
            message="Conexão OK",
            details=details,
        )

    async def channel_stats(self, tenant_id: str, days: int = 30) -> dict[str, int]:
        """Total de mensagens por tipo de canal na janela."""
        since = datetime.now(UTC) - timedelta(days=days)
        counts = Counter(m.channel_type.value for m in await self._contacts.list_messages_since(tenant_id, since))
        return {channel_type.value: counts.get(channel_type.value, 0) for channel_type in ChannelType}

    # ──────────────────────────────────────────────────────────────────────
    # Inbound / outbound
    # ──────────────────────────────────────────────────────────────────────

    async def channel_config(self, tenant_id: str, channel_type: ChannelType) -> dict[str, Any]:
        """Config do canal ativo (usado pelo webhook para token/secret)."""
        channel = await self.active_channel(tenant_id, channel_type)
        return dict(channel.channel_config) if channel else {}

    async def route(self, message: IncomingMessage) -> MessageRecord:
        """Persiste mensagem inbound na conversa do contato.

        Raises:
            UnsupportedChannelError: sem adapter para o canal.
            ChannelNotConfiguredError: canal inativo ou negado pelo plano.
        """
        started = time.perf_counter()
        self.adapter_for(message.channel_type)
        await self._routable_channel(message.tenant_id, message.channel_type)

        if message.external_message_id:
            existing = await self._contacts.find_message_by_external_id(
                message.tenant_id, message.channel_type, message.external_message_id
            )
            if existing is not None:
                logger.info(
                    "inbound_duplicate_skipped",
                    extra={"tenant_id": message.tenant_id, "channel_type": message.channel_type.value},
                )
                return existing

        resolved = await self._resolver.resolve(
            message.tenant_id,
            message.channel_type,
            message.external_contact_id,
            message.contact_name,
        )
        record = MessageRecord(
            id=str(uuid.uuid4()),
            tenant_id=message.tenant_id,
            conversation_id=resolved.conversation.id,
            channel_type=message.channel_type,
            sender_type=SenderType.CONTACT,
            timestamp=message.timestamp,
            content=message.text,
            attachment=message.attachment,
            external_message_id=message.external_message_id,
        )
        stored = await self._insert_or_existing(record)
        record_latency("channel_router", "route", (time.perf_counter() - started) * 1000)
        return stored

    async def _insert_or_existing(self, record: MessageRecord) -> MessageRecord:
        try:
            return await self._contacts.insert_message(record)
        except UniqueConstraintViolation:
            if not record.external_message_id:
                raise
            existing = await self._contacts.find_message_by_external_id(
                record.tenant_id, record.channel_type, record.external_message_id
            )
            if existing is None:
                raise
            return existing

    async def send(
        self,
        tenant_id: str,
        channel_type: ChannelType,
        recipient_id: str,
        body: str,
        options: SendOptions | None = None,
    ) -> DeliveryResult:
        """Envia pelo adapter do canal ativo; sem retry aqui.

        Raises:
            UnsupportedChannelError: sem adapter para o canal.
            ChannelNotConfiguredError: canal inativo ou negado pelo plano.
            InvalidOutboundMessageError: opções recusadas pelo builder do canal.
        """
        options = options or SendOptions()
        adapter = self.adapter_for(channel_type)
        channel = await self._routable_channel(tenant_id, channel_type)

        started = time.perf_counter()
        try:
            result = await adapter.send(channel.channel_config, recipient_id, body, options)
        except ValueError as exc:
            logger.warning(
                "outbound_send_rejected",
                extra={"tenant_id": tenant_id, "channel_type": channel_type.value, "error": str(exc)},
            )
            raise InvalidOutboundMessageError(channel_type, str(exc)) from exc
        except ProviderCallFailedError as exc:
            logger.warning(
                "outbound_send_failed",
                extra={
                    "tenant_id": tenant_id,
                    "channel_type": channel_type.value,
                    "status_code": exc.status_code,
                    "is_retryable": exc.is_retryable,
                },
            )
            record_delivery(channel_type.value, success=False, error_code=PROVIDER_CALL_FAILED)
            return DeliveryResult(
                success=False,
                channel_type=channel_type,
                error_code=PROVIDER_CALL_FAILED,
                error_message=exc.message,
            )
        finally:
            record_latency("channel_router", "send", (time.perf_counter() - started) * 1000)

        record_delivery(channel_type.value, success=True)
        await self._record_outbound(tenant_id, channel_type, recipient_id, body, options, result)
        return result

    async def _record_outbound(
        self,
        tenant_id: str,
        channel_type: ChannelType,
        recipient_id: str,
        body: str,
        options: SendOptions,
        result: DeliveryResult,
    ) -> None:
        resolved = await self._resolver.resolve(tenant_id, channel_type, recipient_id)
        record = MessageRecord(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            conversation_id=resolved.conversation.id,
            channel_type=channel_type,
            sender_type=SenderType.USER,
            timestamp=datetime.now(UTC),
            content=body or None,
            attachment=_outbound_attachment(options),
            external_message_id=result.provider_message_id,
        )
        await self._insert_or_existing(record)


def _outbound_attachment(options: SendOptions) -> Attachment | None:
    if options.kind != "media" or not options.media_url:
        return None
    return Attachment(kind=options.media_type, url=options.media_url)
