"""Construção explícita dos adapters de canal.

Este módulo é o único autorizado a acoplar app <-> api para canais:
cada adapter é instanciado uma vez com suas settings e injetado no
ChannelRouter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from api.connectors.instagram import InstagramChannelAdapter
from api.connectors.telegram import TelegramChannelAdapter
from api.connectors.whatsapp import WhatsAppChannelAdapter
from app.domain.channels import ChannelType
from config.settings import (
    get_instagram_settings,
    get_telegram_settings,
    get_whatsapp_settings,
)

if TYPE_CHECKING:
    import httpx

    from app.protocols.channel_adapter import ChannelAdapterProtocol

logger = logging.getLogger(__name__)


def create_channel_adapter(
    channel_type: ChannelType,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ChannelAdapterProtocol:
    """Instancia o adapter do tipo de canal (match exaustivo)."""
    match channel_type:
        case ChannelType.WHATSAPP:
            return WhatsAppChannelAdapter(get_whatsapp_settings(), transport=transport)
        case ChannelType.INSTAGRAM:
            return InstagramChannelAdapter(get_instagram_settings(), transport=transport)
        case ChannelType.TELEGRAM:
            return TelegramChannelAdapter(get_telegram_settings(), transport=transport)
        case _:
            assert_never(channel_type)


def create_channel_adapters(
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[ChannelType, ChannelAdapterProtocol]:
    """Registry completo: um adapter por ChannelType."""
    adapters = {channel_type: create_channel_adapter(channel_type, transport) for channel_type in ChannelType}
    logger.info(
        "channel_adapters_created",
        extra={"channels": [channel_type.value for channel_type in adapters]},
    )
    return adapters


def webhook_verify_token(channel_type: ChannelType) -> str:
    """Token de verificação padrão do ambiente para o canal."""
    match channel_type:
        case ChannelType.WHATSAPP:
            return get_whatsapp_settings().verify_token
        case ChannelType.INSTAGRAM:
            return get_instagram_settings().verify_token
        case ChannelType.TELEGRAM:
            return get_telegram_settings().verify_token
        case _:
            assert_never(channel_type)


def webhook_processing_mode(channel_type: ChannelType) -> str:
    """Modo de processamento do webhook (async|inline) do canal."""
    match channel_type:
        case ChannelType.WHATSAPP:
            return get_whatsapp_settings().webhook_processing_mode
        case ChannelType.INSTAGRAM:
            return get_instagram_settings().webhook_processing_mode
        case ChannelType.TELEGRAM:
            return get_telegram_settings().webhook_processing_mode
        case _:
            assert_never(channel_type)
