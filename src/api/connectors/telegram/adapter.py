"""Adapter do canal Telegram (Bot API).

channel_config esperado:
    bot_token: Token do bot (BotFather)
    secret_token: Valor esperado em X-Telegram-Bot-Api-Secret-Token (opcional)
    verify_token: Token de verificação do webhook (opcional)
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING, Any

from api.connectors.errors import missing_keys, provider_call
from api.connectors.meta_shared import get_header
from api.connectors.telegram.http_client import TelegramBotClient
from api.normalizers.telegram import normalize_messages
from api.payload_builders.telegram import build_send_call
from app.domain.channels import ChannelType
from app.domain.messaging import DeliveryResult, SignatureResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from app.domain.messaging import IncomingMessage, SendOptions
    from config.settings import TelegramSettings

logger = logging.getLogger(__name__)

REQUIRED_CONFIG_KEYS = ("bot_token",)
SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class TelegramChannelAdapter:
    """Tradução Telegram Bot API ↔ modelo normalizado."""

    channel_type = ChannelType.TELEGRAM

    def __init__(
        self,
        settings: TelegramSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = TelegramBotClient(settings, transport=transport)

    def normalize(self, tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
        return normalize_messages(tenant_id, payload)

    def verify_signature(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
        config: Mapping[str, Any],
    ) -> SignatureResult:
        secret = config.get("secret_token")
        if not secret:
            return SignatureResult(valid=True, skipped=True)
        received = get_header(headers, SECRET_TOKEN_HEADER)
        if not received:
            return SignatureResult(valid=False, error="missing_signature")
        if not hmac.compare_digest(str(secret), received):
            return SignatureResult(valid=False, error="signature_mismatch")
        return SignatureResult(valid=True)

    def validate_config(self, config: Mapping[str, Any]) -> list[str]:
        return missing_keys(dict(config), REQUIRED_CONFIG_KEYS)

    async def send(
        self,
        config: Mapping[str, Any],
        recipient_id: str,
        body: str,
        options: SendOptions,
    ) -> DeliveryResult:
        method, call_body = build_send_call(recipient_id, body, options)
        with provider_call(self.channel_type, "send"):
            result = await self._client.call(str(config.get("bot_token", "")), method, call_body)

        message_id = result.get("message_id") if isinstance(result, dict) else None
        return DeliveryResult(
            success=True,
            channel_type=self.channel_type,
            provider_message_id=str(message_id) if message_id is not None else None,
        )

    async def health_check(self, config: Mapping[str, Any]) -> dict[str, Any]:
        with provider_call(self.channel_type, "health_check"):
            bot = await self._client.get_me(str(config.get("bot_token", "")))
        return {"bot_id": bot.get("id"), "username": bot.get("username"), "name": bot.get("first_name")}

    async def register_webhook(self, config: Mapping[str, Any], url: str) -> bool:
        """Aponta o webhook do bot para a URL do CRM."""
        with provider_call(self.channel_type, "set_webhook"):
            return await self._client.set_webhook(
                str(config.get("bot_token", "")), url, config.get("secret_token")
            )
