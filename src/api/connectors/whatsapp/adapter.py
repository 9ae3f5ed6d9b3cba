"""Adapter do canal WhatsApp (Cloud API).

channel_config esperado:
    phone_number_id: ID do número no Meta Business
    access_token: Token de acesso à Graph API
    app_secret: Secret do app para validar X-Hub-Signature-256 (opcional)
    verify_token: Token de verificação do webhook (opcional)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.connectors.errors import missing_keys, provider_call
from api.connectors.meta_shared import create_meta_graph_client, verify_meta_signature
from api.normalizers.whatsapp import normalize_messages
from api.payload_builders.whatsapp import build_message_payload
from app.domain.channels import ChannelType
from app.domain.messaging import DeliveryResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from app.domain.messaging import IncomingMessage, SendOptions, SignatureResult
    from config.settings import WhatsAppSettings

logger = logging.getLogger(__name__)

REQUIRED_CONFIG_KEYS = ("phone_number_id", "access_token")


class WhatsAppChannelAdapter:
    """Tradução WhatsApp Cloud API ↔ modelo normalizado."""

    channel_type = ChannelType.WHATSAPP

    def __init__(
        self,
        settings: WhatsAppSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = create_meta_graph_client(
            settings.request_timeout_seconds,
            settings.max_retries,
            transport=transport,
        )

    def normalize(self, tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
        return normalize_messages(tenant_id, payload)

    def verify_signature(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
        config: Mapping[str, Any],
    ) -> SignatureResult:
        return verify_meta_signature(raw_body, headers, config.get("app_secret"))

    def validate_config(self, config: Mapping[str, Any]) -> list[str]:
        return missing_keys(dict(config), REQUIRED_CONFIG_KEYS)

    async def send(
        self,
        config: Mapping[str, Any],
        recipient_id: str,
        body: str,
        options: SendOptions,
    ) -> DeliveryResult:
        url = self._settings.get_messages_endpoint(str(config.get("phone_number_id", "")))
        payload = build_message_payload(recipient_id, body, options)
        with provider_call(self.channel_type, "send"):
            data = await self._client.post_json(url, str(config.get("access_token", "")), payload)

        messages = data.get("messages") or [{}]
        message_id = messages[0].get("id") if isinstance(messages[0], dict) else None
        return DeliveryResult(
            success=True,
            channel_type=self.channel_type,
            provider_message_id=message_id,
        )

    async def health_check(self, config: Mapping[str, Any]) -> dict[str, Any]:
        phone_number_id = str(config.get("phone_number_id", ""))
        url = f"{self._settings.api_endpoint}/{phone_number_id}"
        with provider_call(self.channel_type, "health_check"):
            data = await self._client.get_json(
                url,
                str(config.get("access_token", "")),
                params={"fields": "id,display_phone_number"},
            )
        return {
            "phone_number_id": data.get("id"),
            "display_phone_number": data.get("display_phone_number"),
        }
