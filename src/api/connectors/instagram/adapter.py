"""Adapter do canal Instagram (Messenger Platform via Graph API).

channel_config esperado:
    page_access_token: Token da página vinculada à conta profissional
    business_account_id: ID da conta Instagram Business
    app_secret: Secret do app para validar X-Hub-Signature-256 (opcional)
    verify_token: Token de verificação do webhook (opcional)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.connectors.errors import missing_keys, provider_call
from api.connectors.meta_shared import create_meta_graph_client, verify_meta_signature
from api.normalizers.instagram import normalize_messages
from api.payload_builders.instagram import build_message_payload
from app.domain.channels import ChannelType
from app.domain.messaging import DeliveryResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from app.domain.messaging import IncomingMessage, SendOptions, SignatureResult
    from config.settings import InstagramSettings

logger = logging.getLogger(__name__)

REQUIRED_CONFIG_KEYS = ("page_access_token", "business_account_id")


class InstagramChannelAdapter:
    """Tradução Instagram Messaging ↔ modelo normalizado."""

    channel_type = ChannelType.INSTAGRAM

    def __init__(
        self,
        settings: InstagramSettings,
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
        payload = build_message_payload(recipient_id, body, options)
        with provider_call(self.channel_type, "send"):
            data = await self._client.post_json(
                self._settings.messages_endpoint,
                str(config.get("page_access_token", "")),
                payload,
            )
        return DeliveryResult(
            success=True,
            channel_type=self.channel_type,
            provider_message_id=data.get("message_id"),
        )

    async def health_check(self, config: Mapping[str, Any]) -> dict[str, Any]:
        account_id = str(config.get("business_account_id", ""))
        with provider_call(self.channel_type, "health_check"):
            data = await self._client.get_json(
                f"{self._settings.api_endpoint}/{account_id}",
                str(config.get("page_access_token", "")),
                params={"fields": "id,username,name"},
            )
        return {"account_id": data.get("id"), "username": data.get("username"), "name": data.get("name")}
