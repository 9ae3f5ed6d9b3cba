"""Normalização de mensagens WhatsApp para IncomingMessage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from api.normalizers.common import parse_unix_timestamp
from app.domain.channels import ChannelType
from app.domain.messaging import Attachment, IncomingMessage

from .extractor import extract_payload_messages

if TYPE_CHECKING:
    from collections.abc import Mapping


def normalize_message(tenant_id: str, raw: dict[str, Any]) -> IncomingMessage:
    """Converte mensagem intermediária em IncomingMessage."""
    media = raw.get("media")
    attachment = None
    if media:
        attachment = Attachment(
            kind=media["kind"],
            url=media.get("url"),
            media_id=media.get("media_id"),
            mime_type=media.get("mime_type"),
            filename=media.get("filename"),
        )
    return IncomingMessage(
        tenant_id=tenant_id,
        channel_type=ChannelType.WHATSAPP,
        external_contact_id=raw["from_number"],
        external_message_id=raw["message_id"],
        timestamp=parse_unix_timestamp(raw.get("timestamp")),
        text=raw.get("text"),
        attachment=attachment,
        contact_name=raw.get("profile_name"),
        message_type=raw.get("message_type", "text"),
    )


def normalize_messages(tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
    """Normaliza todas as mensagens do webhook WhatsApp."""
    if payload.get("object") not in (None, "whatsapp_business_account"):
        return []
    return [normalize_message(tenant_id, raw) for raw in extract_payload_messages(dict(payload))]
