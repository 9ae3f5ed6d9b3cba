"""Normalização de mensagens Instagram para IncomingMessage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from api.normalizers.common import parse_unix_timestamp
from app.domain.channels import ChannelType
from app.domain.messaging import Attachment, IncomingMessage

from .extractor import extract_payload_messages

if TYPE_CHECKING:
    from collections.abc import Mapping


def normalize_messages(tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
    """Normaliza eventos de mensagem do webhook Instagram."""
    if payload.get("object") not in (None, "instagram", "page"):
        return []
    result: list[IncomingMessage] = []
    for raw in extract_payload_messages(dict(payload)):
        media = raw.get("media")
        result.append(
            IncomingMessage(
                tenant_id=tenant_id,
                channel_type=ChannelType.INSTAGRAM,
                external_contact_id=raw["sender_id"],
                external_message_id=raw.get("message_id"),
                timestamp=parse_unix_timestamp(raw.get("timestamp"), millis=True),
                text=raw.get("text"),
                attachment=Attachment(kind=media["kind"], url=media.get("url")) if media else None,
                message_type=raw["message_type"],
            )
        )
    return result
