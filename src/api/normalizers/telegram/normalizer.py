"""Normalização de updates Telegram para IncomingMessage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from api.normalizers.common import parse_unix_timestamp
from app.domain.channels import ChannelType
from app.domain.messaging import Attachment, IncomingMessage

from .extractor import extract_update

if TYPE_CHECKING:
    from collections.abc import Mapping


def normalize_messages(tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
    """Normaliza um update Telegram (0 ou 1 mensagem)."""
    raw = extract_update(dict(payload))
    if raw is None:
        return []
    media = raw.get("media")
    attachment = None
    if media:
        attachment = Attachment(
            kind=media["kind"],
            media_id=media["media_id"],
            mime_type=media.get("mime_type"),
            filename=media.get("filename"),
        )
    return [
        IncomingMessage(
            tenant_id=tenant_id,
            channel_type=ChannelType.TELEGRAM,
            external_contact_id=raw["chat_id"],
            external_message_id=raw["message_id"],
            timestamp=parse_unix_timestamp(raw.get("timestamp")),
            text=raw.get("text"),
            attachment=attachment,
            contact_name=raw.get("sender_name"),
            message_type=raw["message_type"],
        )
    ]
