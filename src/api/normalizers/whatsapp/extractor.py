"""Extrator de payloads WhatsApp Business API.

Extrai mensagens de `entry[].changes[].value.messages[]` para uma
estrutura intermediária. Não faz validação de negócio.
"""

from __future__ import annotations

import logging
from typing import Any

from api.normalizers.common import as_dict, as_list

from ._extraction_helpers import (
    MEDIA_TYPES,
    extract_interactive_reply,
    extract_location_message,
    extract_media_message,
    extract_text_message,
)

logger = logging.getLogger(__name__)

SUPPORTED_MESSAGE_TYPES = MEDIA_TYPES | {"text", "location", "interactive", "button"}


def _extract_fields(msg: dict[str, Any], message_type: str) -> tuple[str | None, dict[str, Any] | None]:
    """Retorna (texto, mídia) conforme o tipo da mensagem."""
    if message_type not in SUPPORTED_MESSAGE_TYPES:
        logger.info("unsupported_message_type_received", extra={"message_type": message_type})
        return None, None
    if message_type == "text":
        return extract_text_message(msg), None
    if message_type in MEDIA_TYPES:
        media = extract_media_message(msg, message_type)
        return (media or {}).get("caption"), media
    if message_type == "location":
        return extract_location_message(msg), None
    return extract_interactive_reply(msg), None


def _profile_name(value: dict[str, Any]) -> str | None:
    contacts = as_list(value.get("contacts"))
    if contacts:
        return as_dict(as_dict(contacts[0]).get("profile")).get("name")
    return None


def extract_payload_messages(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Extrai mensagens do payload bruto para estrutura intermediária."""
    messages: list[dict[str, Any]] = []
    for entry in as_list(payload.get("entry")):
        for change in as_list(as_dict(entry).get("changes")):
            value = as_dict(as_dict(change).get("value"))
            profile_name = _profile_name(value)
            for raw_msg in as_list(value.get("messages")):
                msg = as_dict(raw_msg)
                message_id = msg.get("id")
                sender = msg.get("from")
                if not message_id or not sender:
                    continue
                message_type = msg.get("type") or "unknown"
                text, media = _extract_fields(msg, message_type)
                messages.append(
                    {
                        "message_id": message_id,
                        "from_number": str(sender),
                        "timestamp": msg.get("timestamp"),
                        "message_type": message_type,
                        "profile_name": profile_name,
                        "text": text,
                        "media": media,
                    }
                )
    return messages
