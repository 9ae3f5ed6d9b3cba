"""Extrator de payloads Instagram Messaging (Messenger Platform).

Estrutura: `entry[].messaging[]` com `sender.id`, `recipient.id`,
`timestamp` (ms) e `message` ou `postback`. Echoes (mensagens enviadas
pela própria conta) e eventos de leitura/entrega são ignorados.
"""

from __future__ import annotations

import logging
from typing import Any

from api.normalizers.common import as_dict, as_list

logger = logging.getLogger(__name__)


def _extract_message_event(event: dict[str, Any]) -> dict[str, Any] | None:
    message = as_dict(event.get("message"))
    if not message or message.get("is_echo") or message.get("is_deleted"):
        return None
    attachments = as_list(message.get("attachments"))
    media = None
    if attachments:
        first = as_dict(attachments[0])
        media = {
            "kind": first.get("type") or "file",
            "url": as_dict(first.get("payload")).get("url"),
        }
    return {
        "message_id": message.get("mid"),
        "text": message.get("text"),
        "media": media,
        "message_type": "media" if media and not message.get("text") else "text",
    }


def _extract_postback_event(event: dict[str, Any]) -> dict[str, Any] | None:
    postback = as_dict(event.get("postback"))
    if not postback:
        return None
    return {
        "message_id": postback.get("mid"),
        "text": postback.get("title") or postback.get("payload"),
        "media": None,
        "message_type": "postback",
    }


def extract_payload_messages(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Extrai mensagens do payload bruto para estrutura intermediária."""
    messages: list[dict[str, Any]] = []
    for entry in as_list(payload.get("entry")):
        for raw_event in as_list(as_dict(entry).get("messaging")):
            event = as_dict(raw_event)
            sender_id = as_dict(event.get("sender")).get("id")
            if not sender_id:
                continue
            extracted = _extract_message_event(event) or _extract_postback_event(event)
            if extracted is None:
                logger.debug("instagram_event_ignored", extra={"keys": sorted(event)})
                continue
            extracted["sender_id"] = str(sender_id)
            extracted["timestamp"] = event.get("timestamp")
            messages.append(extracted)
    return messages
