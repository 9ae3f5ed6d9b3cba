"""Extrator de updates da Telegram Bot API.

Suporta `message` (texto e mídia com legenda) e `callback_query`
(cliques em botões inline). `edited_message`, `channel_post` e demais
updates são ignorados.
"""

from __future__ import annotations

import logging
from typing import Any

from api.normalizers.common import as_dict, as_list

logger = logging.getLogger(__name__)

MEDIA_FIELDS = ("photo", "video", "audio", "voice", "document", "sticker")


def _extract_media(message: dict[str, Any]) -> dict[str, Any] | None:
    for kind in MEDIA_FIELDS:
        block = message.get(kind)
        if kind == "photo":
            sizes = as_list(block)
            if not sizes:
                continue
            # Maior resolução vem por último
            block = sizes[-1]
        block = as_dict(block)
        if block.get("file_id"):
            return {
                "kind": kind,
                "media_id": block["file_id"],
                "mime_type": block.get("mime_type"),
                "filename": block.get("file_name"),
            }
    return None


def _sender_name(user: dict[str, Any]) -> str | None:
    name = " ".join(p for p in (user.get("first_name"), user.get("last_name")) if p)
    return name or user.get("username")


def extract_update(update: dict[str, Any]) -> dict[str, Any] | None:
    """Extrai a mensagem de um update ou None se o update não é suportado."""
    message = as_dict(update.get("message"))
    if message:
        chat_id = as_dict(message.get("chat")).get("id")
        if chat_id is None or message.get("message_id") is None:
            return None
        media = _extract_media(message)
        return {
            "chat_id": str(chat_id),
            "message_id": f"{chat_id}:{message['message_id']}",
            "timestamp": message.get("date"),
            "text": message.get("text") or message.get("caption"),
            "media": media,
            "sender_name": _sender_name(as_dict(message.get("from"))),
            "message_type": media["kind"] if media else "text",
        }

    callback = as_dict(update.get("callback_query"))
    if callback:
        origin = as_dict(callback.get("message"))
        chat_id = as_dict(origin.get("chat")).get("id") or as_dict(callback.get("from")).get("id")
        if chat_id is None:
            return None
        return {
            "chat_id": str(chat_id),
            "message_id": f"callback:{callback.get('id')}",
            "timestamp": origin.get("date"),
            "text": callback.get("data"),
            "media": None,
            "sender_name": _sender_name(as_dict(callback.get("from"))),
            "message_type": "callback",
        }

    logger.debug("telegram_update_ignored", extra={"keys": sorted(update)})
    return None
