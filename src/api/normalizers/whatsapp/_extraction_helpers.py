"""Helpers de extração de campos por tipo de mensagem WhatsApp."""

from __future__ import annotations

from typing import Any

from api.normalizers.common import as_dict

MEDIA_TYPES = frozenset({"image", "video", "audio", "document", "sticker"})


def extract_text_message(msg: dict[str, Any]) -> str | None:
    """Extrai corpo de mensagem de texto."""
    return as_dict(msg.get("text")).get("body")


def extract_media_message(msg: dict[str, Any], media_type: str) -> dict[str, Any] | None:
    """Extrai referência de mídia (image, video, audio, document, sticker)."""
    media_block = msg.get(media_type)
    if not isinstance(media_block, dict):
        return None
    return {
        "kind": media_type,
        "media_id": media_block.get("id"),
        "url": media_block.get("url") or media_block.get("link"),
        "mime_type": media_block.get("mime_type"),
        "filename": media_block.get("filename"),
        "caption": media_block.get("caption"),
    }


def extract_location_message(msg: dict[str, Any]) -> str | None:
    """Representa localização como texto legível para o atendente."""
    location = msg.get("location")
    if not isinstance(location, dict):
        return None
    latitude = location.get("latitude")
    longitude = location.get("longitude")
    label = location.get("name") or location.get("address") or ""
    coords = f"{latitude},{longitude}" if latitude is not None and longitude is not None else ""
    text = " ".join(part for part in (label, coords) if part)
    return text or None


def extract_interactive_reply(msg: dict[str, Any]) -> str | None:
    """Extrai título da resposta de botão/lista (interactive ou button)."""
    interactive = as_dict(msg.get("interactive"))
    for key in ("button_reply", "list_reply"):
        reply = as_dict(interactive.get(key))
        if reply:
            return reply.get("title") or reply.get("id")
    button = as_dict(msg.get("button"))
    if button:
        return button.get("text") or button.get("payload")
    return None
