"""Builders de payload para envio via WhatsApp Cloud API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.messaging import SendOptions

WHATSAPP_MEDIA_TYPES = frozenset({"image", "video", "audio", "document", "sticker"})


def build_base_payload(recipient: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": recipient,
    }


def build_message_payload(recipient: str, body: str, options: SendOptions) -> dict[str, Any]:
    """Monta payload de texto ou mídia (por link).

    Raises:
        ValueError: mídia sem URL ou tipo de mídia não suportado.
    """
    payload = build_base_payload(recipient)
    if options.kind == "text":
        payload["type"] = "text"
        payload["text"] = {"preview_url": False, "body": body}
        return payload

    if not options.media_url:
        raise ValueError("media_url é obrigatório para envio de mídia")
    if options.media_type not in WHATSAPP_MEDIA_TYPES:
        raise ValueError(f"Tipo de mídia não suportado: {options.media_type}")

    media: dict[str, Any] = {"link": options.media_url}
    if body and options.media_type in ("image", "video", "document"):
        media["caption"] = body
    payload["type"] = options.media_type
    payload[options.media_type] = media
    return payload
