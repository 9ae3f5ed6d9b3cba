"""Builders de payload para envio de DM no Instagram (`/me/messages`)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.messaging import SendOptions

INSTAGRAM_ATTACHMENT_TYPES = frozenset({"image", "video", "audio", "file"})


def build_message_payload(recipient: str, body: str, options: SendOptions) -> dict[str, Any]:
    """Monta payload de texto ou anexo por URL.

    Raises:
        ValueError: mídia sem URL.
    """
    if options.kind == "text":
        message: dict[str, Any] = {"text": body}
    else:
        if not options.media_url:
            raise ValueError("media_url é obrigatório para envio de mídia")
        attachment_type = (
            options.media_type if options.media_type in INSTAGRAM_ATTACHMENT_TYPES else "file"
        )
        message = {
            "attachment": {
                "type": attachment_type,
                "payload": {"url": options.media_url},
            }
        }
    return {"recipient": {"id": recipient}, "message": message}
