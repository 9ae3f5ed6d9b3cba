"""Builders de chamadas da Telegram Bot API (método + corpo)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.messaging import SendOptions

# tipo de mídia -> (método da Bot API, campo do arquivo)
TELEGRAM_MEDIA_METHODS: dict[str, tuple[str, str]] = {
    "image": ("sendPhoto", "photo"),
    "video": ("sendVideo", "video"),
    "audio": ("sendAudio", "audio"),
    "document": ("sendDocument", "document"),
}

# Opções repassadas ao Telegram quando presentes em SendOptions.extra
PASSTHROUGH_OPTIONS = ("parse_mode", "reply_markup", "disable_notification", "reply_to_message_id")


def build_send_call(chat_id: str, body: str, options: SendOptions) -> tuple[str, dict[str, Any]]:
    """Retorna (método, corpo JSON) para o envio.

    Raises:
        ValueError: mídia sem URL.
    """
    extras = {key: options.extra[key] for key in PASSTHROUGH_OPTIONS if key in options.extra}
    if options.kind == "text":
        return "sendMessage", {"chat_id": chat_id, "text": body, **extras}

    if not options.media_url:
        raise ValueError("media_url é obrigatório para envio de mídia")
    method, field = TELEGRAM_MEDIA_METHODS.get(options.media_type, TELEGRAM_MEDIA_METHODS["document"])
    call: dict[str, Any] = {"chat_id": chat_id, field: options.media_url, **extras}
    if body:
        call["caption"] = body
    return method, call
