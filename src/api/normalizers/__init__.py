"""Normalizers por canal — payload do provider para IncomingMessage.

Estrutura:
- whatsapp/: WhatsApp Business API (Graph)
- instagram/: Instagram Messaging (Messenger Platform)
- telegram/: Telegram Bot API

Cada canal tem seu próprio extractor e normalizer.
"""

from api.normalizers.instagram import normalize_messages as normalize_instagram_messages
from api.normalizers.telegram import normalize_messages as normalize_telegram_messages
from api.normalizers.whatsapp import normalize_messages as normalize_whatsapp_messages

__all__ = [
    "normalize_instagram_messages",
    "normalize_telegram_messages",
    "normalize_whatsapp_messages",
]
