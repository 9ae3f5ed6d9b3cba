"""Normalizer WhatsApp — extração e normalização de mensagens.

Tipos suportados: text, image, video, audio, document, sticker,
location, interactive e button.
"""

from .extractor import extract_payload_messages
from .normalizer import normalize_message, normalize_messages

__all__ = [
    "extract_payload_messages",
    "normalize_message",
    "normalize_messages",
]
