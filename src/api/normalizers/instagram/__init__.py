"""Normalizer Instagram — mensagens diretas via Messenger Platform."""

from .extractor import extract_payload_messages
from .normalizer import normalize_messages

__all__ = ["extract_payload_messages", "normalize_messages"]
