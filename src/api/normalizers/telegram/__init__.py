"""Normalizer Telegram — updates da Bot API."""

from .extractor import extract_update
from .normalizer import normalize_messages

__all__ = ["extract_update", "normalize_messages"]
