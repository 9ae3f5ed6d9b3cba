"""Conector Telegram Bot API."""

from api.connectors.telegram.adapter import TelegramChannelAdapter
from api.connectors.telegram.http_client import TelegramBotClient

__all__ = ["TelegramBotClient", "TelegramChannelAdapter"]
