"""Builders de chamadas para a Telegram Bot API."""

from api.payload_builders.telegram.messages import build_send_call

__all__ = ["build_send_call"]
