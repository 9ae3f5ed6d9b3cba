"""Builders de payload para API Instagram Messaging."""

from api.payload_builders.instagram.messages import build_message_payload

__all__ = ["build_message_payload"]
