"""Builders de payload para API Meta/WhatsApp."""

from api.payload_builders.whatsapp.messages import build_base_payload, build_message_payload

__all__ = ["build_base_payload", "build_message_payload"]
