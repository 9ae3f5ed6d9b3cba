"""Conector WhatsApp Cloud API."""

from api.connectors.whatsapp.adapter import WhatsAppChannelAdapter

__all__ = ["WhatsAppChannelAdapter"]
