"""Conector Instagram Messaging."""

from api.connectors.instagram.adapter import InstagramChannelAdapter

__all__ = ["InstagramChannelAdapter"]
