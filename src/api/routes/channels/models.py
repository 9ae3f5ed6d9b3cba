"""Modelos de request/response da gestão de canais do tenant."""

from __future__ import annotations

from typing import Any, Literal, Self

from pydantic import BaseModel, Field, model_validator

from app.domain.channels import Channel, ChannelHealth, ChannelListing


class ChannelSetupRequest(BaseModel):
    channel_type: str
    config: dict[str, Any] = Field(default_factory=dict)
    make_primary: bool = False


class ChannelUpdateRequest(BaseModel):
    config: dict[str, Any] | None = None
    is_active: bool | None = None
    is_primary: bool | None = None


class SendMessageRequest(BaseModel):
    channel_type: str
    recipient_id: str = Field(min_length=1)
    body: str = ""
    kind: Literal["text", "media"] = "text"
    media_url: str | None = None
    media_type: str = "image"

    @model_validator(mode="after")
    def _media_requires_url(self) -> Self:
        if self.kind == "media" and not self.media_url:
            raise ValueError("media_url é obrigatório para envio de mídia")
        return self


def channel_to_dict(channel: Channel) -> dict[str, Any]:
    return {
        "id": channel.id,
        "tenant_id": channel.tenant_id,
        "channel_type": channel.channel_type.value,
        "channel_config": channel.channel_config,
        "is_active": channel.is_active,
        "is_primary": channel.is_primary,
        "created_at": channel.created_at.isoformat(),
        "updated_at": channel.updated_at.isoformat(),
    }


def listing_to_dict(listing: ChannelListing) -> dict[str, Any]:
    summary = listing.summary
    primary = summary.primary_channel
    return {
        "plan": listing.plan.value,
        "channels": [channel_to_dict(channel) for channel in listing.channels],
        "summary": {
            "total_active": summary.total_active,
            "available_channels": [channel_type.value for channel_type in summary.available_channels],
            "can_add_more": summary.can_add_more,
            "primary_channel": primary.channel_type.value if primary else None,
        },
    }


def health_to_dict(health: ChannelHealth) -> dict[str, Any]:
    return {
        "channel_id": health.channel_id,
        "channel_type": health.channel_type.value,
        "healthy": health.healthy,
        "message": health.message,
        "details": health.details,
    }
