"""Gestão de canais do tenant.

Prefixo: /tenants/{tenant_id}/channels
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from api.routes.channels.models import (
    ChannelSetupRequest,
    ChannelUpdateRequest,
    SendMessageRequest,
    channel_to_dict,
    health_to_dict,
    listing_to_dict,
)
from api.routes.dependencies import ContainerDep
from app.domain.messaging import SendOptions
from app.services.channel_router import mask_config, parse_channel_type

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def setup_channel(tenant_id: str, body: ChannelSetupRequest, container: ContainerDep) -> dict[str, Any]:
    channel = await container.router.setup(
        tenant_id,
        parse_channel_type(body.channel_type),
        body.config,
        make_primary=body.make_primary,
    )
    masked = channel_to_dict(channel) | {"channel_config": mask_config(channel.channel_config)}
    return {"success": True, "channel": masked}


@router.get("")
async def list_channels(tenant_id: str, container: ContainerDep) -> dict[str, Any]:
    return listing_to_dict(await container.router.list_channels(tenant_id))


@router.get("/available")
async def available_channels(tenant_id: str, container: ContainerDep) -> dict[str, Any]:
    channel_types = await container.router.available_channels(tenant_id)
    return {"available_channels": [channel_type.value for channel_type in channel_types]}


@router.get("/stats")
async def channel_stats(
    tenant_id: str,
    container: ContainerDep,
    days: int = Query(default=30, ge=1, le=365),
) -> dict[str, Any]:
    return {"days": days, "messages": await container.router.channel_stats(tenant_id, days)}


@router.post("/validate-all")
async def validate_all(tenant_id: str, container: ContainerDep) -> dict[str, Any]:
    results = await container.router.validate_all(tenant_id)
    return {
        "results": [health_to_dict(result) for result in results],
        "all_healthy": all(result.healthy for result in results),
    }


@router.post("/send")
async def send_message(tenant_id: str, body: SendMessageRequest, container: ContainerDep) -> dict[str, Any]:
    result = await container.router.send(
        tenant_id,
        parse_channel_type(body.channel_type),
        body.recipient_id,
        body.body,
        SendOptions(kind=body.kind, media_url=body.media_url, media_type=body.media_type),
    )
    return result.as_dict()


@router.get("/{channel_id}")
async def get_channel(tenant_id: str, channel_id: str, container: ContainerDep) -> dict[str, Any]:
    return channel_to_dict(await container.router.get_channel(tenant_id, channel_id))


@router.put("/{channel_id}")
async def update_channel(
    tenant_id: str, channel_id: str, body: ChannelUpdateRequest, container: ContainerDep
) -> dict[str, Any]:
    channel = await container.router.update_channel(
        tenant_id,
        channel_id,
        config=body.config,
        is_active=body.is_active,
        is_primary=body.is_primary,
    )
    return channel_to_dict(channel) | {"channel_config": mask_config(channel.channel_config)}


@router.delete("/{channel_id}")
async def delete_channel(tenant_id: str, channel_id: str, container: ContainerDep) -> dict[str, Any]:
    await container.router.delete_channel(tenant_id, channel_id)
    return {"success": True}


@router.post("/{channel_id}/activate")
async def activate_channel(tenant_id: str, channel_id: str, container: ContainerDep) -> dict[str, Any]:
    channel = await container.router.activate(tenant_id, channel_id)
    return {"success": True, "channel_id": channel.id, "is_active": channel.is_active}


@router.post("/{channel_id}/deactivate")
async def deactivate_channel(tenant_id: str, channel_id: str, container: ContainerDep) -> dict[str, Any]:
    channel = await container.router.deactivate(tenant_id, channel_id)
    return {"success": True, "channel_id": channel.id, "is_active": channel.is_active}


@router.post("/{channel_id}/primary")
async def set_primary_channel(tenant_id: str, channel_id: str, container: ContainerDep) -> dict[str, Any]:
    channel = await container.router.set_primary(tenant_id, channel_id)
    return {"success": True, "channel_id": channel.id, "is_primary": channel.is_primary}
