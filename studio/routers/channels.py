"""
Channel routes.
"""
from fastapi import APIRouter, Depends

from studio.clients.service_client import ServiceClient
from studio.models.api import ChannelSettingsRequest, ImageData
from studio.models.records import Channel, Script
from studio.routers.dependencies import get_service_client
from studio.services.channels import ChannelService

router = APIRouter(prefix="/api/v1/channels", tags=["channels"])


def get_channel_service(client: ServiceClient = Depends(get_service_client)) -> ChannelService:
    return ChannelService(client)


@router.get("", response_model=list[Channel])
async def list_channels(order: str = "created_at", service: ChannelService = Depends(get_channel_service)):
    """List channels, newest first or by name."""
    return await service.list_channels(order)


@router.get("/{channel_id}", response_model=Channel)
async def get_channel(channel_id: int, service: ChannelService = Depends(get_channel_service)):
    """Get one channel."""
    return await service.get_channel(channel_id)


@router.put("/{channel_id}/settings", response_model=Channel)
async def save_settings(
    channel_id: int,
    request: ChannelSettingsRequest,
    service: ChannelService = Depends(get_channel_service),
):
    """Save voice, prompts, caption style and media pacing."""
    return await service.save_settings(channel_id, **request.model_dump())


@router.put("/{channel_id}/image", response_model=Channel)
async def update_image(
    channel_id: int,
    image: ImageData,
    service: ChannelService = Depends(get_channel_service),
):
    """Replace the channel profile picture."""
    return await service.update_image(channel_id, image.model_dump())


@router.delete("/{channel_id}", response_model=list[Channel])
async def delete_channel(channel_id: int, service: ChannelService = Depends(get_channel_service)):
    """Delete a channel and return the remaining ones."""
    return await service.delete_channel(channel_id)


@router.get("/{channel_id}/scripts/without-audio", response_model=list[Script])
async def scripts_without_audio(channel_id: int, service: ChannelService = Depends(get_channel_service)):
    """Scripts of the channel still waiting for narration."""
    return await service.scripts_without_audio(channel_id)


@router.get("/{channel_id}/scripts/without-images", response_model=list[Script])
async def scripts_without_images(channel_id: int, service: ChannelService = Depends(get_channel_service)):
    """Scripts of the channel still waiting for images."""
    return await service.scripts_without_images(channel_id)
