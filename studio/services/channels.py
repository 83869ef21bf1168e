"""
Channel management.
"""
from typing import Any, List, Optional

from starlette.concurrency import run_in_threadpool

from studio.clients.service_client import ServiceClient
from studio.exceptions.handlers import ExternalServiceError
from studio.logging.config import get_structured_logger
from studio.models.records import Channel, Voice
from studio.models.responses import parse_ack
from studio.repositories.supabase import SupabaseRepository

logger = get_structured_logger(__name__)


def resolve_preferred_voice(channel: Optional[Channel], voices: List[Voice]) -> Optional[Voice]:
    """The channel's preferred voice when loaded, else the first voice, else None."""
    if not voices:
        return None
    if channel is not None and channel.voz_prefereida is not None:
        for voice in voices:
            if voice.id == channel.voz_prefereida:
                return voice
    return voices[0]


class ChannelService:
    """Channel settings, pictures and deletion."""

    def __init__(self, client: ServiceClient, repository=SupabaseRepository):
        self.client = client
        self.repository = repository

    async def list_channels(self, order: str = "created_at") -> List[Channel]:
        return await run_in_threadpool(self.repository.list_channels, order)

    async def get_channel(self, channel_id: int) -> Channel:
        return await run_in_threadpool(self.repository.get_channel, channel_id)

    async def save_settings(
        self,
        channel_id: int,
        voice_id: Optional[int] = None,
        prompt_titulo: Optional[str] = None,
        prompt_roteiro: Optional[str] = None,
        caption_style: Optional[dict[str, Any]] = None,
        media_chars: Optional[float] = None,
    ) -> Channel:
        """Notify the backend, persist the row, and return the refreshed channel."""
        await self.client.update_channel({
            "id_canal": channel_id,
            "voice_id": voice_id or None,
            "prompt_titulo": prompt_titulo,
            "prompt_roteiro": prompt_roteiro,
            "caption_style": caption_style,
            "media_chars": media_chars or None,
        })
        await run_in_threadpool(self.repository.update_channel, channel_id, {
            "prompt_titulo": prompt_titulo,
            "prompt_roteiro": prompt_roteiro,
            "voz_prefereida": voice_id or None,
            "caption_style": caption_style,
            "media_chars": media_chars or None,
        })
        return await self.get_channel(channel_id)

    async def update_image(self, channel_id: int, image_data: dict[str, str]) -> Channel:
        """Upload a new profile picture and return the channel with its new image."""
        response = await self.client.update_channel_image(channel_id, image_data)
        if not parse_ack(response):
            logger.error("Channel image update not acknowledged id=%s", channel_id)
            raise ExternalServiceError("Image update failed on the server", "IMAGE_UPDATE_FAILED")
        return await self.get_channel(channel_id)

    async def delete_channel(self, channel_id: int) -> List[Channel]:
        """Delete a channel through the backend and return the remaining channels."""
        await self.client.delete_content(channel_id, "deleteChannel")
        logger.info("Channel deleted id=%s", channel_id)
        return await self.list_channels()

    async def scripts_without_audio(self, channel_id: int):
        return await run_in_threadpool(self.repository.scripts_without_audio, channel_id)

    async def scripts_without_images(self, channel_id: int):
        return await run_in_threadpool(self.repository.scripts_without_images, channel_id)
