"""
Single-clip audio playback and server-side voice previews.
"""
from typing import Callable, Optional, Protocol

import httpx
from starlette.concurrency import run_in_threadpool

from studio.exceptions.handlers import AppValidationError, ExternalServiceError, ProxyError
from studio.logging.config import get_structured_logger
from studio.models.records import Voice
from studio.providers import FishAudioProvider
from studio.repositories.supabase import SupabaseRepository

logger = get_structured_logger(__name__)


class Clip(Protocol):
    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, position: float) -> None: ...


class AudioPlayer:
    """Plays at most one clip at a time."""

    def __init__(self, clip_factory: Callable[[str], Clip]):
        self.clip_factory = clip_factory
        self.current_id: Optional[str] = None
        self.current: Optional[Clip] = None

    def play(self, clip_id: str, url: str) -> Clip:
        """Stop whatever is playing, then start `url`."""
        self.stop()
        clip = self.clip_factory(url)
        self.current_id = clip_id
        self.current = clip
        clip.play()
        return clip

    def stop(self) -> None:
        """Pause and rewind the current clip."""
        if self.current is not None:
            self.current.pause()
            self.current.seek(0)
        self.current_id = None
        self.current = None

    def is_playing(self, clip_id: str) -> bool:
        return self.current is not None and self.current_id == clip_id

    def on_ended(self, clip_id: str) -> None:
        """Playback finished by itself."""
        if self.current_id == clip_id:
            self.current_id = None
            self.current = None


class VoicePreviewService:
    """Resolves a playable sample URL for a stored voice."""

    def __init__(self, http_client: httpx.AsyncClient, repository=SupabaseRepository):
        self.http_client = http_client
        self.repository = repository

    async def preview_url(self, voice: Voice) -> str:
        if voice.plataforma == "ElevenLabs":
            if not voice.preview_url:
                raise AppValidationError(
                    f"No preview available for {voice.nome_voz}", "PREVIEW_NOT_AVAILABLE"
                )
            return voice.preview_url

        if voice.plataforma == "Fish-Audio":
            # Sample URLs expire, so they are fetched on every request
            api_key = await run_in_threadpool(self.repository.get_api_key, "Fish-Audio")
            if not api_key:
                raise ExternalServiceError("Fish Audio API key not found in database", "API_KEY_NOT_FOUND")
            provider = FishAudioProvider(self.http_client)
            try:
                data = await provider.fetch_voice(voice.voice_id, api_key)
            except ProxyError as e:
                raise ExternalServiceError(e.message, "PREVIEW_LOOKUP_FAILED", {"status": e.status_code}) from e
            if not data.get("preview_url"):
                raise AppValidationError(
                    f"No preview available for {voice.nome_voz}", "PREVIEW_NOT_AVAILABLE"
                )
            return data["preview_url"]

        raise AppValidationError(
            f"Preview not supported for platform {voice.plataforma}", "PREVIEW_NOT_SUPPORTED"
        )
