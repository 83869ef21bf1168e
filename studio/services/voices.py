"""
Voice and image model catalog: provider lookups cached into the database.
"""
import asyncio
from typing import List, Optional

import httpx
from starlette.concurrency import run_in_threadpool

from studio.config import settings
from studio.exceptions.handlers import AppValidationError, ExternalServiceError, NotFoundError, ProxyError
from studio.logging.config import get_structured_logger
from studio.models.api import VoiceMetadata, VoiceWriteRequest
from studio.models.records import ImageModel, Voice
from studio.providers import VOICE_PROVIDERS, BaseProvider, RunwareProvider
from studio.repositories.supabase import SupabaseRepository
from studio.utils.debounce import Debouncer

logger = get_structured_logger(__name__)


def requires_manual_entry(platform: str) -> bool:
    """Platforms without a metadata lookup need name, language and gender typed in."""
    return platform not in VOICE_PROVIDERS


class VoiceCatalogService:
    """Voices and image models, with metadata collected from their providers."""

    def __init__(self, http_client: httpx.AsyncClient, repository=SupabaseRepository):
        self.http_client = http_client
        self.repository = repository

    async def _api_key(self, provider: BaseProvider) -> str:
        api_key = await run_in_threadpool(self.repository.get_api_key, provider.platform)
        if not api_key:
            raise ExternalServiceError(f"{provider.label} API key not found in database", "API_KEY_NOT_FOUND")
        return api_key

    # Voices

    async def list_voices(self) -> List[Voice]:
        return await run_in_threadpool(self.repository.list_voices)

    async def search_voices(self, term: Optional[str] = None, platform: Optional[str] = None) -> List[Voice]:
        """Stored voices matching `term` in name, platform or language."""
        voices = await self.list_voices()
        if platform:
            voices = [v for v in voices if v.plataforma == platform]
        if term:
            needle = term.lower()
            voices = [
                v for v in voices
                if needle in v.nome_voz.lower()
                or needle in v.plataforma.lower()
                or needle in (v.idioma or "").lower()
            ]
        return voices

    async def collect_metadata(self, platform: str, voice_id: str) -> VoiceMetadata:
        """Name, language, gender and preview of a provider voice."""
        if not (voice_id or "").strip():
            raise AppValidationError("voice_id is required", "VOICE_ID_REQUIRED")
        if requires_manual_entry(platform):
            raise AppValidationError(
                f"Platform {platform} has no metadata lookup; enter the fields manually",
                "MANUAL_ENTRY_REQUIRED",
            )
        provider = VOICE_PROVIDERS[platform](self.http_client)
        api_key = await self._api_key(provider)
        try:
            data = await provider.fetch_voice(voice_id.strip(), api_key)
        except ProxyError as e:
            raise ExternalServiceError(e.message, "VOICE_LOOKUP_FAILED", {"status": e.status_code}) from e
        logger.info("Voice metadata collected platform=%s voice_id=%s", platform, voice_id)
        return VoiceMetadata(
            nome_voz=data.get("nome_voz") or voice_id,
            idioma=data.get("idioma"),
            genero=data.get("genero"),
            preview_url=data.get("preview_url") or None,
        )

    async def _voice_row(self, request: VoiceWriteRequest) -> dict:
        platform_id = await run_in_threadpool(self.repository.get_platform_id, request.platform)
        if platform_id is None:
            raise NotFoundError(f"Platform {request.platform} not found", "PLATFORM_NOT_FOUND")

        if requires_manual_entry(request.platform):
            if not (request.nome_voz and request.idioma and request.genero):
                raise AppValidationError(
                    "Name, language and gender are required for this platform", "MANUAL_FIELDS_REQUIRED"
                )
            metadata = VoiceMetadata(nome_voz=request.nome_voz, idioma=request.idioma, genero=request.genero)
        else:
            metadata = await self.collect_metadata(request.platform, request.voice_id)

        return {
            "voice_id": request.voice_id.strip(),
            "id_plataforma": platform_id,
            **metadata.model_dump(),
        }

    async def create_voice(self, request: VoiceWriteRequest) -> dict:
        row = await self._voice_row(request)
        await run_in_threadpool(self.repository.insert_voice, row)
        logger.info("Voice created platform=%s voice_id=%s", request.platform, row["voice_id"])
        return row

    async def update_voice(self, voice_pk: int, request: VoiceWriteRequest) -> dict:
        row = await self._voice_row(request)
        await run_in_threadpool(self.repository.update_voice, voice_pk, row)
        return row

    async def delete_voice(self, voice_pk: int) -> None:
        await run_in_threadpool(self.repository.delete_voice, voice_pk)

    # Image models

    async def list_image_models(self) -> List[ImageModel]:
        return await run_in_threadpool(self.repository.list_image_models)

    async def collect_image_model(self, air: str) -> dict:
        """Runware model details for an AIR identifier."""
        if not (air or "").strip():
            raise AppValidationError("AIR is required", "AIR_REQUIRED")
        provider = RunwareProvider(self.http_client)
        api_key = await self._api_key(provider)
        try:
            return await provider.fetch_model(air.strip(), api_key)
        except ProxyError as e:
            raise ExternalServiceError(e.message, "MODEL_LOOKUP_FAILED", {"status": e.status_code}) from e

    async def create_image_model(self, air: str, name: Optional[str] = None) -> dict:
        if not name:
            model = await self.collect_image_model(air)
            name = model["nome_modelo"]
        row = {"air": air.strip(), "name": name}
        await run_in_threadpool(self.repository.insert_image_model, row)
        return row

    async def delete_image_model(self, model_pk: int) -> None:
        await run_in_threadpool(self.repository.delete_image_model, model_pk)


class AutoCollector:
    """Looks voice metadata up once typing settles."""

    def __init__(self, service: VoiceCatalogService, delay: Optional[float] = None):
        self.service = service
        self._debouncer = Debouncer(
            service.collect_metadata,
            settings.debounce_seconds if delay is None else delay,
        )

    def on_input(self, platform: str, voice_id: str) -> Optional[asyncio.Task]:
        """Schedule a lookup; blank ids and manual platforms cancel any pending one."""
        if not (voice_id or "").strip() or requires_manual_entry(platform):
            self._debouncer.cancel()
            return None
        return self._debouncer.trigger(platform, voice_id)

    async def latest(self) -> Optional[VoiceMetadata]:
        return await self._debouncer.latest()

    async def aclose(self) -> None:
        await self._debouncer.aclose()
