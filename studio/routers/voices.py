"""
Voice and image model routes.
"""
import httpx
from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from studio.clients.http import get_http_client
from studio.models.api import (
    ImageModelCreateRequest,
    VoiceCollectRequest,
    VoiceMetadata,
    VoicePreviewResponse,
    VoiceWriteRequest,
)
from studio.models.records import ImageModel, Voice
from studio.repositories.supabase import SupabaseRepository
from studio.services.voices import VoiceCatalogService
from studio.workflows.playback import VoicePreviewService

router = APIRouter(prefix="/api/v1/voices", tags=["voices"])
image_models_router = APIRouter(prefix="/api/v1/image-models", tags=["image-models"])


def get_catalog(http_client: httpx.AsyncClient = Depends(get_http_client)) -> VoiceCatalogService:
    return VoiceCatalogService(http_client)


@router.get("", response_model=list[Voice])
async def list_voices(
    search: str | None = None,
    platform: str | None = None,
    catalog: VoiceCatalogService = Depends(get_catalog),
):
    """List stored voices, optionally filtered."""
    if search or platform:
        return await catalog.search_voices(search, platform)
    return await catalog.list_voices()


@router.post("/collect", response_model=VoiceMetadata)
async def collect_metadata(request: VoiceCollectRequest, catalog: VoiceCatalogService = Depends(get_catalog)):
    """Look a voice up on its provider without saving it."""
    return await catalog.collect_metadata(request.platform, request.voice_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_voice(request: VoiceWriteRequest, catalog: VoiceCatalogService = Depends(get_catalog)):
    """Add a voice."""
    return await catalog.create_voice(request)


@router.put("/{voice_pk}")
async def update_voice(
    voice_pk: int,
    request: VoiceWriteRequest,
    catalog: VoiceCatalogService = Depends(get_catalog),
):
    """Edit a voice; provider metadata is collected again."""
    return await catalog.update_voice(voice_pk, request)


@router.delete("/{voice_pk}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_voice(voice_pk: int, catalog: VoiceCatalogService = Depends(get_catalog)):
    """Remove a voice."""
    await catalog.delete_voice(voice_pk)


@router.get("/{voice_pk}/preview", response_model=VoicePreviewResponse)
async def preview_voice(voice_pk: int, http_client: httpx.AsyncClient = Depends(get_http_client)):
    """Playable sample URL of a voice."""
    voice = await run_in_threadpool(SupabaseRepository.get_voice, voice_pk)
    url = await VoicePreviewService(http_client).preview_url(voice)
    return VoicePreviewResponse(voice_id=voice.id, preview_url=url)


@image_models_router.get("", response_model=list[ImageModel])
async def list_image_models(catalog: VoiceCatalogService = Depends(get_catalog)):
    """List image models."""
    return await catalog.list_image_models()


@image_models_router.post("", status_code=status.HTTP_201_CREATED)
async def create_image_model(request: ImageModelCreateRequest, catalog: VoiceCatalogService = Depends(get_catalog)):
    """Add an image model; its name is looked up on Runware when omitted."""
    return await catalog.create_image_model(request.air, request.name)


@image_models_router.delete("/{model_pk}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image_model(model_pk: int, catalog: VoiceCatalogService = Depends(get_catalog)):
    """Remove an image model."""
    await catalog.delete_image_model(model_pk)
