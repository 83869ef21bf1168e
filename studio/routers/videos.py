"""
Rendered video routes.
"""
from typing import Any

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from studio.clients.service_client import ServiceClient
from studio.logging.config import get_structured_logger
from studio.models.api import GenerateVideosRequest
from studio.models.records import VideoWithChannel
from studio.repositories.supabase import SupabaseRepository
from studio.routers.dependencies import get_service_client

logger = get_structured_logger(__name__)
router = APIRouter(prefix="/api/v1/videos", tags=["videos"])


@router.get("", response_model=list[VideoWithChannel])
async def list_videos():
    """Videos with their channel, for review and publishing."""
    return await run_in_threadpool(SupabaseRepository.list_videos_with_channels)


@router.post("/generate", status_code=status.HTTP_202_ACCEPTED)
async def generate_videos(
    request: GenerateVideosRequest,
    client: ServiceClient = Depends(get_service_client),
) -> Any:
    """Queue scripts for rendering."""
    videos = [item.model_dump() for item in request.videos]
    logger.info("Requesting render of %d videos", len(videos))
    return await client.generate_videos(videos)


@router.delete("/{video_id}")
async def delete_video(video_id: int, client: ServiceClient = Depends(get_service_client)) -> Any:
    """Delete a video through the backend."""
    return await client.delete_content(video_id, "deleteVideo")
