"""
Script library routes.
"""
from typing import Any

from fastapi import APIRouter, Depends

from studio.clients.service_client import ServiceClient
from studio.models.api import RegenerateImageRequest
from studio.models.records import ScriptOverview
from studio.routers.dependencies import get_service_client
from studio.services.scripts import ScriptLibraryService, ScriptStatus

router = APIRouter(prefix="/api/v1/scripts", tags=["scripts"])


def get_library(client: ServiceClient = Depends(get_service_client)) -> ScriptLibraryService:
    return ScriptLibraryService(client)


@router.get("", response_model=list[ScriptOverview])
async def list_scripts(
    channel_id: int | None = None,
    status: ScriptStatus = "all",
    library: ScriptLibraryService = Depends(get_library),
):
    """Scripts newest first, filtered by channel and production stage."""
    return await library.list_scripts(channel_id, status)


@router.post("/{script_id}/images/{index}/regenerate")
async def regenerate_image(
    script_id: int,
    index: int,
    request: RegenerateImageRequest,
    library: ScriptLibraryService = Depends(get_library),
) -> Any:
    """Re-render one image of a script."""
    return await library.regenerate_image(script_id, index, request.model_dump())


@router.delete("/{script_id}")
async def delete_script(script_id: int, library: ScriptLibraryService = Depends(get_library)) -> Any:
    """Delete a script through the backend."""
    return await library.delete_script(script_id)
