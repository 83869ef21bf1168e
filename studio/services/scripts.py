"""
Script library: every generated script with its audio, image and video state.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Literal, Optional

from starlette.concurrency import run_in_threadpool

from studio.clients.service_client import ServiceClient
from studio.exceptions.handlers import AppValidationError, NotFoundError
from studio.logging.config import get_structured_logger
from studio.models.records import ScriptOverview
from studio.repositories.supabase import SupabaseRepository
from studio.workflows.content_generation import regen_image_payload

logger = get_structured_logger(__name__)

ScriptStatus = Literal["all", "with_audio", "with_images", "with_video"]

STATUS_FILTERS = {
    "all": lambda script: True,
    "with_audio": lambda script: script.has_audio,
    "with_images": lambda script: script.has_images,
    "with_video": lambda script: script.has_video,
}


def group_by_channel(scripts: List[ScriptOverview]) -> Dict[str, List[ScriptOverview]]:
    """Scripts keyed by channel name, keeping the incoming order."""
    groups: Dict[str, List[ScriptOverview]] = OrderedDict()
    for script in scripts:
        groups.setdefault(script.canal_nome, []).append(script)
    return groups


class ScriptLibraryService:
    """Browse, re-render and delete generated scripts."""

    def __init__(self, client: ServiceClient, repository=SupabaseRepository):
        self.client = client
        self.repository = repository

    async def list_scripts(
        self,
        channel_id: Optional[int] = None,
        status: ScriptStatus = "all",
    ) -> List[ScriptOverview]:
        """Scripts newest first, optionally narrowed to a channel and a production stage."""
        if status not in STATUS_FILTERS:
            raise AppValidationError(f"Unknown status filter: {status}", "INVALID_STATUS_FILTER")
        scripts = await run_in_threadpool(self.repository.list_scripts_overview)
        keep = STATUS_FILTERS[status]
        return [
            s for s in scripts
            if (channel_id is None or s.canal_id == channel_id) and keep(s)
        ]

    async def get_script(self, script_id: int) -> ScriptOverview:
        scripts = await run_in_threadpool(self.repository.list_scripts_overview)
        for script in scripts:
            if script.id == script_id:
                return script
        raise NotFoundError(f"Script {script_id} not found", "SCRIPT_NOT_FOUND")

    async def regenerate_image(self, script_id: int, index: int, image_info: Dict[str, Any]) -> Any:
        """Re-render the image at `index` of a script with new parameters."""
        if index < 0:
            raise AppValidationError("Image index must not be negative", "INVALID_IMAGE_INDEX")
        payload = regen_image_payload(script_id, index, image_info)
        logger.info("Regenerating image script_id=%s index=%s", script_id, index)
        return await self.client.generate_content(payload)

    async def delete_script(self, script_id: int) -> Any:
        """Delete a script through the backend."""
        result = await self.client.delete_content(script_id, "deleteScript")
        logger.info("Script deleted id=%s", script_id)
        return result
