"""
Runware image model provider.
"""
import uuid
from typing import Any, Dict

from studio.config import settings
from studio.exceptions.handlers import ProxyError
from studio.providers.base import (
    NOT_SPECIFIED,
    UNKNOWN_AUTHOR,
    BaseProvider,
)


def normalize_model(model: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Runware model search hit into the common model record."""
    return {
        "air": model.get("air"),
        "nome_modelo": model.get("name") or "Nome não disponível",
        "plataforma": "Runware",
        "categoria": model.get("category") or NOT_SPECIFIED,
        "descricao": model.get("description") or "",
        "tags": model.get("tags") or [],
        "preview_url": model.get("previewImage") or "",
        "creator": model.get("creator") or UNKNOWN_AUTHOR,
        "base_model": model.get("baseModel") or "",
        "type": model.get("type") or "",
        "version": model.get("version") or "",
        "download_count": model.get("downloadCount") or 0,
        "like_count": model.get("likeCount") or 0,
        "raw_data": model,
    }


class RunwareProvider(BaseProvider):
    """Runware task API."""

    platform = "Runware"
    label = "Runware"

    def default_base_url(self) -> str:
        return settings.runware_base_url

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def run_task(self, api_key: str, task: Dict[str, Any]) -> Dict[str, Any]:
        """Submit a single task and return its result entry."""
        payload = [{"taskUUID": str(uuid.uuid4()), **task}]
        data = await self.request("POST", "/v1", api_key, json=payload)
        results = data.get("data") or []
        return results[0] if results else {}

    async def fetch_model(self, air: str, api_key: str) -> Dict[str, Any]:
        """Look up a model by its AIR identifier."""
        result = await self.run_task(api_key, {
            "taskType": "modelSearch",
            "search": air,
            "visibility": ["public", "community"],
            "limit": 1,
        })
        models = result.get("models") or []
        if not models:
            raise ProxyError(404, "Model not found", f"No model found for AIR: {air}")
        return normalize_model(models[0])

    async def get_account_details(self, api_key: str) -> Dict[str, Any]:
        """Account details, including the balance."""
        return await self.run_task(api_key, {
            "taskType": "accountManagement",
            "operation": "getDetails",
        })


async def fetch_function(provider: RunwareProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a single lookup."""
    return {"success": True, "data": await provider.fetch_model(body["air"], api_key)}
