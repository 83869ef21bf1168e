"""
OpenRouter account provider, used for the credit balance.
"""
from typing import Any, Dict

from studio.config import settings
from studio.providers.base import BaseProvider


class OpenRouterProvider(BaseProvider):
    """OpenRouter REST API."""

    platform = "OpenRouter"
    label = "OpenRouter"

    def default_base_url(self) -> str:
        return settings.openrouter_base_url

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def get_credits(self, api_key: str) -> Dict[str, Any]:
        """Purchased credits and usage so far."""
        data = await self.request("GET", "/api/v1/credits", api_key)
        return data.get("data") or {}
