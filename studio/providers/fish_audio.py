"""
Fish Audio voice provider.
"""
import math
from typing import Any, Dict, Optional

from studio.config import settings
from studio.providers.base import (
    NOT_SPECIFIED,
    UNKNOWN_AUTHOR,
    BaseProvider,
)


def normalize_voice(voice: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Fish Audio model into the common voice record."""
    samples = voice.get("samples") or []
    languages = voice.get("languages") or []
    author = voice.get("author") or {}
    return {
        "voice_id": voice.get("_id"),
        "nome_voz": voice.get("title"),
        "plataforma": "Fish-Audio",
        "idioma": ", ".join(languages) if languages else NOT_SPECIFIED,
        # The API exposes no gender attribute
        "genero": NOT_SPECIFIED,
        "preview_url": (samples[0].get("audio") if samples else None) or "",
        "description": voice.get("description") or "",
        "author": author.get("nickname") or UNKNOWN_AUTHOR,
        "popularity": voice.get("like_count") or 0,
        "samples": samples,
        "raw_data": voice,
    }


class FishAudioProvider(BaseProvider):
    """Fish Audio model API."""

    platform = "Fish-Audio"
    label = "Fish Audio"

    def default_base_url(self) -> str:
        return settings.fish_audio_base_url

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def fetch_voice(self, voice_id: str, api_key: str) -> Dict[str, Any]:
        """Fetch and normalize a single voice model."""
        voice = await self.request("GET", f"/model/{voice_id}", api_key)
        return normalize_voice(voice)

    async def list_voices(
        self,
        api_key: str,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Dict[str, Any]:
        """One page of the public model catalog."""
        params = {"page": str(page), "page_size": str(page_size)}
        if search:
            params["search"] = search
        if language:
            params["language"] = language
        data = await self.request("GET", "/model", api_key, params=params)
        total = data.get("total") or 0
        return {
            "voices": [normalize_voice(v) for v in data.get("items") or []],
            "pagination": {
                "page": data.get("page") or page,
                "page_size": data.get("page_size") or page_size,
                "total_pages": math.ceil(total / page_size) if page_size else 0,
            },
            "total": total,
        }

    async def get_credit(self, api_key: str) -> Dict[str, Any]:
        """API wallet balance."""
        return await self.request("GET", "/wallet/self/api-credit", api_key)


async def fetch_function(provider: FishAudioProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a single lookup."""
    return {"success": True, "data": await provider.fetch_voice(body["voice_id"], api_key)}


async def list_function(provider: FishAudioProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a catalog listing."""
    result = await provider.list_voices(
        api_key,
        page=int(body.get("page") or 1),
        page_size=int(body.get("page_size") or 20),
        search=body.get("search"),
        language=body.get("language"),
    )
    return {"success": True, **result}
