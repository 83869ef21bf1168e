"""
ElevenLabs voice provider.
"""
from typing import Any, Dict

from studio.config import settings
from studio.providers.base import (
    NOT_SPECIFIED,
    BaseProvider,
)

LANGUAGES = {
    "en": "Inglês",
    "pt": "Português",
    "es": "Espanhol",
    "fr": "Francês",
    "de": "Alemão",
}

GENDERS = {
    "male": "Masculino",
    "female": "Feminino",
}


def normalize_voice(voice: Dict[str, Any]) -> Dict[str, Any]:
    """Map an ElevenLabs voice into the common voice record."""
    labels = voice.get("labels") or {}
    sharing = voice.get("sharing") or {}
    return {
        "voice_id": voice.get("voice_id"),
        "nome_voz": voice.get("name"),
        "plataforma": "ElevenLabs",
        # Unknown languages default to English
        "idioma": LANGUAGES.get(labels.get("language"), "Inglês"),
        "genero": GENDERS.get(labels.get("gender"), NOT_SPECIFIED),
        "preview_url": voice.get("preview_url") or "",
        "description": voice.get("description") or "",
        "category": voice.get("category"),
        "age": labels.get("age"),
        "accent": labels.get("accent"),
        "use_case": labels.get("use_case"),
        "popularity": (sharing.get("liked_by_count") or 0) + (sharing.get("cloned_by_count") or 0),
        "settings": voice.get("settings"),
        "raw_data": voice,
    }


class ElevenLabsProvider(BaseProvider):
    """ElevenLabs voices API."""

    platform = "ElevenLabs"
    label = "ElevenLabs"

    def default_base_url(self) -> str:
        return settings.elevenlabs_base_url

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"xi-api-key": api_key}

    async def fetch_voice(self, voice_id: str, api_key: str) -> Dict[str, Any]:
        """Fetch and normalize a single voice."""
        voice = await self.request("GET", f"/v1/voices/{voice_id}", api_key)
        return normalize_voice(voice)

    async def list_voices(self, api_key: str, show_legacy: bool = False) -> list[Dict[str, Any]]:
        """All voices visible to the account."""
        params = {"show_legacy": "true"} if show_legacy else None
        data = await self.request("GET", "/v1/voices", api_key, params=params)
        return [normalize_voice(v) for v in data.get("voices") or []]

    async def get_subscription(self, api_key: str) -> Dict[str, Any]:
        """Subscription quota of the account."""
        return await self.request("GET", "/v1/user/subscription", api_key)


async def fetch_function(provider: ElevenLabsProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a single lookup."""
    return {"success": True, "data": await provider.fetch_voice(body["voice_id"], api_key)}


async def list_function(provider: ElevenLabsProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a catalog listing."""
    voices = await provider.list_voices(api_key, bool(body.get("show_legacy")))
    return {"success": True, "voices": voices, "total": len(voices)}
