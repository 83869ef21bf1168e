"""
Minimax voice provider.

The API has no single-voice lookup, so the full system voice list is fetched
and filtered locally.
"""
import re
from typing import Any, Dict, List, Optional

from studio.config import settings
from studio.exceptions.handlers import ProxyError
from studio.providers.base import (
    NOT_SPECIFIED,
    BaseProvider,
)

# Checked in order; the first substring found in the voice id wins
LANGUAGE_HINTS = [
    (("english",), "Inglês"),
    (("chinese", "mandarin"), "Chinês"),
    (("spanish",), "Espanhol"),
    (("french",), "Francês"),
    (("german",), "Alemão"),
    (("portuguese",), "Português"),
    (("japanese",), "Japonês"),
    (("korean",), "Coreano"),
]


def detect_language(voice_id: str) -> str:
    """Guess the language from the voice identifier."""
    text = (voice_id or "").lower()
    for hints, language in LANGUAGE_HINTS:
        if any(hint in text for hint in hints):
            return language
    return NOT_SPECIFIED


def detect_gender(description: List[str]) -> str:
    """Guess the gender from the free-text description tags.

    "male" is matched as a whole word so that "female" does not count as both.
    """
    text = " ".join(description or []).lower()
    has_male = re.search(r"\bmale\b", text) is not None
    has_female = "female" in text
    if has_male and not has_female:
        return "Masculino"
    if has_female and not has_male:
        return "Feminino"
    if "girl" in text or "woman" in text:
        return "Feminino"
    if re.search(r"\b(boy|man)\b", text):
        return "Masculino"
    return NOT_SPECIFIED


def normalize_voice(voice: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Minimax system voice into the common voice record."""
    description = voice.get("description") or []
    if isinstance(description, str):
        description = [description]
    return {
        "voice_id": voice.get("voice_id"),
        "nome_voz": voice.get("voice_name"),
        "plataforma": "Minimax",
        "idioma": detect_language(voice.get("voice_id") or ""),
        "genero": detect_gender(description),
        "preview_url": "",
        "description": ", ".join(description),
        "created_time": voice.get("created_time"),
        "raw_data": voice,
    }


class MinimaxProvider(BaseProvider):
    """Minimax text-to-speech voice list API."""

    platform = "Minimax"
    label = "Minimax"

    def default_base_url(self) -> str:
        return settings.minimax_base_url

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def system_voices(self, api_key: str) -> List[Dict[str, Any]]:
        """Raw system voices."""
        data = await self.request("GET", "/v1/text_to_speech/voice_list", api_key)
        return data.get("system_voice") or []

    async def fetch_voice(self, voice_id: str, api_key: str) -> Dict[str, Any]:
        """Find one voice in the system list and normalize it."""
        for voice in await self.system_voices(api_key):
            if voice.get("voice_id") == voice_id:
                return normalize_voice(voice)
        raise ProxyError(404, "Voice not found")

    async def list_voices(
        self,
        api_key: str,
        search: Optional[str] = None,
        language: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Normalized system voices, optionally filtered."""
        voices = [normalize_voice(v) for v in await self.system_voices(api_key)]
        if search:
            term = search.lower()
            voices = [
                v for v in voices
                if term in (v["nome_voz"] or "").lower()
                or term in (v["voice_id"] or "").lower()
                or term in v["description"].lower()
            ]
        if language:
            voices = [v for v in voices if language.lower() in v["idioma"].lower()]
        return voices


async def fetch_function(provider: MinimaxProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a single lookup."""
    return {"success": True, "data": await provider.fetch_voice(body["voice_id"], api_key)}


async def list_function(provider: MinimaxProvider, body: dict, api_key: str) -> dict:
    """Proxy function body for a catalog listing."""
    voices = await provider.list_voices(api_key, body.get("search"), body.get("language"))
    return {"success": True, "voices": voices, "total": len(voices)}
