"""
Request and response models of the REST API.
"""
from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field


class ImageData(BaseModel):
    """An uploaded picture."""
    type: str
    base64: str


class ChannelSettingsRequest(BaseModel):
    """Channel settings update."""
    voice_id: int | None = None
    prompt_titulo: str | None = None
    prompt_roteiro: str | None = None
    caption_style: dict[str, Any] | None = None
    media_chars: float | None = None


class VoiceCollectRequest(BaseModel):
    """Metadata lookup for a provider voice."""
    platform: str
    voice_id: str = Field(min_length=1)


class VoiceMetadata(BaseModel):
    """Voice fields cached into `vozes` at save time."""
    nome_voz: str
    idioma: str | None = None
    genero: str | None = None
    preview_url: str | None = None


class VoiceWriteRequest(BaseModel):
    """Create or edit a voice.

    Name, language and gender are only read for platforms without a lookup.
    """
    platform: str
    voice_id: str = Field(min_length=1)
    nome_voz: str | None = None
    idioma: str | None = None
    genero: str | None = None


class VoicePreviewResponse(BaseModel):
    """Playable sample of a voice."""
    voice_id: int
    preview_url: str


class ImageModelCreateRequest(BaseModel):
    """New image model; the name is looked up when omitted."""
    air: str = Field(min_length=1)
    name: str | None = None


class CreditsResponse(BaseModel):
    """Remaining credits on a provider account."""
    platform: str
    credits: float | str
    unit: Literal["dollars", "characters", "credits"]
    formatted: str
    error: str | None = None


class RegenerateImageRequest(BaseModel):
    """Parameters of a single image re-render."""
    altura: int
    largura: int
    modelo: str
    prompt: str


class GenerateVideoItem(BaseModel):
    """A script to render, with its publish date and zoom effects."""
    id: int
    data_publicar: str | None = None
    zoom_types: list[str] = []


class GenerateVideosRequest(BaseModel):
    """Video render request."""
    videos: list[GenerateVideoItem] = Field(min_length=1)


class LoginRequest(BaseModel):
    """Dashboard login."""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Dashboard session tokens."""
    access_token: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    user_id: str | None = None
    email: EmailStr | None = None


class SessionResponse(BaseModel):
    """Current session state."""
    authenticated: bool
    user_id: str | None = None
    email: str | None = None
