"""
Database record models for the hosted tables.
"""
from typing import Any

from pydantic import BaseModel, Field


class Channel(BaseModel):
    """A content channel (`canais`)."""
    id: int
    nome_canal: str = ""
    url_canal: str | None = None
    prompt_titulo: str | None = None
    prompt_roteiro: str | None = None
    prompt_thumb: str | None = None
    voz_prefereida: int | None = None
    caption_style: dict[str, Any] | None = None
    detailed_style: dict[str, Any] | None = None
    media_chars: float | None = None
    profile_image: str | None = None
    drive_url: str | None = None
    created_at: str | None = None


class Voice(BaseModel):
    """A third-party TTS voice reference (`vozes`)."""
    id: int
    nome_voz: str = ""
    voice_id: str = ""
    id_plataforma: int | None = None
    plataforma: str = "Outros"
    idioma: str | None = None
    genero: str | None = None
    preview_url: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Voice":
        """Build from a `vozes` row joined with its `apis` platform."""
        joined = row.get("apis") or {}
        platform = joined.get("plataforma") if isinstance(joined, dict) else None
        data = {k: v for k, v in row.items() if k != "apis"}
        data["plataforma"] = platform or row.get("plataforma") or "Outros"
        return cls(**data)


class ApiCredential(BaseModel):
    """Platform credential (`apis`)."""
    id: int
    plataforma: str
    api_key: str = Field(default="", repr=False)
    created_at: str | None = None


class Script(BaseModel):
    """A generated title and body for a channel (`roteiros`)."""
    id: int
    canal_id: int | None = None
    titulo: str | None = None
    roteiro: str | None = None
    audio_path: str | None = None
    images_path: list[str] | str | None = None
    text_thumb: str | None = None
    transcricao_timestamp: Any = None
    images_info: list[dict[str, Any]] | None = None
    created_at: str | None = None


class ScriptOverview(Script):
    """A script with its channel name and the state of its rendered video."""
    canal_nome: str = "Desconhecido"
    video_id: int | None = None
    video_status: str | None = None
    video_path: str | None = None
    data_publicar: str | None = None
    thumb_path: str | None = None

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_path)

    @property
    def has_images(self) -> bool:
        return bool(self.images_path)

    @property
    def has_video(self) -> bool:
        return self.video_id is not None


class ImageModel(BaseModel):
    """An image generation model (`modelos_imagem`)."""
    id: int
    name: str = ""
    air: str = ""


class VideoWithChannel(BaseModel):
    """A rendered video together with its channel, for review and publishing."""
    id: int
    title: str = "Sem título"
    thumbnail: str = ""
    videoUrl: str | None = None
    status: str | None = None
    createdAt: str | None = None
    scheduledDate: str | None = None
    channelId: int = 0
    channelName: str = "Canal desconhecido"
    channelProfileImage: str = ""

    @classmethod
    def from_nested_row(cls, row: dict) -> "VideoWithChannel":
        """Build from a `videos -> roteiros -> canais` nested query row."""
        script = row.get("roteiros") or {}
        channel = script.get("canais") or {}
        return cls(
            id=row["id"],
            title=script.get("titulo") or "Sem título",
            thumbnail=row.get("thumb_path") or "",
            videoUrl=row.get("video_path") or None,
            status=row.get("status"),
            createdAt=row.get("created_at"),
            scheduledDate=row.get("data_publicar"),
            channelId=channel.get("id") or 0,
            channelName=channel.get("nome_canal") or "Canal desconhecido",
            channelProfileImage=channel.get("profile_image") or "",
        )
