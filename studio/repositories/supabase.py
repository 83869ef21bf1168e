"""
Supabase data access layer.
"""
from typing import Any

from supabase import Client, create_client

from studio.config import settings
from studio.exceptions.handlers import NotFoundError, SupabaseConfigError
from studio.logging.config import get_structured_logger
from studio.models.records import (
    ApiCredential,
    Channel,
    ImageModel,
    Script,
    ScriptOverview,
    VideoWithChannel,
    Voice,
)

logger = get_structured_logger(__name__)

# Global Supabase clients: service role for data, anon key for dashboard sign-in
_supabase_client: Client | None = None
_auth_client: Client | None = None

VOICE_COLUMNS = """
    id,
    nome_voz,
    voice_id,
    idioma,
    genero,
    preview_url,
    created_at,
    id_plataforma,
    apis!vozes_id_plataforma_fkey (
        plataforma
    )
"""

SCRIPT_OVERVIEW_COLUMNS = """
    id,
    titulo,
    roteiro,
    canal_id,
    created_at,
    audio_path,
    text_thumb,
    images_path,
    transcricao_timestamp,
    images_info
"""

VIDEO_FALLBACK_COLUMNS = """
    id,
    status,
    video_path,
    thumb_path,
    created_at,
    data_publicar,
    roteiros!inner (
        id,
        titulo,
        canal_id,
        canais!inner (
            id,
            nome_canal,
            profile_image
        )
    )
"""


class SupabaseRepository:
    """Supabase data access layer."""

    @staticmethod
    def get_client() -> Client:
        """Return the Supabase client (singleton)."""
        global _supabase_client
        if _supabase_client is None:
            if not settings.supabase_configured:
                raise SupabaseConfigError()
            _supabase_client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key
            )
        return _supabase_client

    @staticmethod
    def get_auth_client() -> Client:
        """Anon-key client for user sessions.

        Signing in rewrites the Authorization header of the client it runs on, so user
        sessions never touch the service-role client returned by `get_client`.
        """
        global _auth_client
        if _auth_client is None:
            if not settings.supabase_auth_configured:
                raise SupabaseConfigError("Supabase anon key not configured")
            _auth_client = create_client(settings.supabase_url, settings.supabase_anon_key)
        return _auth_client

    @staticmethod
    def reset_client() -> None:
        """Drop the cached clients so the next call rebuilds them."""
        global _supabase_client, _auth_client
        _supabase_client = None
        _auth_client = None

    # Credentials

    @staticmethod
    def get_api_key(platform: str) -> str | None:
        """Stored API key for a platform, or None."""
        client = SupabaseRepository.get_client()
        try:
            resp = client.table("apis").select("api_key").eq("plataforma", platform).single().execute()
        except Exception as e:
            # single() raises when no row matches
            logger.warning("API key lookup failed platform=%s err=%s", platform, str(e))
            return None
        data = resp.data or {}
        return data.get("api_key") or None

    @staticmethod
    def list_credentials() -> list[ApiCredential]:
        """All platform credentials."""
        client = SupabaseRepository.get_client()
        resp = client.table("apis").select("*").order("plataforma").execute()
        return [ApiCredential(**row) for row in resp.data or []]

    # Channels

    @staticmethod
    def list_channels(order: str = "created_at") -> list[Channel]:
        """Channels, newest first or alphabetically by name."""
        client = SupabaseRepository.get_client()
        query = client.table("canais").select("*")
        if order == "nome_canal":
            query = query.order("nome_canal")
        else:
            query = query.order("created_at", desc=True)
        resp = query.execute()
        return [Channel(**row) for row in resp.data or []]

    @staticmethod
    def get_channel(channel_id: int) -> Channel:
        """A single channel by id."""
        client = SupabaseRepository.get_client()
        resp = client.table("canais").select("*").eq("id", channel_id).execute()
        if not resp.data:
            raise NotFoundError(f"Channel {channel_id} not found", "CHANNEL_NOT_FOUND")
        return Channel(**resp.data[0])

    @staticmethod
    def find_channel_by_name(name: str) -> Channel | None:
        """Newest channel with the given name."""
        client = SupabaseRepository.get_client()
        resp = (
            client.table("canais").select("*").eq("nome_canal", name)
            .order("created_at", desc=True).limit(1).execute()
        )
        if not resp.data:
            return None
        return Channel(**resp.data[0])

    @staticmethod
    def update_channel(channel_id: int, fields: dict[str, Any]) -> None:
        """Partial update of a channel row."""
        client = SupabaseRepository.get_client()
        client.table("canais").update(fields).eq("id", channel_id).execute()
        logger.info("Channel updated id=%s fields=%s", channel_id, sorted(fields))

    # Voices

    @staticmethod
    def list_voices() -> list[Voice]:
        """Voices with their platform name, ordered by name."""
        client = SupabaseRepository.get_client()
        resp = client.table("vozes").select(VOICE_COLUMNS).order("nome_voz").execute()
        return [Voice.from_row(row) for row in resp.data or []]

    @staticmethod
    def get_voice(voice_pk: int) -> Voice:
        """A single voice by primary key."""
        client = SupabaseRepository.get_client()
        resp = client.table("vozes").select(VOICE_COLUMNS).eq("id", voice_pk).execute()
        if not resp.data:
            raise NotFoundError(f"Voice {voice_pk} not found", "VOICE_NOT_FOUND")
        return Voice.from_row(resp.data[0])

    @staticmethod
    def get_platform_id(platform: str) -> int | None:
        """Primary key of the credential row for a platform."""
        client = SupabaseRepository.get_client()
        resp = client.table("apis").select("id").eq("plataforma", platform).execute()
        if not resp.data:
            return None
        return resp.data[0]["id"]

    @staticmethod
    def insert_voice(row: dict[str, Any]) -> None:
        """Insert a voice row."""
        client = SupabaseRepository.get_client()
        client.table("vozes").insert(row).execute()

    @staticmethod
    def update_voice(voice_pk: int, row: dict[str, Any]) -> None:
        """Update a voice row."""
        client = SupabaseRepository.get_client()
        client.table("vozes").update(row).eq("id", voice_pk).execute()

    @staticmethod
    def delete_voice(voice_pk: int) -> None:
        """Delete a voice row."""
        client = SupabaseRepository.get_client()
        client.table("vozes").delete().eq("id", voice_pk).execute()

    # Image models

    @staticmethod
    def list_image_models() -> list[ImageModel]:
        """Image models ordered by name."""
        client = SupabaseRepository.get_client()
        resp = client.table("modelos_imagem").select("id, name, air").order("name").execute()
        return [ImageModel(**row) for row in resp.data or []]

    @staticmethod
    def insert_image_model(row: dict[str, Any]) -> None:
        """Insert an image model row."""
        client = SupabaseRepository.get_client()
        client.table("modelos_imagem").insert(row).execute()

    @staticmethod
    def delete_image_model(model_pk: int) -> None:
        """Delete an image model row."""
        client = SupabaseRepository.get_client()
        client.table("modelos_imagem").delete().eq("id", model_pk).execute()

    # Scripts

    @staticmethod
    def scripts_without_audio(channel_id: int) -> list[Script]:
        """Scripts of a channel that still have no audio.

        The stored procedure bypasses row level security; when it is missing or
        fails, a direct filtered query is used instead.
        """
        client = SupabaseRepository.get_client()
        try:
            resp = client.rpc("get_roteiros_sem_audio", {"canal_param": int(channel_id)}).execute()
            if resp.data is not None:
                return [Script(**row) for row in resp.data]
        except Exception as e:
            logger.warning("get_roteiros_sem_audio failed, falling back to direct query err=%s", str(e))

        resp = (
            client.table("roteiros")
            .select("id, titulo, roteiro, canal_id, audio_path")
            .eq("canal_id", int(channel_id))
            .is_("audio_path", "null")
            .execute()
        )
        return [Script(**row) for row in resp.data or []]

    @staticmethod
    def scripts_without_images(channel_id: int) -> list[Script]:
        """Scripts of a channel that still have no images."""
        client = SupabaseRepository.get_client()
        resp = (
            client.table("roteiros")
            .select("id, titulo, roteiro, canal_id")
            .eq("canal_id", int(channel_id))
            .is_("images_path", "null")
            .execute()
        )
        return [Script(**row) for row in resp.data or []]

    @staticmethod
    def list_scripts_overview() -> list[ScriptOverview]:
        """All scripts, newest first, with channel names and video state.

        Videos share the primary key of the script they were rendered from.
        """
        client = SupabaseRepository.get_client()
        resp = (
            client.table("roteiros")
            .select(SCRIPT_OVERVIEW_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        channels = client.table("canais").select("id, nome_canal").execute()
        videos = (
            client.table("videos")
            .select("id, status, video_path, data_publicar, thumb_path")
            .execute()
        )
        names = {row["id"]: row["nome_canal"] for row in channels.data or []}
        by_id = {row["id"]: row for row in videos.data or []}

        overview = []
        for row in resp.data or []:
            video = by_id.get(row["id"]) or {}
            overview.append(ScriptOverview(
                **row,
                canal_nome=names.get(row.get("canal_id")) or "Desconhecido",
                video_id=row["id"] if row["id"] in by_id else None,
                video_status=video.get("status"),
                video_path=video.get("video_path"),
                data_publicar=video.get("data_publicar"),
                thumb_path=video.get("thumb_path"),
            ))
        return overview

    @staticmethod
    def get_channel_style(channel_id: int) -> dict[str, Any]:
        """Image style collected for a channel (`detailed_style` column)."""
        client = SupabaseRepository.get_client()
        resp = client.table("canais").select("detailed_style").eq("id", channel_id).execute()
        if not resp.data:
            raise NotFoundError(f"Channel {channel_id} not found", "CHANNEL_NOT_FOUND")
        return resp.data[0].get("detailed_style") or {}

    # Videos

    @staticmethod
    def list_videos_with_channels() -> list[VideoWithChannel]:
        """Rendered videos joined with their channel."""
        client = SupabaseRepository.get_client()
        try:
            resp = client.rpc("get_videos_with_channels", {}).execute()
            return [VideoWithChannel(**row) for row in resp.data or []]
        except Exception as e:
            logger.warning("get_videos_with_channels failed, falling back to nested query err=%s", str(e))

        resp = (
            client.table("videos")
            .select(VIDEO_FALLBACK_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [VideoWithChannel.from_nested_row(row) for row in resp.data or []]

    # Auth

    @staticmethod
    def sign_in(email: str, password: str):
        """Password sign-in."""
        client = SupabaseRepository.get_auth_client()
        return client.auth.sign_in_with_password({"email": email, "password": password})

    @staticmethod
    def get_session():
        """Persisted auth session, if any."""
        client = SupabaseRepository.get_auth_client()
        return client.auth.get_session()

    @staticmethod
    def sign_out():
        """Sign out of the current session."""
        client = SupabaseRepository.get_auth_client()
        return client.auth.sign_out()
