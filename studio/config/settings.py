"""
Application settings: environment driven configuration based on Pydantic BaseSettings.
Covers the hosted database, the automation webhooks, provider endpoints and preview assets.
"""
from enum import Enum

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Runtime environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Unified settings read from environment variables and the .env file."""

    # Application
    app_name: str = Field(default="Video Studio Service", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    debug: bool = Field(default=False, description="Debug mode")

    # Server
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors_origins: str = Field(default="", description="Comma separated CORS origins for production")

    # Supabase (optional: the proxy functions report a missing configuration at request time)
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_service_role_key: str | None = Field(default=None, description="Supabase service role key")
    supabase_anon_key: str | None = Field(default=None, description="Supabase anon key for dashboard sign-in")

    # Automation backend
    api_base_url: str = Field(default="", description="Base URL of the automation backend")
    youtube_api_endpoint: str | None = Field(default=None, description="Channel search endpoint path")
    ai_generation_endpoint: str | None = Field(default=None, description="AI generation endpoint path")
    video_processing_endpoint: str | None = Field(default=None, description="Video processing endpoint path")
    upload_endpoint: str | None = Field(default=None, description="Upload endpoint path")
    ai_models_endpoint: str | None = Field(default=None, description="AI models endpoint path")

    webhook_clone_channel: str = Field(default="/webhook/treinarCanal", description="Channel cloning and training webhook")
    webhook_generate_content: str = Field(default="/webhook/gerarConteudo", description="Content generation webhook")
    webhook_generate_title: str | None = Field(default=None, description="Title generation webhook")
    webhook_generate_script: str | None = Field(default=None, description="Script generation webhook")
    webhook_process_video: str | None = Field(default=None, description="Video processing webhook")
    webhook_publish_video: str | None = Field(default=None, description="Video publishing webhook")
    webhook_update: str = Field(default="/webhook/update", description="Channel/video update webhook")
    webhook_generate_video: str = Field(default="/webhook/gerarVideo", description="Video rendering webhook")
    webhook_delete: str = Field(default="/webhook/deletar", description="Content deletion webhook")

    # Providers
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io", description="ElevenLabs API")
    fish_audio_base_url: str = Field(default="https://api.fish.audio", description="Fish Audio API")
    minimax_base_url: str = Field(default="https://api.minimax.chat", description="Minimax API")
    runware_base_url: str = Field(default="https://api.runware.ai", description="Runware API")
    openrouter_base_url: str = Field(default="https://openrouter.ai", description="OpenRouter API")
    youtube_base_url: str = Field(default="https://www.googleapis.com/youtube/v3", description="YouTube Data API v3")
    youtube_api_key: str | None = Field(default=None, description="YouTube Data API key")
    http_timeout: float = Field(default=30.0, description="Timeout in seconds for outbound HTTP calls")

    # Caption preview assets
    minio_url: str = Field(default="http://minio.automear.com/", description="Object storage base URL")
    preview_image_path: str = Field(default="canais/imagem_preview.jpg", description="Caption preview background")

    # Workflows
    debounce_seconds: float = Field(default=0.8, description="Delay before metadata auto-collection fires")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    @validator("environment", pre=True)
    def validate_environment(cls, v):
        """Normalize the environment name."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @validator("debug", pre=True, always=True)
    def set_debug_from_env(cls, v, values):
        """Development always runs in debug mode."""
        if values.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @validator("api_base_url", "minio_url")
    def strip_blank(cls, v):
        """Trim surrounding whitespace from base URLs."""
        return v.strip() if isinstance(v, str) else v

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def supabase_configured(self) -> bool:
        """Whether a server-side Supabase client can be built."""
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def supabase_auth_configured(self) -> bool:
        """Whether a client for dashboard sessions can be built."""
        return bool(self.supabase_url and self.supabase_anon_key)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ""
        extra = "ignore"


def get_settings() -> Settings:
    """Return the process settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
