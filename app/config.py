# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Third-party keys (ElevenLabs, Twilio, Deepgram) are optional at startup so
# the API can boot for CRUD work; the services that need them raise a
# ConfigurationError when they are missing.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker and realtime events"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------
    # Used by the voice reminder parser (tool-call extraction)

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for the reminder parser"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o",
        description="Model used for reminder extraction (must support tool calls)"
    )

    PARSER_TEMPERATURE: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for the reminder parser"
    )

    # -------------------------------------------------------------------------
    # Speech Synthesis (ElevenLabs)
    # -------------------------------------------------------------------------

    ELEVENLABS_API_KEY: str = Field(
        default="",
        description="ElevenLabs API key for text-to-speech and voice cloning"
    )

    ELEVENLABS_MODEL_ID: str = Field(
        default="eleven_turbo_v2_5",
        description="ElevenLabs TTS model"
    )

    # -------------------------------------------------------------------------
    # Telephony (Twilio)
    # -------------------------------------------------------------------------

    TWILIO_ACCOUNT_SID: str = Field(default="", description="Twilio account SID")
    TWILIO_AUTH_TOKEN: str = Field(default="", description="Twilio auth token")
    TWILIO_PHONE_NUMBER: str = Field(
        default="",
        description="Caller ID for outbound reminder calls (E.164)"
    )

    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Externally reachable base URL, used for Twilio status callbacks"
    )

    AUDIO_SIGNED_URL_TTL: int = Field(
        default=3600,
        ge=60,
        description="Lifetime in seconds of the signed URL Twilio plays"
    )

    # -------------------------------------------------------------------------
    # Transcription (Deepgram)
    # -------------------------------------------------------------------------

    DEEPGRAM_API_KEY: str = Field(
        default="",
        description="Deepgram API key for streaming transcription"
    )

    DEEPGRAM_MODEL: str = Field(default="nova-2", description="Deepgram model")

    # -------------------------------------------------------------------------
    # Scheduler
    # -------------------------------------------------------------------------

    CRON_SECRET: str = Field(
        default="",
        description="Shared secret accepted in X-Cron-Secret for the sweep endpoint"
    )

    REMINDER_WINDOW_MINUTES: int = Field(
        default=2,
        ge=1,
        le=60,
        description="How far back the sweep looks for due reminders"
    )

    DEFAULT_MAX_OCCURRENCES: int = Field(
        default=30,
        ge=1,
        description="Cap on repeats for reminders without an explicit max"
    )

    SWEEP_INTERVAL_SECONDS: int = Field(
        default=60,
        ge=10,
        description="Celery beat interval for the due-reminder sweep"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the API server to")

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    MAX_VOICE_SAMPLE_MB: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum voice clone sample size in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://yaad.app" -> ["http://localhost:5173", "https://yaad.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_voice_sample_bytes(self) -> int:
        """Convert MB to bytes for voice sample validation."""
        return self.MAX_VOICE_SAMPLE_MB * 1024 * 1024

    @property
    def status_callback_url(self) -> str:
        """URL Twilio posts call outcomes to."""
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}/api/v1/calls/status-callback"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
