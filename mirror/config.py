"""
Application configuration. Loads from environment variables.
Secrets and API keys must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache
from typing import Optional


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Magic Mirror"
    debug: bool = False

    # Database: SQLite file by default, postgresql+psycopg:// also supported
    database_url: str = "sqlite:///./mirror.db"
    db_connect_timeout: int = 10  # seconds
    auto_create_tables: bool = True

    # Security
    secret_key: str = ""

    # Deployment identity; unset means a development server
    build_time: str = "development"

    # Display locale
    timezone: str = "America/Indiana/Indianapolis"

    # AI summary (OpenRouter speaks the OpenAI chat completions protocol)
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "anthropic/claude-3-haiku"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    site_url: str = "http://localhost:8000"
    llm_timeout: float = 20.0
    llm_max_retries: int = 2
    summary_timeout: float = 30.0  # seconds, whole briefing call including retries

    # External data sources
    adapter_timeout: float = 10.0  # seconds, per outbound request
    tomtom_api_key: Optional[str] = None
    calendar_url_primary: Optional[str] = None
    calendar_url_secondary: Optional[str] = None

    # Spotify
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    spotify_refresh_token: Optional[str] = None
    spotify_redirect_uri: str = "http://127.0.0.1:8000/api/spotify/callback"

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        raw_url = os.getenv("DATABASE_URL", self.database_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))
        self.auto_create_tables = _env_flag(
            "AUTO_CREATE_TABLES", self.database_url.startswith("sqlite")
        )

        self.secret_key = os.getenv("SECRET_KEY", "")
        self.build_time = _env_optional("BUILD_TIME") or self.build_time
        self.timezone = os.getenv("MIRROR_TIMEZONE", self.timezone)

        self.openrouter_api_key = _env_optional("OPENROUTER_API_KEY")
        self.openrouter_model = os.getenv("OPENROUTER_MODEL", self.openrouter_model)
        self.openrouter_base_url = os.getenv("OPENROUTER_BASE_URL", self.openrouter_base_url)
        self.site_url = os.getenv("SITE_URL", self.site_url)
        self.llm_timeout = float(os.getenv("LLM_TIMEOUT", str(self.llm_timeout)))
        self.llm_max_retries = int(os.getenv("LLM_MAX_RETRIES", str(self.llm_max_retries)))
        self.summary_timeout = float(os.getenv("SUMMARY_TIMEOUT", str(self.summary_timeout)))

        self.adapter_timeout = float(os.getenv("ADAPTER_TIMEOUT", str(self.adapter_timeout)))
        self.tomtom_api_key = _env_optional("TOMTOM_API_KEY")
        self.calendar_url_primary = _env_optional("CALENDAR_URL_PRIMARY")
        self.calendar_url_secondary = _env_optional("CALENDAR_URL_SECONDARY")

        self.spotify_client_id = _env_optional("SPOTIFY_CLIENT_ID")
        self.spotify_client_secret = _env_optional("SPOTIFY_CLIENT_SECRET")
        self.spotify_refresh_token = _env_optional("SPOTIFY_REFRESH_TOKEN")
        self.spotify_redirect_uri = os.getenv("SPOTIFY_REDIRECT_URI", self.spotify_redirect_uri)
