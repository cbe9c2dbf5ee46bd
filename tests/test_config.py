"""
Configuration tests.
"""

import pytest

from mirror.config import Settings, get_settings


def test_get_settings_returns_settings() -> None:
    """get_settings returns a cached Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)
    assert get_settings() is settings
    assert settings.app_name == "Magic Mirror"


def test_blank_credentials_read_as_unset() -> None:
    settings = Settings()
    assert settings.openrouter_api_key is None
    assert settings.tomtom_api_key is None
    assert settings.spotify_client_id is None
    assert settings.build_time == "development"


def test_postgres_url_uses_psycopg_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://mirror:pw@db/mirror")
    monkeypatch.delenv("AUTO_CREATE_TABLES", raising=False)
    settings = Settings()
    assert settings.database_url == "postgresql+psycopg://mirror:pw@db/mirror"
    assert settings.auto_create_tables is False


def test_sqlite_creates_tables_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./mirror.db")
    monkeypatch.delenv("AUTO_CREATE_TABLES", raising=False)
    assert Settings().auto_create_tables is True


def test_values_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILD_TIME", "2024-06-01T12:00:00Z")
    monkeypatch.setenv("ADAPTER_TIMEOUT", "3.5")
    monkeypatch.setenv("SUMMARY_TIMEOUT", "12")
    monkeypatch.setenv("MIRROR_TIMEZONE", "Europe/Dublin")
    monkeypatch.setenv("OPENROUTER_API_KEY", "  sk-test  ")
    settings = Settings()
    assert settings.build_time == "2024-06-01T12:00:00Z"
    assert settings.adapter_timeout == 3.5
    assert settings.summary_timeout == 12.0
    assert settings.timezone == "Europe/Dublin"
    assert settings.openrouter_api_key == "sk-test"
