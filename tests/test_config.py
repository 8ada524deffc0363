"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from lawn_advisor.config import get_settings, get_settings_uncached


class TestSettings:
    def test_defaults(self):
        settings = get_settings_uncached()
        assert settings.weather_provider == "metno"
        assert settings.schedule_hour == 6
        assert settings.schedule_minute == 0
        assert settings.unknown_weather_recommendation == "water_now"
        assert settings.max_concurrency == 4

    def test_postgres_url_uses_asyncpg(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/lawn")
        settings = get_settings_uncached()
        assert settings.database_url == "postgresql+asyncpg://u:p@localhost/lawn"
        assert not settings.is_sqlite

    def test_sqlite_detected(self):
        assert get_settings_uncached().is_sqlite

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            get_settings_uncached()

    def test_openweathermap_requires_key(self, monkeypatch):
        monkeypatch.setenv("WEATHER_PROVIDER", "openweathermap")
        monkeypatch.delenv("OPENWEATHERMAP_API_KEY", raising=False)
        with pytest.raises(ValidationError, match="OPENWEATHERMAP_API_KEY"):
            get_settings_uncached()

    def test_invalid_schedule_hour(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_HOUR", "25")
        with pytest.raises(ValidationError):
            get_settings_uncached()

    def test_invalid_unknown_policy(self, monkeypatch):
        monkeypatch.setenv("UNKNOWN_WEATHER_RECOMMENDATION", "maybe")
        with pytest.raises(ValidationError):
            get_settings_uncached()

    def test_smtp_configured(self, monkeypatch):
        monkeypatch.delenv("SMTP_HOST", raising=False)
        assert not get_settings_uncached().smtp_configured
        monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
        assert get_settings_uncached().smtp_configured

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
