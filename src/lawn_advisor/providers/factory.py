"""Weather provider selection from settings."""

from __future__ import annotations

from lawn_advisor.config import Settings
from lawn_advisor.providers.base import WeatherProvider
from lawn_advisor.providers.metno import MetNoProvider
from lawn_advisor.providers.openweathermap import OpenWeatherMapProvider


def create_provider(settings: Settings) -> WeatherProvider:
    """Build the weather provider named by `settings.weather_provider`."""
    if settings.weather_provider == "openweathermap":
        return OpenWeatherMapProvider(
            api_key=settings.openweathermap_api_key,
            timeout=settings.weather_timeout_seconds,
        )
    if settings.weather_provider == "metno":
        return MetNoProvider(
            user_agent=settings.metno_user_agent,
            timeout=settings.weather_timeout_seconds,
        )
    raise ValueError(f"Unknown weather provider: {settings.weather_provider}")
