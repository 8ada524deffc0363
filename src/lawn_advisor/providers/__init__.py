"""Weather data providers."""

from lawn_advisor.errors import RateLimitError, WeatherUnavailable
from lawn_advisor.providers.base import WeatherProvider
from lawn_advisor.providers.factory import create_provider
from lawn_advisor.providers.metno import MetNoProvider
from lawn_advisor.providers.openweathermap import OpenWeatherMapProvider

__all__ = [
    "WeatherProvider",
    "WeatherUnavailable",
    "RateLimitError",
    "MetNoProvider",
    "OpenWeatherMapProvider",
    "create_provider",
]
