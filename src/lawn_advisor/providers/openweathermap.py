"""OpenWeatherMap current weather provider.

## Endpoint
- https://api.openweathermap.org/data/2.5/weather?lat={lat}&lon={lon}&appid={key}

## Authentication
- API key in the `appid` query parameter

## Response Format (trimmed)
```json
{
  "weather": [{"id": 500, "main": "Rain", "description": "light rain"}],
  "rain": {"1h": 0.25},
  "dt": 1718445600
}
```

### Condition codes -> WeatherCondition
| id | WeatherCondition |
|----|------------------|
| 2xx | THUNDERSTORM |
| 3xx | DRIZZLE |
| 500, 520 | LIGHT_RAIN |
| 501, 521, 531 | RAIN |
| 502-504, 522 | HEAVY_RAIN |
| 511, 611-616 | SLEET |
| 600, 620 | LIGHT_SNOW |
| 601, 621 | SNOW |
| 602, 622 | HEAVY_SNOW |
| 771, 781 | WINDY |
| other 7xx | FOG |
| 800 | CLEAR |
| 801, 802 | PARTLY_CLOUDY |
| 803 | CLOUDY |
| 804 | OVERCAST |

When the id is missing the `main` group name is used instead; any group
containing "rain" counts as RAIN.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from lawn_advisor.errors import WeatherUnavailable
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.weather import WeatherCondition, WeatherReading
from lawn_advisor.providers.base import WeatherProvider


CODE_TO_CONDITION: dict[int, WeatherCondition] = {
    500: WeatherCondition.LIGHT_RAIN,
    501: WeatherCondition.RAIN,
    502: WeatherCondition.HEAVY_RAIN,
    503: WeatherCondition.HEAVY_RAIN,
    504: WeatherCondition.HEAVY_RAIN,
    511: WeatherCondition.SLEET,
    520: WeatherCondition.LIGHT_RAIN,
    521: WeatherCondition.RAIN,
    522: WeatherCondition.HEAVY_RAIN,
    531: WeatherCondition.RAIN,
    600: WeatherCondition.LIGHT_SNOW,
    601: WeatherCondition.SNOW,
    602: WeatherCondition.HEAVY_SNOW,
    620: WeatherCondition.LIGHT_SNOW,
    621: WeatherCondition.SNOW,
    622: WeatherCondition.HEAVY_SNOW,
    771: WeatherCondition.WINDY,
    781: WeatherCondition.WINDY,
    800: WeatherCondition.CLEAR,
    801: WeatherCondition.PARTLY_CLOUDY,
    802: WeatherCondition.PARTLY_CLOUDY,
    803: WeatherCondition.CLOUDY,
    804: WeatherCondition.OVERCAST,
}

MAIN_TO_CONDITION: dict[str, WeatherCondition] = {
    "thunderstorm": WeatherCondition.THUNDERSTORM,
    "drizzle": WeatherCondition.DRIZZLE,
    "snow": WeatherCondition.SNOW,
    "clear": WeatherCondition.CLEAR,
    "clouds": WeatherCondition.CLOUDY,
    "mist": WeatherCondition.FOG,
    "fog": WeatherCondition.FOG,
    "haze": WeatherCondition.FOG,
    "squall": WeatherCondition.WINDY,
    "tornado": WeatherCondition.WINDY,
}


def _parse_condition(code: int | None, main: str | None) -> WeatherCondition:
    """Map an OpenWeatherMap condition id (or group name) to a condition."""
    if code is not None:
        if code in CODE_TO_CONDITION:
            return CODE_TO_CONDITION[code]
        group = code // 100
        if group == 2:
            return WeatherCondition.THUNDERSTORM
        if group == 3:
            return WeatherCondition.DRIZZLE
        if group == 5:
            return WeatherCondition.RAIN
        if 611 <= code <= 616:
            return WeatherCondition.SLEET
        if group == 6:
            return WeatherCondition.SNOW
        if group == 7:
            return WeatherCondition.FOG

    if main:
        main_lower = main.lower()
        if "rain" in main_lower:
            return WeatherCondition.RAIN
        return MAIN_TO_CONDITION.get(main_lower, WeatherCondition.UNKNOWN)

    return WeatherCondition.UNKNOWN


class OpenWeatherMapProvider(WeatherProvider):
    """OpenWeatherMap current weather provider (requires an API key)."""

    name = "openweathermap"
    base_url = "https://api.openweathermap.org/data/2.5"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, transport=transport)

    async def get_current_conditions(self, coordinates: Coordinates) -> WeatherReading:
        """Get current conditions from OpenWeatherMap."""
        params = {
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "appid": self.api_key,
        }
        data = await self._fetch_json(f"{self.base_url}/weather", params=params)
        return self._translate(data, coordinates)

    def _translate_response(
        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherReading:
        weather = response_data.get("weather") or []
        if not weather:
            raise WeatherUnavailable(
                "Response contains no weather entries",
                provider=self.name,
            )

        primary = weather[0]
        code = primary.get("id")
        main = primary.get("main")

        timestamp = response_data.get("dt")
        if isinstance(timestamp, (int, float)):
            observed_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        else:
            observed_at = datetime.now(timezone.utc)

        rain_mm = (response_data.get("rain") or {}).get("1h")
        snow_mm = (response_data.get("snow") or {}).get("1h")
        precipitation_mm = None
        if rain_mm is not None or snow_mm is not None:
            precipitation_mm = (rain_mm or 0.0) + (snow_mm or 0.0)

        return WeatherReading(
            condition=_parse_condition(code if isinstance(code, int) else None, main),
            description=primary.get("description") or main,
            provider=self.name,
            location=coordinates,
            observed_at=observed_at,
            precipitation_mm=precipitation_mm,
        )
