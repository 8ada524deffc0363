"""MET Norway weather provider.

## API Documentation Summary
Source: https://api.met.no/weatherapi/locationforecast/2.0/documentation

## Endpoint
- Compact: https://api.met.no/weatherapi/locationforecast/2.0/compact?lat=60.10&lon=9.58

## Authentication
- No API key required
- MUST include User-Agent header with application identifier
- Prohibited/missing User-Agent returns 403 Forbidden

## Response Format (GeoJSON, trimmed)
```json
{
  "properties": {
    "meta": {"updated_at": "2024-01-01T12:00:00Z"},
    "timeseries": [
      {
        "time": "2024-01-01T12:00:00Z",
        "data": {
          "instant": {"details": {"air_temperature": 5.2}},
          "next_1_hours": {
            "summary": {"symbol_code": "lightrain"},
            "details": {"precipitation_amount": 0.4}
          },
          "next_6_hours": {...}
        }
      }
    ]
  }
}
```

The first timeseries entry is the current hour. Its `next_1_hours` summary
(falling back to `next_6_hours`) gives the condition.

### Symbol Codes -> WeatherCondition
| symbol_code | WeatherCondition |
|-------------|------------------|
| clearsky_* | CLEAR |
| fair_* / partlycloudy_* | PARTLY_CLOUDY |
| cloudy | CLOUDY |
| fog | FOG |
| lightrain*, lightrainshowers* | LIGHT_RAIN |
| rain*, rainshowers* | RAIN |
| heavyrain*, heavyrainshowers* | HEAVY_RAIN |
| *sleet* | SLEET |
| lightsnow* | LIGHT_SNOW |
| snow* | SNOW |
| heavysnow* | HEAVY_SNOW |
| *thunder | THUNDERSTORM |
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from lawn_advisor.errors import WeatherUnavailable
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.weather import WeatherCondition, WeatherReading
from lawn_advisor.providers.base import WeatherProvider


# Symbol code to WeatherCondition mapping
SYMBOL_TO_CONDITION: dict[str, WeatherCondition] = {
    "clearsky": WeatherCondition.CLEAR,
    "fair": WeatherCondition.PARTLY_CLOUDY,
    "partlycloudy": WeatherCondition.PARTLY_CLOUDY,
    "cloudy": WeatherCondition.CLOUDY,
    "fog": WeatherCondition.FOG,
    "lightrain": WeatherCondition.LIGHT_RAIN,
    "lightrainshowers": WeatherCondition.LIGHT_RAIN,
    "rain": WeatherCondition.RAIN,
    "rainshowers": WeatherCondition.RAIN,
    "heavyrain": WeatherCondition.HEAVY_RAIN,
    "heavyrainshowers": WeatherCondition.HEAVY_RAIN,
    "lightsleet": WeatherCondition.SLEET,
    "lightsleetshowers": WeatherCondition.SLEET,
    "sleet": WeatherCondition.SLEET,
    "sleetshowers": WeatherCondition.SLEET,
    "heavysleet": WeatherCondition.SLEET,
    "heavysleetshowers": WeatherCondition.SLEET,
    "lightsnow": WeatherCondition.LIGHT_SNOW,
    "lightsnowshowers": WeatherCondition.LIGHT_SNOW,
    "snow": WeatherCondition.SNOW,
    "snowshowers": WeatherCondition.SNOW,
    "heavysnow": WeatherCondition.HEAVY_SNOW,
    "heavysnowshowers": WeatherCondition.HEAVY_SNOW,
}


def _parse_symbol_code(symbol_code: str | None) -> WeatherCondition:
    """Parse MET.no symbol code to WeatherCondition.

    Symbol codes may have suffixes like _day, _night, _polartwilight.
    We strip these suffixes for mapping.
    """
    if not symbol_code:
        return WeatherCondition.UNKNOWN

    base_code = symbol_code.split("_")[0]

    # rainandthunder, lightsnowshowersandthunder, heavysleetandthunder, ...
    if base_code.endswith("thunder"):
        return WeatherCondition.THUNDERSTORM

    return SYMBOL_TO_CONDITION.get(base_code, WeatherCondition.UNKNOWN)


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class MetNoProvider(WeatherProvider):
    """MET Norway Locationforecast 2.0 provider.

    Free API from the Norwegian Meteorological Institute. No API key is
    required, but a User-Agent header identifying your application is
    mandatory.
    """

    name = "metno"
    base_url = "https://api.met.no/weatherapi/locationforecast/2.0"
    requires_api_key = False

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize MET Norway provider.

        Args:
            user_agent: User-Agent string (REQUIRED by MET.no TOS).
                       Should include app name and contact info.
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(user_agent=user_agent, timeout=timeout, transport=transport)

    async def get_current_conditions(self, coordinates: Coordinates) -> WeatherReading:
        """Get current conditions from MET Norway.

        Raises:
            WeatherUnavailable: If request fails or the forecast is empty
        """
        url = f"{self.base_url}/compact"

        # MET.no requires max 4 decimal places
        params = {
            "lat": round(coordinates.latitude, 4),
            "lon": round(coordinates.longitude, 4),
        }

        data = await self._fetch_json(url, params=params)
        return self._translate(data, coordinates)

    def _translate_response(
        self,
        response_data: dict[str, Any],
        coordinates: Coordinates,
    ) -> WeatherReading:
        """Translate MET.no response to a canonical reading.

        See module docstring for the symbol code mapping.
        """
        properties = response_data.get("properties") or {}
        timeseries = properties.get("timeseries") or []
        if not timeseries:
            raise WeatherUnavailable(
                "Forecast contains no timeseries entries",
                provider=self.name,
            )

        entry = timeseries[0]
        data = entry.get("data", {})

        # Prefer 1-hour period, fall back to 6-hour
        next_1h = data.get("next_1_hours", {})
        next_6h = data.get("next_6_hours", {})
        period_summary = next_1h.get("summary", next_6h.get("summary", {}))
        period_details = next_1h.get("details", next_6h.get("details", {}))

        symbol_code = period_summary.get("symbol_code")
        observed_at = _parse_time(entry.get("time")) or datetime.now(timezone.utc)

        return WeatherReading(
            condition=_parse_symbol_code(symbol_code),
            description=symbol_code,
            provider=self.name,
            location=coordinates,
            observed_at=observed_at,
            precipitation_mm=period_details.get("precipitation_amount"),
        )
