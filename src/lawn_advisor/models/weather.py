"""Weather reading models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from lawn_advisor.models.location import Coordinates


class WeatherCondition(str, Enum):
    """General weather condition categories."""

    CLEAR = "clear"
    PARTLY_CLOUDY = "partly_cloudy"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    FOG = "fog"
    LIGHT_RAIN = "light_rain"
    RAIN = "rain"
    HEAVY_RAIN = "heavy_rain"
    DRIZZLE = "drizzle"
    THUNDERSTORM = "thunderstorm"
    SNOW = "snow"
    LIGHT_SNOW = "light_snow"
    HEAVY_SNOW = "heavy_snow"
    SLEET = "sleet"
    HAIL = "hail"
    WINDY = "windy"
    UNKNOWN = "unknown"


PRECIPITATION_CONDITIONS: frozenset[WeatherCondition] = frozenset(
    {
        WeatherCondition.LIGHT_RAIN,
        WeatherCondition.RAIN,
        WeatherCondition.HEAVY_RAIN,
        WeatherCondition.DRIZZLE,
        WeatherCondition.THUNDERSTORM,
        WeatherCondition.SNOW,
        WeatherCondition.LIGHT_SNOW,
        WeatherCondition.HEAVY_SNOW,
        WeatherCondition.SLEET,
        WeatherCondition.HAIL,
    }
)


class WeatherReading(BaseModel):
    """Current conditions at a location, fetched fresh for one evaluation."""

    condition: WeatherCondition = Field(
        default=WeatherCondition.UNKNOWN, description="General weather condition"
    )
    description: str | None = Field(
        default=None, description="Provider's own description of the conditions"
    )
    provider: str = Field(..., description="Weather data provider name")
    location: Coordinates = Field(..., description="Location of the reading")
    observed_at: datetime = Field(..., description="When the reading was valid")
    precipitation_mm: float | None = Field(
        default=None, ge=0, description="Expected precipitation over the next hour (mm)"
    )

    @property
    def is_precipitation(self) -> bool:
        """Whether the condition means water is falling from the sky."""
        return self.condition in PRECIPITATION_CONDITIONS

    @property
    def is_unknown(self) -> bool:
        return self.condition == WeatherCondition.UNKNOWN
