"""Domain models for lawn watering advisories."""

from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.weather import (
    PRECIPITATION_CONDITIONS,
    WeatherCondition,
    WeatherReading,
)
from lawn_advisor.models.plan import LawnCarePlan
from lawn_advisor.models.advisory import (
    AdvisoryDecision,
    PlanOutcome,
    Recommendation,
    RunSummary,
)

__all__ = [
    # Location
    "Coordinates",
    # Weather
    "PRECIPITATION_CONDITIONS",
    "WeatherCondition",
    "WeatherReading",
    # Plan
    "LawnCarePlan",
    # Advisory
    "AdvisoryDecision",
    "PlanOutcome",
    "Recommendation",
    "RunSummary",
]
