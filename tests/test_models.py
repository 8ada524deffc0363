"""Tests for domain models."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_plan, make_reading
from lawn_advisor.models.advisory import PlanOutcome, RunSummary
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.plan import LawnCarePlan
from lawn_advisor.models.weather import WeatherCondition


class TestCoordinates:
    """Tests for the Coordinates model."""

    def test_valid_coordinates(self):
        coords = Coordinates(latitude=40.7128, longitude=-74.0060)
        assert coords.to_tuple() == (40.7128, -74.0060)

    def test_boundary_values(self):
        assert Coordinates(latitude=90, longitude=180).latitude == 90
        assert Coordinates(latitude=-90, longitude=-180).longitude == -180

    def test_invalid_latitude(self):
        with pytest.raises(ValueError):
            Coordinates(latitude=91, longitude=0)

    def test_invalid_longitude(self):
        with pytest.raises(ValueError):
            Coordinates(latitude=0, longitude=-181)

    def test_from_string(self):
        coords = Coordinates.from_string("-33.8688, 151.2093")
        assert coords.latitude == pytest.approx(-33.8688)
        assert coords.longitude == pytest.approx(151.2093)

    def test_from_string_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid coordinate format"):
            Coordinates.from_string("not,valid")

        with pytest.raises(ValueError):
            Coordinates.from_string("40.7128")

    def test_str(self):
        assert str(Coordinates(latitude=1.5, longitude=-2.25)) == "1.5,-2.25"


class TestWeatherReading:
    @pytest.mark.parametrize(
        "condition,expected",
        [
            (WeatherCondition.RAIN, True),
            (WeatherCondition.DRIZZLE, True),
            (WeatherCondition.THUNDERSTORM, True),
            (WeatherCondition.HEAVY_SNOW, True),
            (WeatherCondition.HAIL, True),
            (WeatherCondition.CLEAR, False),
            (WeatherCondition.OVERCAST, False),
            (WeatherCondition.FOG, False),
            (WeatherCondition.WINDY, False),
            (WeatherCondition.UNKNOWN, False),
        ],
    )
    def test_is_precipitation(self, condition, expected):
        assert make_reading(condition).is_precipitation is expected

    def test_is_unknown(self):
        assert make_reading(WeatherCondition.UNKNOWN).is_unknown
        assert not make_reading(WeatherCondition.CLEAR).is_unknown


class TestLawnCarePlan:
    def test_email_is_trimmed(self):
        plan = make_plan(email="  owner@example.com ")
        assert plan.owner_email == "owner@example.com"

    def test_invalid_email(self):
        with pytest.raises(ValueError, match="Invalid notification target"):
            make_plan(email="not-an-address")

    def test_plan_is_frozen(self):
        plan = make_plan()
        with pytest.raises(ValueError):
            plan.owner_email = "other@example.com"

    def test_requires_location(self):
        with pytest.raises(ValueError):
            LawnCarePlan(id=uuid.uuid4(), owner_email="a@example.com")


class TestRunSummary:
    def test_counts(self):
        started = datetime(2024, 6, 15, 6, 0, tzinfo=timezone.utc)
        summary = RunSummary(
            started_at=started,
            finished_at=started + timedelta(seconds=12),
            outcomes=[
                PlanOutcome(plan_id=uuid.uuid4(), delivered=True),
                PlanOutcome(plan_id=uuid.uuid4(), stage="weather", error="down"),
                PlanOutcome(plan_id=uuid.uuid4(), stage="notify", error="bounced"),
            ],
        )

        assert summary.total == 3
        assert summary.succeeded == 1
        assert summary.failed == 2
        assert summary.notification_attempts == 2
        assert summary.duration_seconds == 12
        assert not summary.aborted
        assert [o.stage for o in summary.failures()] == ["weather", "notify"]

    def test_aborted(self):
        summary = RunSummary(
            started_at=datetime.now(timezone.utc), error="store unavailable"
        )
        assert summary.aborted
        assert summary.total == 0
        assert summary.duration_seconds is None
