"""Pytest fixtures for lawn advisor tests.

This module provides test fixtures that ensure:
1. No external API calls are made (weather providers, SMTP)
2. No real database connections in unit tests
3. Isolated test environment with controlled configuration
"""

import os
import uuid
from datetime import datetime, timezone

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NOTIFICATIONS_DRY_RUN", "true")

from lawn_advisor.advisory.observability import OutcomeSink
from lawn_advisor.errors import DeliveryFailed, WeatherUnavailable
from lawn_advisor.models.advisory import RunSummary
from lawn_advisor.models.location import Coordinates
from lawn_advisor.models.plan import LawnCarePlan
from lawn_advisor.models.weather import WeatherCondition, WeatherReading
from lawn_advisor.notifications.base import DeliveryReceipt, NotificationSender
from lawn_advisor.providers.base import WeatherProvider


# =============================================================================
# Fake collaborators
# =============================================================================


def make_reading(
    condition: WeatherCondition,
    latitude: float = 40.7128,
    longitude: float = -74.0060,
) -> WeatherReading:
    return WeatherReading(
        condition=condition,
        provider="fake",
        location=Coordinates(latitude=latitude, longitude=longitude),
        observed_at=datetime(2024, 6, 15, 6, 0, tzinfo=timezone.utc),
    )


def make_plan(
    latitude: float = 40.7128,
    longitude: float = -74.0060,
    email: str = "owner@example.com",
    name: str | None = None,
    owner_name: str | None = None,
) -> LawnCarePlan:
    return LawnCarePlan(
        id=uuid.uuid4(),
        owner_email=email,
        owner_name=owner_name,
        location=Coordinates(latitude=latitude, longitude=longitude),
        name=name,
    )


class FakeWeatherProvider(WeatherProvider):
    """Returns canned conditions per (lat, lon); failures can be injected.

    Values in `conditions` may be a WeatherCondition or an exception instance
    to raise for that location.
    """

    name = "fake"
    base_url = "http://weather.invalid"

    def __init__(self, conditions=None, default=WeatherCondition.CLEAR):
        super().__init__()
        self.conditions = conditions or {}
        self.default = default
        self.calls: list[tuple[float, float]] = []

    async def get_current_conditions(self, coordinates):
        self.calls.append(coordinates.to_tuple())
        value = self.conditions.get(coordinates.to_tuple(), self.default)
        if isinstance(value, BaseException):
            raise value
        return make_reading(value, coordinates.latitude, coordinates.longitude)

    def _translate_response(self, response_data, coordinates):
        raise NotImplementedError


class RecordingSender(NotificationSender):
    """Records every send; targets in `failing` raise DeliveryFailed."""

    name = "recording"

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.attempts: list[tuple[str, str, str]] = []
        self.sent: list[tuple[str, str, str]] = []

    async def send(self, target, subject, body):
        self.attempts.append((target, subject, body))
        if target in self.failing:
            raise DeliveryFailed("mailbox unavailable", target=target)
        self.sent.append((target, subject, body))
        return DeliveryReceipt(target=target, sent_at=datetime.now(timezone.utc))


class RecordingSink(OutcomeSink):
    def __init__(self):
        self.summaries: list[RunSummary] = []

    async def record_run_outcome(self, summary):
        self.summaries.append(summary)


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from lawn_advisor.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_weather() -> FakeWeatherProvider:
    return FakeWeatherProvider()


@pytest.fixture
def recording_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sample_coordinates() -> Coordinates:
    """Sample coordinates for New York City."""
    return Coordinates(latitude=40.7128, longitude=-74.0060)


@pytest.fixture
def rain_reading() -> WeatherReading:
    return make_reading(WeatherCondition.RAIN)


@pytest.fixture
def clear_reading() -> WeatherReading:
    return make_reading(WeatherCondition.CLEAR)


@pytest.fixture
def three_plans() -> list[LawnCarePlan]:
    """Three plans at distinct locations with distinct owners."""
    return [
        make_plan(latitude=10.0, longitude=10.0, email="one@example.com"),
        make_plan(latitude=20.0, longitude=20.0, email="two@example.com"),
        make_plan(latitude=30.0, longitude=30.0, email="three@example.com"),
    ]
