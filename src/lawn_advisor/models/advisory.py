"""Advisory decision and run outcome models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from lawn_advisor.models.weather import WeatherCondition


class Recommendation(str, Enum):
    """What the owner should do with their lawn today."""

    SKIP_WATERING = "skip_watering"
    WATER_NOW = "water_now"


class AdvisoryDecision(BaseModel):
    """A watering recommendation and the message bound to it."""

    model_config = {"frozen": True}

    recommendation: Recommendation
    subject: str = Field(..., description="Notification subject line")
    message: str = Field(..., description="Human-readable advisory text")
    condition: WeatherCondition = Field(
        ..., description="Weather condition the decision was derived from"
    )


class PlanOutcome(BaseModel):
    """Result of processing a single plan during a run."""

    plan_id: uuid.UUID
    decision: AdvisoryDecision | None = None
    delivered: bool = False
    stage: Literal["weather", "notify"] | None = Field(
        default=None, description="Pipeline stage that failed, if any"
    )
    error: str | None = None

    @property
    def failed(self) -> bool:
        return not self.delivered


class RunSummary(BaseModel):
    """Summary of one advisory run, handed to the observability sink."""

    run_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    started_at: datetime
    finished_at: datetime | None = None
    outcomes: list[PlanOutcome] = Field(default_factory=list)
    error: str | None = Field(
        default=None, description="Run-level failure that aborted the whole pass"
    )

    @property
    def aborted(self) -> bool:
        return self.error is not None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.delivered)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def notification_attempts(self) -> int:
        """Plans that got as far as the notification step."""
        return sum(1 for o in self.outcomes if o.delivered or o.stage == "notify")

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def failures(self) -> list[PlanOutcome]:
        return [o for o in self.outcomes if o.failed]
