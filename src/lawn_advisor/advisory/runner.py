"""Advisory runner: one full pass over every active lawn plan.

## Pipeline

```
PlanStore.list_active_plans()          run-level: StoreUnavailable aborts the pass
    │
    ├── plan 1: weather ─► evaluate ─► notify
    ├── plan 2: weather ─► evaluate ─► notify      plan-level: WeatherUnavailable /
    └── plan N: ...                                DeliveryFailed recorded, pass continues
    │
OutcomeSink.record_run_outcome(summary)  best-effort
```

Plans are processed concurrently, at most `max_concurrency` at a time. Each
external call is bounded by its own timeout; a timeout counts as a failure of
that call. Failed notifications are not retried within the same run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from lawn_advisor.advisory.evaluator import AdvisoryEvaluator, render_message
from lawn_advisor.advisory.observability import LoggingOutcomeSink, OutcomeSink
from lawn_advisor.config import Settings
from lawn_advisor.database.store import PlanStore
from lawn_advisor.errors import DeliveryFailed, StoreUnavailable, WeatherUnavailable
from lawn_advisor.models.advisory import (
    AdvisoryDecision,
    PlanOutcome,
    Recommendation,
    RunSummary,
)
from lawn_advisor.models.plan import LawnCarePlan
from lawn_advisor.models.weather import WeatherReading
from lawn_advisor.notifications.base import NotificationSender
from lawn_advisor.providers.base import WeatherProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RunnerTimeouts:
    """Per-call time limits in seconds."""

    store: float = 30.0
    weather: float = 20.0
    notify: float = 30.0
    sink: float = 5.0


async def _bounded(
    awaitable: Awaitable[T],
    timeout: float,
    on_timeout: Callable[[], Exception],
) -> T:
    """Await with a time limit, raising `on_timeout()` when it expires."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise on_timeout() from e


class AdvisoryRunner:
    """Runs one complete advisory pass with per-plan failure isolation."""

    def __init__(
        self,
        store: PlanStore,
        weather: WeatherProvider,
        sender: NotificationSender,
        sink: OutcomeSink | None = None,
        evaluator: Callable[[WeatherReading], AdvisoryDecision] | None = None,
        max_concurrency: int = 4,
        timeouts: RunnerTimeouts | None = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.weather = weather
        self.sender = sender
        self.sink = sink or LoggingOutcomeSink()
        self.evaluator = evaluator or AdvisoryEvaluator()
        self.max_concurrency = max_concurrency
        self.timeouts = timeouts or RunnerTimeouts()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: PlanStore,
        weather: WeatherProvider,
        sender: NotificationSender,
        sink: OutcomeSink | None = None,
    ) -> AdvisoryRunner:
        """Build a runner using the concurrency, timeout and policy settings."""
        return cls(
            store=store,
            weather=weather,
            sender=sender,
            sink=sink,
            evaluator=AdvisoryEvaluator(
                Recommendation(settings.unknown_weather_recommendation)
            ),
            max_concurrency=settings.max_concurrency,
            timeouts=RunnerTimeouts(
                store=settings.store_timeout_seconds,
                weather=settings.weather_timeout_seconds,
                notify=settings.notify_timeout_seconds,
                sink=settings.sink_timeout_seconds,
            ),
        )

    async def run(self) -> RunSummary:
        """Execute one advisory pass.

        Returns:
            RunSummary with one outcome per plan

        Raises:
            StoreUnavailable: If the plan set could not be loaded. The aborted
                run is still recorded to the sink before raising.
        """
        summary = RunSummary(started_at=datetime.now(timezone.utc))
        logger.info(f"Running daily watering check (run {summary.run_id})")

        try:
            plans = await _bounded(
                self.store.list_active_plans(),
                self.timeouts.store,
                lambda: StoreUnavailable(
                    f"Plan store timed out after {self.timeouts.store}s"
                ),
            )
        except StoreUnavailable as e:
            summary.error = str(e)
            summary.finished_at = datetime.now(timezone.utc)
            await self._record(summary)
            raise

        logger.info(f"Evaluating {len(plans)} lawn plans")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def process_with_limit(plan: LawnCarePlan) -> PlanOutcome:
            async with semaphore:
                return await self.process_plan(plan)

        summary.outcomes = list(
            await asyncio.gather(*(process_with_limit(plan) for plan in plans))
        )
        summary.finished_at = datetime.now(timezone.utc)

        logger.info(
            f"Daily watering check complete: {summary.succeeded} notified, "
            f"{summary.failed} failed in {summary.duration_seconds:.1f}s"
        )
        await self._record(summary)
        return summary

    async def process_plan(self, plan: LawnCarePlan) -> PlanOutcome:
        """Process one plan, converting any failure into an outcome."""
        try:
            return await self._process_plan(plan)
        except Exception as e:
            logger.exception(f"Unexpected error processing lawn plan {plan.id}")
            return PlanOutcome(plan_id=plan.id, error=f"{type(e).__name__}: {e}")

    async def _process_plan(self, plan: LawnCarePlan) -> PlanOutcome:
        latitude, longitude = plan.location.to_tuple()

        try:
            reading = await _bounded(
                self.weather.current_conditions(latitude, longitude),
                self.timeouts.weather,
                lambda: WeatherUnavailable(
                    f"Weather request timed out after {self.timeouts.weather}s",
                    provider=getattr(self.weather, "name", "unknown"),
                ),
            )
        except WeatherUnavailable as e:
            retry_after = getattr(e, "retry_after", None)
            if retry_after is not None:
                logger.warning(
                    f"No weather for lawn plan {plan.id}: {e} (retry after {retry_after}s)"
                )
            else:
                logger.warning(f"No weather for lawn plan {plan.id}: {e}")
            return PlanOutcome(plan_id=plan.id, stage="weather", error=str(e))

        decision = self.evaluator(reading)

        try:
            await _bounded(
                self.sender.send(
                    plan.owner_email, decision.subject, render_message(decision, plan)
                ),
                self.timeouts.notify,
                lambda: DeliveryFailed(
                    f"Notification timed out after {self.timeouts.notify}s",
                    target=plan.owner_email,
                ),
            )
        except DeliveryFailed as e:
            logger.warning(f"Could not notify owner of lawn plan {plan.id}: {e}")
            return PlanOutcome(
                plan_id=plan.id, decision=decision, stage="notify", error=str(e)
            )

        if decision.recommendation == Recommendation.SKIP_WATERING:
            logger.info(
                f"Skipping watering for lawn plan {plan.id} due to {reading.condition.value}."
            )
        else:
            logger.info(f"Recommend watering lawn plan {plan.id}.")

        return PlanOutcome(plan_id=plan.id, decision=decision, delivered=True)

    async def _record(self, summary: RunSummary) -> None:
        """Hand the summary to the sink without letting it affect the run."""
        try:
            await asyncio.wait_for(
                self.sink.record_run_outcome(summary), timeout=self.timeouts.sink
            )
        except Exception:
            logger.exception(f"Failed to record outcome of run {summary.run_id}")
