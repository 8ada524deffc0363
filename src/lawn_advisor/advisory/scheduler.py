"""Daily trigger for advisory runs.

The scheduler is a small state machine:

```
          trigger fires                 run finishes (ok or error)
  IDLE ─────────────────► RUNNING ─────────────────────────────► IDLE
    │                        │
    └──── stop() ────────────┴──► STOPPED
```

A trigger that fires while a run is in flight is dropped, not queued, so an
owner is never notified twice for the same day. `stop()` prevents future
triggers immediately but lets an in-flight run finish; `wait_idle()` waits for
it.

Timing comes from an APScheduler `AsyncIOScheduler` with a cron trigger. The
timer only schedules `trigger()` on the event loop, so `stop()` stays
responsive during a run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from lawn_advisor.config import Settings
from lawn_advisor.errors import SchedulerError, StoreUnavailable

logger = logging.getLogger(__name__)

JOB_ID = "daily-watering-check"


class SchedulerState(str, Enum):
    """Lifecycle state of the advisory scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class DailyCadence:
    """Fixed wall-clock time at which the daily run fires."""

    hour: int = 6
    minute: int = 0
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be 0-59, got {self.minute}")

    @classmethod
    def from_settings(cls, settings: Settings) -> DailyCadence:
        return cls(
            hour=settings.schedule_hour,
            minute=settings.schedule_minute,
            timezone=settings.schedule_timezone,
        )

    def to_trigger(self) -> CronTrigger:
        return CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone)

    def __str__(self) -> str:
        return f"daily at {self.hour:02d}:{self.minute:02d} {self.timezone}"


class AdvisoryScheduler:
    """Fires `run_fn` once per day and never runs it concurrently.

    Example:
        ```python
        scheduler = AdvisoryScheduler(runner.run, DailyCadence(hour=6))
        scheduler.start()
        ...
        scheduler.stop()
        await scheduler.wait_idle()
        ```
    """

    def __init__(
        self,
        run_fn: Callable[[], Awaitable[Any]],
        cadence: DailyCadence | None = None,
    ):
        self.run_fn = run_fn
        self.cadence = cadence or DailyCadence()
        self._scheduler: AsyncIOScheduler | None = None
        self._running = False
        self._stopped = False
        self._idle = asyncio.Event()
        self._idle.set()

        self.runs_started = 0
        self.runs_dropped = 0

    @property
    def state(self) -> SchedulerState:
        if self._stopped:
            return SchedulerState.STOPPED
        if self._running:
            return SchedulerState.RUNNING
        return SchedulerState.IDLE

    @property
    def is_running(self) -> bool:
        """Whether a run is in flight (also true while stopping)."""
        return self._running

    @property
    def next_run_time(self) -> datetime | None:
        """When the timer fires next, or None when not started or stopped."""
        if self._scheduler is None or self._stopped:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        """Begin triggering runs on the cadence.

        Must be called from within a running event loop.

        Raises:
            SchedulerError: If the scheduler was already started or stopped
        """
        if self._stopped:
            raise SchedulerError("Scheduler has been stopped and cannot be restarted")
        if self._scheduler is not None:
            raise SchedulerError("Scheduler is already started")

        self._scheduler = AsyncIOScheduler(timezone=self.cadence.timezone)
        self._scheduler.add_job(
            self.trigger,
            trigger=self.cadence.to_trigger(),
            id=JOB_ID,
            name="Daily watering check",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60 * 60,
        )
        self._scheduler.start()
        logger.info(f"Advisory scheduler started ({self.cadence}), next run at {self.next_run_time}")

    async def trigger(self) -> Any:
        """Run once unless a run is already in flight or the scheduler is stopped.

        Returns:
            The run's result, or None if the trigger was dropped or the run failed
        """
        if self._stopped:
            logger.debug("Trigger ignored: scheduler is stopped")
            return None
        if self._running:
            self.runs_dropped += 1
            logger.warning("Advisory run already in progress; dropping this trigger")
            return None

        self._running = True
        self._idle.clear()
        self.runs_started += 1
        try:
            return await self.run_fn()
        except StoreUnavailable as e:
            logger.error(f"Advisory run aborted, will retry at next window: {e}")
        except Exception:
            logger.exception("Advisory run failed, will retry at next window")
        finally:
            self._running = False
            self._idle.set()
        return None

    def stop(self) -> None:
        """Stop future triggers. An in-flight run is allowed to finish."""
        if self._stopped:
            return
        self._stopped = True
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info(
            "Advisory scheduler stopped"
            + (" (waiting for in-flight run)" if self._running else "")
        )

    async def wait_idle(self) -> None:
        """Wait until no run is in flight."""
        await self._idle.wait()
