"""Tests for the daily advisory scheduler."""

import asyncio

import pytest

from lawn_advisor.advisory.scheduler import (
    JOB_ID,
    AdvisoryScheduler,
    DailyCadence,
    SchedulerState,
)
from lawn_advisor.config import get_settings_uncached
from lawn_advisor.errors import SchedulerError, StoreUnavailable


class GatedRun:
    """A run function that blocks until released, counting executions."""

    def __init__(self):
        self.calls = 0
        self.concurrent = 0
        self.peak = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        self.concurrent += 1
        self.peak = max(self.peak, self.concurrent)
        self.started.set()
        try:
            await self.release.wait()
            return "done"
        finally:
            self.concurrent -= 1


class TestDailyCadence:
    def test_default_is_six_am(self):
        cadence = DailyCadence()
        assert (cadence.hour, cadence.minute) == (6, 0)

    def test_invalid_hour(self):
        with pytest.raises(ValueError):
            DailyCadence(hour=24)

    def test_invalid_minute(self):
        with pytest.raises(ValueError):
            DailyCadence(minute=60)

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_HOUR", "5")
        monkeypatch.setenv("SCHEDULE_MINUTE", "30")
        monkeypatch.setenv("SCHEDULE_TIMEZONE", "America/New_York")
        cadence = DailyCadence.from_settings(get_settings_uncached())
        assert cadence == DailyCadence(hour=5, minute=30, timezone="America/New_York")

    def test_str(self):
        assert str(DailyCadence(hour=6, minute=5)) == "daily at 06:05 UTC"


class TestTrigger:
    @pytest.mark.asyncio
    async def test_trigger_runs_and_returns_to_idle(self):
        async def run():
            return 42

        scheduler = AdvisoryScheduler(run)
        assert scheduler.state == SchedulerState.IDLE

        assert await scheduler.trigger() == 42
        assert scheduler.state == SchedulerState.IDLE
        assert scheduler.runs_started == 1

    @pytest.mark.asyncio
    async def test_overlapping_trigger_is_dropped(self):
        run = GatedRun()
        scheduler = AdvisoryScheduler(run)

        first = asyncio.create_task(scheduler.trigger())
        await run.started.wait()
        assert scheduler.state == SchedulerState.RUNNING

        # Fires while the first run is still executing
        assert await scheduler.trigger() is None

        run.release.set()
        assert await first == "done"

        assert run.calls == 1
        assert run.peak == 1
        assert scheduler.runs_started == 1
        assert scheduler.runs_dropped == 1
        assert scheduler.state == SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_dropped_trigger_is_not_queued(self):
        run = GatedRun()
        scheduler = AdvisoryScheduler(run)

        first = asyncio.create_task(scheduler.trigger())
        await run.started.wait()
        await asyncio.gather(scheduler.trigger(), scheduler.trigger())
        run.release.set()
        await first
        await asyncio.sleep(0)

        assert run.calls == 1

    @pytest.mark.asyncio
    async def test_next_trigger_after_completion_runs(self):
        run = GatedRun()
        run.release.set()
        scheduler = AdvisoryScheduler(run)

        await scheduler.trigger()
        await scheduler.trigger()

        assert run.calls == 2

    @pytest.mark.asyncio
    async def test_run_exception_is_contained(self):
        async def boom():
            raise RuntimeError("unexpected")

        scheduler = AdvisoryScheduler(boom)

        assert await scheduler.trigger() is None
        assert scheduler.state == SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_store_unavailable_is_contained(self):
        calls = 0

        async def run():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise StoreUnavailable("down")
            return "ok"

        scheduler = AdvisoryScheduler(run)

        assert await scheduler.trigger() is None
        assert await scheduler.trigger() == "ok"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_registers_daily_job(self):
        scheduler = AdvisoryScheduler(GatedRun(), DailyCadence(hour=6, minute=0))
        scheduler.start()
        try:
            job = scheduler._scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.max_instances == 1
            assert scheduler.next_run_time is not None
            assert scheduler.next_run_time.hour == 6
            assert scheduler.next_run_time.minute == 0
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_start_twice_raises(self):
        scheduler = AdvisoryScheduler(GatedRun())
        scheduler.start()
        try:
            with pytest.raises(SchedulerError):
                scheduler.start()
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_cannot_restart_after_stop(self):
        scheduler = AdvisoryScheduler(GatedRun())
        scheduler.start()
        scheduler.stop()
        with pytest.raises(SchedulerError):
            scheduler.start()

    @pytest.mark.asyncio
    async def test_stop_prevents_future_triggers(self):
        run = GatedRun()
        run.release.set()
        scheduler = AdvisoryScheduler(run)
        scheduler.start()

        scheduler.stop()

        assert scheduler.state == SchedulerState.STOPPED
        assert scheduler.next_run_time is None
        assert await scheduler.trigger() is None
        assert run.calls == 0

    @pytest.mark.asyncio
    async def test_stop_lets_in_flight_run_finish(self):
        run = GatedRun()
        scheduler = AdvisoryScheduler(run)
        scheduler.start()

        in_flight = asyncio.create_task(scheduler.trigger())
        await run.started.wait()

        scheduler.stop()
        assert scheduler.state == SchedulerState.STOPPED
        assert scheduler.is_running

        run.release.set()
        await scheduler.wait_idle()

        assert await in_flight == "done"
        assert not scheduler.is_running
        assert scheduler.state == SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        scheduler = AdvisoryScheduler(GatedRun())
        scheduler.stop()
        scheduler.stop()
        assert scheduler.state == SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_wait_idle_returns_immediately_when_idle(self):
        scheduler = AdvisoryScheduler(GatedRun())
        await asyncio.wait_for(scheduler.wait_idle(), timeout=1)
