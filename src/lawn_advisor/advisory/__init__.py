"""Scheduled advisory engine: decision rule, runner and daily scheduler."""

from lawn_advisor.advisory.evaluator import (
    NOTIFICATION_SUBJECT,
    SKIP_WATERING_MESSAGE,
    WATER_NOW_MESSAGE,
    AdvisoryEvaluator,
    evaluate,
    render_message,
)
from lawn_advisor.advisory.observability import LoggingOutcomeSink, OutcomeSink
from lawn_advisor.advisory.runner import AdvisoryRunner, RunnerTimeouts
from lawn_advisor.advisory.scheduler import (
    AdvisoryScheduler,
    DailyCadence,
    SchedulerState,
)

__all__ = [
    "NOTIFICATION_SUBJECT",
    "SKIP_WATERING_MESSAGE",
    "WATER_NOW_MESSAGE",
    "AdvisoryEvaluator",
    "evaluate",
    "render_message",
    "LoggingOutcomeSink",
    "OutcomeSink",
    "AdvisoryRunner",
    "RunnerTimeouts",
    "AdvisoryScheduler",
    "DailyCadence",
    "SchedulerState",
]
