"""Sinks that receive run summaries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from lawn_advisor.models.advisory import RunSummary

logger = logging.getLogger(__name__)


class OutcomeSink(ABC):
    """Receives the summary of every run.

    Recording is best-effort: the runner logs and ignores sink failures.
    """

    @abstractmethod
    async def record_run_outcome(self, summary: RunSummary) -> None:
        """Record a finished (or aborted) run."""


class LoggingOutcomeSink(OutcomeSink):
    """Writes run summaries to the application log."""

    async def record_run_outcome(self, summary: RunSummary) -> None:
        if summary.aborted:
            logger.error(f"Advisory run {summary.run_id} aborted: {summary.error}")
            return

        logger.info(
            f"Advisory run {summary.run_id} finished: "
            f"{summary.succeeded}/{summary.total} notified, {summary.failed} failed"
        )
        for outcome in summary.failures():
            logger.warning(
                f"Plan {outcome.plan_id} failed at {outcome.stage} stage: {outcome.error}"
            )
