"""Command-line interface for lawn advisories."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from lawn_advisor import __version__
from lawn_advisor.advisory.evaluator import evaluate, render_message
from lawn_advisor.advisory.runner import AdvisoryRunner
from lawn_advisor.advisory.scheduler import AdvisoryScheduler, DailyCadence
from lawn_advisor.config import Settings, get_settings
from lawn_advisor.database.connection import (
    close_db,
    create_tables,
    get_session_factory,
    init_db,
)
from lawn_advisor.database.store import SqlPlanStore
from lawn_advisor.errors import StoreUnavailable, WeatherUnavailable
from lawn_advisor.logging_config import configure_logging
from lawn_advisor.models.advisory import Recommendation
from lawn_advisor.models.location import Coordinates
from lawn_advisor.notifications import LogNotificationSender, create_sender
from lawn_advisor.providers import create_provider

logger = logging.getLogger(__name__)


def build_runner(settings: Settings, dry_run: bool = False) -> AdvisoryRunner:
    """Wire the runner to the configured database, provider and sender."""
    sender = LogNotificationSender() if dry_run else create_sender(settings)
    return AdvisoryRunner.from_settings(
        settings,
        store=SqlPlanStore(get_session_factory()),
        weather=create_provider(settings),
        sender=sender,
    )


async def run_once(settings: Settings, dry_run: bool = False) -> int:
    """Run a single advisory pass. Returns the process exit code."""
    await init_db()
    runner = build_runner(settings, dry_run=dry_run)
    try:
        summary = await runner.run()
    except StoreUnavailable as e:
        logger.error(f"Advisory run aborted: {e}")
        return 1
    finally:
        await runner.weather.aclose()
        await runner.sender.aclose()
        await close_db()

    print(f"Notified {summary.succeeded} of {summary.total} plans ({summary.failed} failed)")
    return 0


async def serve(
    settings: Settings,
    dry_run: bool = False,
    stop_event: asyncio.Event | None = None,
) -> int:
    """Run the daily scheduler until SIGINT/SIGTERM.

    On shutdown the scheduler stops accepting triggers and any in-flight
    run is allowed to finish before connections are closed.
    """
    await init_db()
    runner = build_runner(settings, dry_run=dry_run)
    scheduler = AdvisoryScheduler(runner.run, DailyCadence.from_settings(settings))

    if stop_event is None:
        stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    handled: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            handled.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows loops and non-main threads don't support signal handlers
            pass

    scheduler.start()
    try:
        await stop_event.wait()
        logger.info("Shutdown requested, waiting for in-flight run")
    finally:
        for sig in handled:
            loop.remove_signal_handler(sig)
        scheduler.stop()
        await scheduler.wait_idle()
        await runner.weather.aclose()
        await runner.sender.aclose()
        await close_db()
    return 0


async def init_database(settings: Settings) -> int:
    """Create the user and lawn plan tables if they don't exist."""
    await init_db()
    try:
        await create_tables()
    finally:
        await close_db()

    print(f"Database tables ready ({settings.database_url.split('://', 1)[0]})")
    return 0


async def evaluate_location(settings: Settings, location: str) -> int:
    """Print today's advisory for a single location without sending it."""
    coordinates = Coordinates.from_string(location)
    async with create_provider(settings) as provider:
        try:
            reading = await provider.current_conditions(*coordinates.to_tuple())
        except WeatherUnavailable as e:
            print(f"Weather unavailable: {e}", file=sys.stderr)
            return 1

    decision = evaluate(reading, Recommendation(settings.unknown_weather_recommendation))
    print(f"Conditions at {coordinates}: {reading.condition.value} ({reading.description})")
    print(f"Recommendation: {decision.recommendation.value}")
    print(decision.message)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Lawn Advisor - Daily lawn watering advice based on the weather"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run-once", help="Evaluate every active plan now and send advisories"
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log advisories instead of emailing them",
    )

    serve_parser = subparsers.add_parser(
        "serve", help="Run the daily advisory scheduler"
    )
    serve_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log advisories instead of emailing them",
    )

    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Show today's advisory for a location"
    )
    evaluate_parser.add_argument(
        "location",
        help="Location as lat,lon coordinates",
    )

    subparsers.add_parser(
        "init-db", help="Create the database tables"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "run-once":
        return asyncio.run(run_once(settings, dry_run=args.dry_run))
    if args.command == "serve":
        return asyncio.run(serve(settings, dry_run=args.dry_run))
    if args.command == "init-db":
        return asyncio.run(init_database(settings))
    if args.command == "evaluate":
        try:
            return asyncio.run(evaluate_location(settings, args.location))
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
