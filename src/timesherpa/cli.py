"""Summary: Command-line interface for TimeSherpa.

Importance: Provides a local-first entry point for analysis and scheduling workflows.
Alternatives: Build a web UI or desktop client first.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import uvicorn

from timesherpa.app import build_services
from timesherpa.calendar import IcsCalendarProvider, MockCalendarProvider
from timesherpa.classifier import classify_suggestion
from timesherpa.config import AppConfig
from timesherpa.models import ActionableSuggestion, SuggestionType, TimeSlot
from timesherpa.services import ProviderFactory
from timesherpa.slots import MAX_SLOTS, find_time_slots
from timesherpa.workweek import MAX_LOOKAHEAD_DAYS, parse_workweek


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--fixture", type=str, default=None, help="JSON fixture of events")
    source.add_argument("--ics", type=str, default=None, help="iCalendar file of events")
    parser.add_argument("--token", type=str, default=None, help="Calendar access token")
    parser.add_argument("--now", type=str, default=None, help="ISO timestamp to analyze from")


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="TimeSherpa CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze the last month of events")
    _add_source_arguments(analyze)
    analyze.add_argument("--user-id", type=str, default=None)

    upcoming = subparsers.add_parser("upcoming", help="Recommend changes for the next week")
    _add_source_arguments(upcoming)

    week_over_week = subparsers.add_parser("week-over-week", help="Compare the last four weeks")
    _add_source_arguments(week_over_week)

    classify = subparsers.add_parser("classify", help="Classify a suggestion")
    classify.add_argument("text", type=str)

    slots = subparsers.add_parser("slots", help="Find time slots for a suggestion")
    slots.add_argument("text", type=str)
    slots.add_argument("--workweek", type=str, default=None)
    _add_source_arguments(slots)

    schedule = subparsers.add_parser("schedule", help="Schedule a suggestion on the calendar")
    schedule.add_argument("text", type=str)
    schedule.add_argument("--type", type=str, default=None, choices=[item.value for item in SuggestionType])
    schedule.add_argument("--id", type=str, default="suggestion-1")
    schedule.add_argument("--date", type=str, required=True, help="YYYY-MM-DD")
    schedule.add_argument("--start", type=str, required=True, help="HH:MM")
    schedule.add_argument("--end", type=str, required=True, help="HH:MM")
    schedule.add_argument("--token", type=str, default=None, help="Calendar access token")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def _source(args: argparse.Namespace) -> ProviderFactory | None:
    if args.fixture:
        fixture = MockCalendarProvider(Path(args.fixture))
        return lambda _token: fixture
    if args.ics:
        ics = IcsCalendarProvider(Path(args.ics))
        return lambda _token: ics
    return None


def _now(args: argparse.Namespace) -> datetime:
    if not args.now:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(args.now.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def run_cli(argv: list[str] | None = None) -> None:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives the local user experience without a UI.
    Alternatives: Invoke services via an HTTP API.
    """

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    config = AppConfig.from_env()

    if args.command == "serve":
        uvicorn.run(
            "timesherpa.api:app",
            host=args.host or config.api_host,
            port=args.port or config.api_port,
        )
        return

    if args.command == "classify":
        _print(classify_suggestion(args.text).to_dict())
        return

    if args.command == "schedule":
        services = build_services(config)
        intent = classify_suggestion(args.text)
        suggestion = ActionableSuggestion(
            id=args.id,
            text=args.text,
            type=SuggestionType(args.type) if args.type else intent.type,
            actionable=True,
        )
        slot = TimeSlot(start_time=args.start, end_time=args.end, date=args.date)
        result = services.suggestions.schedule(suggestion, slot, access_token=args.token)
        _print(result.to_dict())
        if not result.success:
            raise SystemExit(1)
        return

    services = build_services(config, providers=_source(args))
    now = _now(args)

    if args.command == "analyze":
        report = services.analysis.analyze(access_token=args.token, user_id=args.user_id, now=now)
        _print(report.to_dict())
        return

    if args.command == "upcoming":
        _print(services.upcoming.upcoming(access_token=args.token, now=now).to_dict())
        return

    if args.command == "week-over-week":
        _print(services.week_over_week.compare(access_token=args.token, now=now).to_dict())
        return

    if args.command == "slots":
        context = services.context
        workweek = parse_workweek(args.workweek or config.default_workweek)
        read = _source(args) or context.calendars.provider
        events = read(args.token).fetch_events(now, now + timedelta(days=MAX_LOOKAHEAD_DAYS))
        intent = classify_suggestion(args.text)
        start: date = now.astimezone(context.tz).date() + timedelta(days=1)
        found = find_time_slots(intent.type, events, workweek, args.text, start, tz=context.tz)
        _print(
            {
                "intent": intent.to_dict(),
                "suggestedTimeSlots": [slot.to_dict() for slot in found[:MAX_SLOTS]],
            }
        )
        return


if __name__ == "__main__":
    run_cli()
