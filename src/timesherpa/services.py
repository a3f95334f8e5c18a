"""Summary: Application services orchestrating calendar reads, analysis, and writes.

Importance: Encapsulates use-cases for the CLI and API layers.
Alternatives: Embed logic directly in CLI or API handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable

from timesherpa.analysis import build_fallback_analysis
from timesherpa.analyzer import CalendarAnalyzer
from timesherpa.calendar import CalendarProvider
from timesherpa.classifier import classify_suggestion
from timesherpa.models import (
    ActionableSuggestion,
    AnalysisReport,
    CalendarEvent,
    DateRange,
    ScheduleResult,
    SuggestionIntent,
    TimeSlot,
    UpcomingReport,
    WeekOverWeekReport,
)
from timesherpa.scheduling import SuggestionScheduler
from timesherpa.trends import build_week_windows, calculate_trends, summarize_week
from timesherpa.workweek import MAX_LOOKAHEAD_DAYS, StaticWorkweekSource, WorkweekSource


logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7

ProviderFactory = Callable[[str | None], CalendarProvider]


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


@dataclass(frozen=True)
class AnalysisService:
    """Summary: Analyzes the last N days of a user's calendar.

    Importance: Calendar failures degrade to an empty analysis rather than an error.
    Alternatives: Return an error response when the calendar cannot be read.
    """

    providers: ProviderFactory
    analyzer: CalendarAnalyzer
    workweeks: WorkweekSource = field(default_factory=StaticWorkweekSource)
    lookback_days: int = 30
    tz: tzinfo | None = None

    def analyze(
        self,
        access_token: str | None = None,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> AnalysisReport:
        """Summary: Fetch past events, analyze them, and attach schedulable slots.

        Importance: Slots are searched against upcoming events so they avoid real conflicts.
        Alternatives: Search slots against historical events only.
        """

        end = _now(now)
        start = end - timedelta(days=self.lookback_days)
        events = self._fetch(access_token, start, end, "past")
        upcoming = self._fetch(
            access_token, end, end + timedelta(days=MAX_LOOKAHEAD_DAYS), "upcoming"
        )
        workweek = self.workweeks.get_user_workweek(user_id or "")
        analysis = self.analyzer.analyze_history(
            events,
            workweek=workweek,
            today=end.astimezone(self.tz).date(),
            upcoming_events=upcoming,
        )
        return AnalysisReport(
            analysis=analysis,
            events_count=len(events),
            date_range=DateRange(start=start, end=end),
        )

    def _fetch(
        self, access_token: str | None, start: datetime, end: datetime, label: str
    ) -> list[CalendarEvent]:
        try:
            return self.providers(access_token).fetch_events(start, end)
        except Exception as exc:
            logger.warning("Could not fetch %s calendar events (%s); analyzing none.", label, exc)
            return []


@dataclass(frozen=True)
class UpcomingService:
    """Summary: Recommends changes for the next seven days.

    Importance: Forward-looking counterpart of the historical analysis.
    Alternatives: Fold upcoming recommendations into the historical analysis.
    """

    providers: ProviderFactory
    analyzer: CalendarAnalyzer

    def upcoming(self, access_token: str | None = None, now: datetime | None = None) -> UpcomingReport:
        start = _now(now)
        end = start + timedelta(days=UPCOMING_DAYS)
        events = self.providers(access_token).fetch_events(start, end)
        return UpcomingReport(
            suggestions=self.analyzer.analyze_upcoming(events),
            upcoming_events=len(events),
            date_range=DateRange(start=start, end=end),
        )


@dataclass(frozen=True)
class WeekOverWeekService:
    """Summary: Compares the last four weeks of calendar usage.

    Importance: Calendar failures propagate so clients can report them.
    Alternatives: Return partial weeks when a fetch fails.
    """

    providers: ProviderFactory
    tz: tzinfo | None = None

    def compare(self, access_token: str | None = None, now: datetime | None = None) -> WeekOverWeekReport:
        """Summary: Fetch and summarize each week, then compute trends.

        Importance: Weeks are reported most recent first and trends compare the latest two.
        Alternatives: Fetch all four weeks in one request and split locally.
        """

        current = _now(now)
        local_now = current.astimezone(self.tz) if self.tz is not None else current
        provider = self.providers(access_token)
        weeks = []
        for window in build_week_windows(local_now):
            events = provider.fetch_events(window.start, window.end)
            weeks.append(summarize_week(window, build_fallback_analysis(events), len(events)))
            logger.info("Summarized %s with %s events.", window.label, len(events))
        weeks.reverse()
        return WeekOverWeekReport(
            weeks=tuple(weeks),
            trends=calculate_trends(weeks),
            generated_at=current.isoformat(),
        )


@dataclass(frozen=True)
class SuggestionService:
    """Summary: Classifies suggestion text and schedules accepted suggestions.

    Importance: Connects analysis output to the calendar writer.
    Alternatives: Expose the classifier and scheduler separately.
    """

    scheduler: SuggestionScheduler

    def classify(self, text: str) -> SuggestionIntent:
        return classify_suggestion(text)

    def schedule(
        self,
        suggestion: ActionableSuggestion,
        time_slot: TimeSlot,
        access_token: str | None = None,
    ) -> ScheduleResult:
        return self.scheduler.schedule(suggestion, time_slot, access_token)
