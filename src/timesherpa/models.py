"""Summary: Domain model dataclasses for TimeSherpa.

Importance: Defines the calendar, analysis, and suggestion entities shared across modules.
Alternatives: Pass raw provider dictionaries between functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class SuggestionType(str, Enum):
    """Summary: Closed set of actions a suggestion can map to.

    Importance: Drives slot search strategy and calendar event templates.
    Alternatives: Use free-form strings and validate at each call site.
    """

    FOCUS_TIME = "focus_time"
    BREAK = "break"
    REVIEW_SESSION = "review_session"
    PLANNING_TIME = "planning_time"
    MEETING_SCHEDULING = "meeting_scheduling"
    WORK_LIFE_BALANCE = "work_life_balance"
    GENERAL = "general"


@dataclass(frozen=True)
class Attendee:
    """Summary: Represents a calendar event attendee or organizer.

    Importance: Feeds attendee counts, collaborator ranking, and meeting details.
    Alternatives: Track attendees as plain email strings.
    """

    email: str
    display_name: str | None = None
    is_self: bool = False
    response_status: str | None = None

    @property
    def name(self) -> str:
        """Summary: Human-readable attendee name.

        Importance: Keeps collaborator labels consistent across analyses.
        Alternatives: Always show raw email addresses.
        """

        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@", 1)[0]
        return "Unknown"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"email": self.email}
        if self.display_name:
            payload["displayName"] = self.display_name
        return payload


@dataclass(frozen=True)
class EventTime:
    """Summary: Start or end of an event, either timed or all-day.

    Importance: Preserves the provider distinction between dateTime and date values.
    Alternatives: Coerce all-day events to midnight datetimes on ingestion.
    """

    date_time: datetime | None = None
    date: date | None = None

    @property
    def is_all_day(self) -> bool:
        return self.date_time is None and self.date is not None

    def to_dict(self) -> dict[str, str]:
        if self.date_time is not None:
            return {"dateTime": self.date_time.isoformat()}
        if self.date is not None:
            return {"date": self.date.isoformat()}
        return {}


@dataclass(frozen=True)
class CalendarEvent:
    """Summary: Represents a calendar event as read from a provider.

    Importance: Core input unit for categorization, statistics, and slot search.
    Alternatives: Store provider payloads and parse lazily.
    """

    id: str
    title: str
    start: EventTime
    end: EventTime
    description: str | None = None
    attendees: tuple[Attendee, ...] = ()
    organizer: Attendee | None = None
    html_link: str | None = None
    generated: bool = False


@dataclass(frozen=True)
class MeetingDetail:
    """Summary: Immutable snapshot of an event inside a category.

    Importance: Lets clients drill into the meetings behind each category total.
    Alternatives: Return only aggregate numbers per category.
    """

    id: str
    title: str
    start_time: str
    end_time: str
    duration: int
    attendee_count: int
    attendees: tuple[Attendee, ...]
    calendar_link: str
    organizer: Attendee | None = None
    generated: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "attendeeCount": self.attendee_count,
            "attendees": [attendee.to_dict() for attendee in self.attendees],
            "googleCalendarLink": self.calendar_link,
            "timeSherpaGenerated": self.generated,
        }
        if self.organizer is not None:
            payload["organizer"] = self.organizer.to_dict()
        return payload


@dataclass(frozen=True)
class TimeCategory:
    """Summary: Aggregated time spent in one semantic category.

    Importance: Primary output of the time-allocation analysis.
    Alternatives: Report per-event classifications without aggregation.
    """

    name: str
    total_hours: float
    percentage: int
    event_count: int
    meetings: tuple[MeetingDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalHours": self.total_hours,
            "percentage": self.percentage,
            "eventCount": self.event_count,
            "meetings": [meeting.to_dict() for meeting in self.meetings],
        }


@dataclass(frozen=True)
class Collaborator:
    """Summary: A person the user shares calendar time with.

    Importance: Surfaces who the user spends most of their meeting time with.
    Alternatives: Rank collaborators by meeting count only.
    """

    name: str
    total_hours: float
    meeting_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalHours": self.total_hours,
            "meetingCount": self.meeting_count,
        }


@dataclass(frozen=True)
class TimeSlot:
    """Summary: A proposed calendar slot for an actionable suggestion.

    Importance: Gives the user concrete options to accept with one click.
    Alternatives: Let the user pick times manually.
    """

    start_time: str
    end_time: str
    date: str
    reasoning: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "date": self.date,
            "reasoning": self.reasoning,
        }

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "TimeSlot":
        """Summary: Build a TimeSlot from a client payload.

        Importance: Accepts the same camelCase shape the analysis returns.
        Alternatives: Require snake_case keys from clients.
        """

        return TimeSlot(
            start_time=str(payload.get("startTime", payload.get("start_time", ""))),
            end_time=str(payload.get("endTime", payload.get("end_time", ""))),
            date=str(payload.get("date", "")),
            reasoning=str(payload.get("reasoning", "")),
        )


@dataclass(frozen=True)
class SuggestionIntent:
    """Summary: Classifier verdict for a free-text suggestion.

    Importance: Decides whether a suggestion can become a calendar event.
    Alternatives: Ask the model to emit structured actions directly.
    """

    type: SuggestionType
    actionable: bool
    action_label: str | None = None
    action_description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "actionable": self.actionable}
        if self.action_label:
            payload["actionLabel"] = self.action_label
        if self.action_description:
            payload["actionDescription"] = self.action_description
        return payload


@dataclass(frozen=True)
class ActionableSuggestion:
    """Summary: A narrative suggestion paired with its classified action.

    Importance: Connects analysis output to the scheduling writer.
    Alternatives: Keep suggestions as plain strings only.
    """

    id: str
    text: str
    type: SuggestionType
    actionable: bool
    action_label: str | None = None
    action_description: str | None = None
    suggested_time_slots: tuple[TimeSlot, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "actionable": self.actionable,
        }
        if self.action_label:
            payload["actionLabel"] = self.action_label
        if self.action_description:
            payload["actionDescription"] = self.action_description
        if self.suggested_time_slots is not None:
            payload["suggestedTimeSlots"] = [slot.to_dict() for slot in self.suggested_time_slots]
        return payload

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "ActionableSuggestion":
        """Summary: Build an ActionableSuggestion from a client payload.

        Importance: Lets clients post back a suggestion they received from the analysis.
        Alternatives: Look suggestions up by id from a server-side cache.
        """

        raw_type = payload.get("type", SuggestionType.GENERAL.value)
        try:
            suggestion_type = SuggestionType(raw_type)
        except ValueError as exc:
            raise ValueError(f"Unknown suggestion type: {raw_type}") from exc
        slots = payload.get("suggestedTimeSlots")
        return ActionableSuggestion(
            id=str(payload.get("id", "")),
            text=str(payload.get("text", "")),
            type=suggestion_type,
            actionable=bool(payload.get("actionable", False)),
            action_label=payload.get("actionLabel"),
            action_description=payload.get("actionDescription"),
            suggested_time_slots=(
                tuple(TimeSlot.from_dict(item) for item in slots) if slots is not None else None
            ),
        )


@dataclass(frozen=True)
class CalendarAnalysis:
    """Summary: Complete time-allocation analysis for a set of events.

    Importance: Aggregate root returned to clients for each analysis request.
    Alternatives: Return separate endpoints for categories, insights, and suggestions.
    """

    categories: tuple[TimeCategory, ...]
    total_meeting_hours: float
    focus_hours: float
    key_insights: tuple[str, ...]
    suggestions: tuple[str, ...]
    top_collaborators: tuple[Collaborator, ...]
    last_updated: str
    actionable_suggestions: tuple[ActionableSuggestion, ...] = ()
    source: str = "fallback"

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": [category.to_dict() for category in self.categories],
            "totalMeetingHours": self.total_meeting_hours,
            "focusHours": self.focus_hours,
            "keyInsights": list(self.key_insights),
            "suggestions": list(self.suggestions),
            "actionableSuggestions": [item.to_dict() for item in self.actionable_suggestions],
            "topCollaborators": [item.to_dict() for item in self.top_collaborators],
            "lastUpdated": self.last_updated,
            "source": self.source,
        }


@dataclass(frozen=True)
class ScheduleSuggestions:
    """Summary: Recommendations for an upcoming schedule.

    Importance: Powers the forward-looking view of the next seven days.
    Alternatives: Reuse CalendarAnalysis for upcoming events.
    """

    suggestions: tuple[str, ...]
    anomalies: tuple[str, ...]
    focus_time_recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "suggestions": list(self.suggestions),
            "anomalies": list(self.anomalies),
            "focusTimeRecommendations": list(self.focus_time_recommendations),
        }


@dataclass(frozen=True)
class WorkweekSettings:
    """Summary: Which weekdays the user works.

    Importance: Restricts slot suggestions to days the user is available.
    Alternatives: Assume a Monday to Friday workweek for everyone.
    """

    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False
    sunday: bool = False

    def is_enabled(self, weekday: int) -> bool:
        """Summary: Check a weekday index (Monday=0) against the settings.

        Importance: Bridges Python weekday numbering to named flags.
        Alternatives: Store the workweek as a set of weekday integers.
        """

        return bool(getattr(self, WEEKDAY_NAMES[weekday]))

    def to_dict(self) -> dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in WEEKDAY_NAMES}

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "WorkweekSettings":
        """Summary: Build settings from a partial dictionary.

        Importance: Missing days fall back to the Monday to Friday default.
        Alternatives: Reject payloads that omit any weekday.
        """

        defaults = WorkweekSettings().to_dict()
        return WorkweekSettings(
            **{name: bool(payload.get(name, defaults[name])) for name in WEEKDAY_NAMES}
        )


@dataclass(frozen=True)
class TrendMetric:
    """Summary: Directional comparison of one metric between two weeks.

    Importance: Summarizes whether a habit is improving or regressing.
    Alternatives: Show raw weekly numbers without deltas.
    """

    change: float
    direction: str
    change_percent: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "change": self.change,
            "direction": self.direction,
            "changePercent": self.change_percent,
        }


@dataclass(frozen=True)
class WeekWindow:
    """Summary: A seven-day analysis window.

    Importance: Keeps week boundaries explicit for fetching and labeling.
    Alternatives: Compute boundaries inline in each caller.
    """

    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        return f"Week of {self.start:%b} {self.start.day}"


@dataclass(frozen=True)
class WeekSummary:
    """Summary: Condensed analysis for one week of the trend view.

    Importance: Provides the per-week numbers that trends are computed from.
    Alternatives: Embed full CalendarAnalysis objects per week.
    """

    window: WeekWindow
    total_meeting_hours: float
    focus_hours: float
    focus_time_percentage: int
    categories: tuple[TimeCategory, ...]
    top_category: TimeCategory | None
    event_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekStart": self.window.start.isoformat(),
            "weekEnd": self.window.end.isoformat(),
            "weekLabel": self.window.label,
            "analysis": {
                "totalMeetingHours": self.total_meeting_hours,
                "focusHours": self.focus_hours,
                "focusTimePercentage": self.focus_time_percentage,
                "categories": [
                    {
                        "name": category.name,
                        "totalHours": category.total_hours,
                        "percentage": category.percentage,
                        "eventCount": category.event_count,
                    }
                    for category in self.categories
                ],
                "topCategory": (
                    {
                        "name": self.top_category.name,
                        "totalHours": self.top_category.total_hours,
                        "percentage": self.top_category.percentage,
                        "eventCount": self.top_category.event_count,
                    }
                    if self.top_category is not None
                    else None
                ),
                "eventCount": self.event_count,
            },
        }


@dataclass(frozen=True)
class ScheduleResult:
    """Summary: Outcome of writing a suggestion to the calendar.

    Importance: Reports write failures to the caller without raising.
    Alternatives: Raise exceptions and let the HTTP layer translate them.
    """

    success: bool
    event_id: str | None = None
    event_link: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.event_id is not None:
            payload["eventId"] = self.event_id
        if self.event_link is not None:
            payload["eventLink"] = self.event_link
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class WeekOverWeekReport:
    """Summary: Four weeks of summaries with trends between the latest two.

    Importance: Response body for the week-over-week view.
    Alternatives: Let clients compute trends from raw weeks.
    """

    weeks: tuple[WeekSummary, ...]
    trends: dict[str, TrendMetric] = field(default_factory=dict)
    generated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "weeks": [week.to_dict() for week in self.weeks],
            "trends": {name: metric.to_dict() for name, metric in self.trends.items()},
            "generatedAt": self.generated_at,
        }


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class AnalysisReport:
    """Summary: Historical analysis together with the window it covers.

    Importance: Response body for the analysis view.
    Alternatives: Return the bare CalendarAnalysis.
    """

    analysis: CalendarAnalysis
    events_count: int
    date_range: DateRange

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "eventsCount": self.events_count,
            "dateRange": self.date_range.to_dict(),
        }


@dataclass(frozen=True)
class UpcomingReport:
    """Summary: Recommendations for the coming week with the window they cover.

    Importance: Response body for the upcoming view.
    Alternatives: Return the bare ScheduleSuggestions.
    """

    suggestions: ScheduleSuggestions
    upcoming_events: int
    date_range: DateRange

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggestions": self.suggestions.to_dict(),
            "upcomingEvents": self.upcoming_events,
            "dateRange": self.date_range.to_dict(),
        }
