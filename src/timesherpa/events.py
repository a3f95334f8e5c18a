"""Summary: Event duration and normalization helpers.

Importance: Turns heterogeneous provider payloads into durations and local times without raising.
Alternatives: Trust provider payloads and let malformed events fail the analysis.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Any
from urllib.parse import quote

from timesherpa.models import Attendee, CalendarEvent, EventTime, MeetingDetail


logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60
RECURRING_KEYWORDS = ("recurring", "weekly", "daily", "standup", "sync")
CALENDAR_EVENT_URL = "https://calendar.google.com/calendar/event?eid="


def parse_datetime(value: str | None) -> datetime | None:
    """Summary: Parse an ISO-8601 timestamp, returning None on bad input.

    Importance: Accepts the trailing Z that Google emits for UTC values.
    Alternatives: Use dateutil for lenient parsing.
    """

    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_event_time(payload: dict[str, Any] | None) -> EventTime:
    """Summary: Parse a provider `{dateTime|date}` object.

    Importance: Preserves timed versus all-day semantics for duration math.
    Alternatives: Collapse everything to datetimes at ingestion.
    """

    if not payload:
        return EventTime()
    return EventTime(
        date_time=parse_datetime(payload.get("dateTime")),
        date=parse_date(payload.get("date")),
    )


def _parse_person(payload: dict[str, Any] | None) -> Attendee | None:
    if not payload:
        return None
    return Attendee(
        email=payload.get("email", "") or "",
        display_name=payload.get("displayName") or None,
        is_self=bool(payload.get("self", False)),
        response_status=payload.get("responseStatus"),
    )


def parse_google_event(payload: dict[str, Any]) -> CalendarEvent:
    """Summary: Build a CalendarEvent from a Google Calendar v3 event payload.

    Importance: Normalizes provider data once so the engine never sees raw dicts.
    Alternatives: Use the Google API client models directly.
    """

    attendees = tuple(
        attendee
        for attendee in (_parse_person(item) for item in payload.get("attendees") or [])
        if attendee is not None
    )
    private = (payload.get("extendedProperties") or {}).get("private") or {}
    return CalendarEvent(
        id=str(payload.get("id", "")),
        title=payload.get("summary") or "Untitled",
        description=payload.get("description"),
        start=parse_event_time(payload.get("start")),
        end=parse_event_time(payload.get("end")),
        attendees=attendees,
        organizer=_parse_person(payload.get("organizer")),
        html_link=payload.get("htmlLink"),
        generated=private.get("timeSherpaGenerated") == "true",
    )


def _as_naive(value: datetime, tz: tzinfo | None) -> datetime:
    if value.tzinfo is None:
        return value
    if tz is None:
        return value.astimezone().replace(tzinfo=None)
    return value.astimezone(tz).replace(tzinfo=None)


def event_start_datetime(event: CalendarEvent, tz: tzinfo | None = None) -> datetime | None:
    """Summary: Local naive start time of an event.

    Importance: Lets slot search compare events against wall-clock working hours.
    Alternatives: Run slot search entirely in UTC.
    """

    return _event_point(event.start, tz)


def event_end_datetime(event: CalendarEvent, tz: tzinfo | None = None) -> datetime | None:
    return _event_point(event.end, tz)


def _event_point(point: EventTime, tz: tzinfo | None) -> datetime | None:
    if point.date_time is not None:
        return _as_naive(point.date_time, tz)
    if point.date is not None:
        return datetime.combine(point.date, datetime.min.time())
    return None


def event_duration_minutes(event: CalendarEvent) -> int:
    """Summary: Duration of an event in whole minutes.

    Importance: Feeds every hour total in the analysis; must never raise.
    Alternatives: Skip events with unparseable times.
    """

    start, end = event.start, event.end
    try:
        if start.date_time is not None and end.date_time is not None:
            minutes = int((end.date_time - start.date_time).total_seconds() // 60)
        elif start.date is not None and end.date is not None:
            minutes = (end.date - start.date).days * 24 * 60
        else:
            return DEFAULT_DURATION_MINUTES
    except TypeError:
        # naive and aware timestamps mixed in one event
        logger.debug("Mixed timezone awareness in event %s.", event.id)
        return DEFAULT_DURATION_MINUTES
    if minutes < 0:
        return DEFAULT_DURATION_MINUTES
    return minutes


def event_duration_hours(event: CalendarEvent) -> float:
    return event_duration_minutes(event) / 60


def other_attendees(event: CalendarEvent) -> tuple[Attendee, ...]:
    """Summary: Attendees excluding the user's own entry.

    Importance: A 1:1 has exactly one other person, whether or not the provider lists the user.
    Alternatives: Count every attendee including the user.
    """

    return tuple(attendee for attendee in event.attendees if not attendee.is_self)


def is_recurring_hint(title: str) -> bool:
    lowered = title.lower()
    return any(keyword in lowered for keyword in RECURRING_KEYWORDS)


def event_timestamp(point: EventTime) -> str:
    if point.date_time is not None:
        return point.date_time.isoformat()
    if point.date is not None:
        return point.date.isoformat()
    return ""


def calendar_link(event: CalendarEvent) -> str:
    if event.html_link:
        return event.html_link
    return f"{CALENDAR_EVENT_URL}{quote(event.id)}"


def to_meeting_detail(event: CalendarEvent) -> MeetingDetail:
    """Summary: Snapshot an event as a MeetingDetail.

    Importance: Category drill-downs show the meetings that produced each total.
    Alternatives: Reference events by id and resolve them on the client.
    """

    attendees = other_attendees(event)
    return MeetingDetail(
        id=event.id,
        title=event.title,
        start_time=event_timestamp(event.start),
        end_time=event_timestamp(event.end),
        duration=event_duration_minutes(event),
        attendee_count=len(attendees),
        attendees=attendees,
        calendar_link=calendar_link(event),
        organizer=event.organizer,
        generated=event.generated,
    )


def event_sort_key(event: CalendarEvent) -> datetime:
    """Summary: Chronological sort key that tolerates missing or mixed timestamps.

    Importance: Meeting lists are ordered by start even when some events are malformed.
    Alternatives: Sort on the raw ISO strings.
    """

    start = event_start_datetime(event)
    return start if start is not None else datetime.max
