"""Summary: Tests for event parsing and duration helpers.

Importance: Every hour total depends on robust duration math.
Alternatives: Test durations only through the aggregate analysis.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from timesherpa.events import (
    calendar_link,
    event_duration_minutes,
    parse_google_event,
    to_meeting_detail,
)
from timesherpa.models import Attendee, CalendarEvent, EventTime


def _timed(start: datetime | None, end: datetime | None) -> CalendarEvent:
    """Summary: Build a timed event for duration tests.

    Importance: Keeps tests focused on the times under test.
    Alternatives: Parse provider payloads in every test.
    """

    return CalendarEvent(
        id="evt",
        title="Sync",
        start=EventTime(date_time=start),
        end=EventTime(date_time=end),
    )


def test_parse_google_event_normalizes_fields() -> None:
    """Summary: Parse a Google event payload into a CalendarEvent.

    Importance: Providers hand the engine raw dictionaries only once.
    Alternatives: Read provider payloads throughout the engine.
    """

    event = parse_google_event(
        {
            "id": "abc",
            "start": {"dateTime": "2025-01-20T10:00:00Z"},
            "end": {"dateTime": "2025-01-20T11:30:00Z"},
            "attendees": [
                {"email": "me@company.com", "self": True},
                {"email": "john@company.com", "displayName": "John Doe"},
            ],
            "extendedProperties": {"private": {"timeSherpaGenerated": "true"}},
        }
    )
    assert event.title == "Untitled"
    assert event.start.date_time == datetime(2025, 1, 20, 10, tzinfo=timezone.utc)
    assert event.attendees[0].is_self
    assert event.attendees[1].name == "John Doe"
    assert event.generated
    assert event_duration_minutes(event) == 90


def test_all_day_duration_counts_whole_days() -> None:
    """Summary: All-day events count 24 hours per day.

    Importance: Matches provider date semantics where end is exclusive.
    Alternatives: Ignore all-day events in totals.
    """

    event = CalendarEvent(
        id="offsite",
        title="Offsite",
        start=EventTime(date=date(2025, 1, 9)),
        end=EventTime(date=date(2025, 1, 11)),
    )
    assert event_duration_minutes(event) == 2 * 24 * 60


def test_malformed_durations_default_to_one_hour() -> None:
    """Summary: Missing, negative, or mixed-awareness times yield 60 minutes.

    Importance: A single bad event must never fail the analysis.
    Alternatives: Drop malformed events.
    """

    start = datetime(2025, 1, 20, 10, 0)
    assert event_duration_minutes(_timed(start, None)) == 60
    assert event_duration_minutes(_timed(start, datetime(2025, 1, 20, 9, 0))) == 60
    aware_end = datetime(2025, 1, 20, 11, 0, tzinfo=timezone.utc)
    assert event_duration_minutes(_timed(start, aware_end)) == 60


def test_meeting_detail_excludes_self_and_builds_link() -> None:
    """Summary: Meeting details count other attendees and always carry a link.

    Importance: Drill-down views show who else attended and link to the event.
    Alternatives: Include the user in attendee counts.
    """

    event = CalendarEvent(
        id="evt 1",
        title="1:1",
        start=EventTime(date_time=datetime(2025, 1, 20, 10)),
        end=EventTime(date_time=datetime(2025, 1, 20, 10, 45)),
        attendees=(Attendee(email="me@company.com", is_self=True), Attendee(email="ann@company.com")),
    )
    detail = to_meeting_detail(event)
    assert detail.attendee_count == 1
    assert detail.duration == 45
    assert detail.calendar_link == calendar_link(event)
    assert detail.calendar_link.endswith("evt%201")
    assert detail.to_dict()["attendees"] == [{"email": "ann@company.com"}]
    assert detail.to_dict()["timeSherpaGenerated"] is False


def test_generated_marker_reaches_meeting_detail() -> None:
    """Summary: Events created by the scheduler are flagged in category drill-downs.

    Importance: Clients can tell suggested blocks apart from events the user created.
    Alternatives: Compare event titles against the scheduling templates.
    """

    event = parse_google_event(
        {
            "id": "made-1",
            "summary": "Focus Time - Deep Work",
            "start": {"dateTime": "2025-01-21T14:00:00Z"},
            "end": {"dateTime": "2025-01-21T16:00:00Z"},
            "extendedProperties": {"private": {"timeSherpaGenerated": "true"}},
        }
    )
    assert event.generated
    assert to_meeting_detail(event).to_dict()["timeSherpaGenerated"] is True
    plain = parse_google_event({"id": "plain", "summary": "Sync"})
    assert to_meeting_detail(plain).generated is False


def test_attendee_name_falls_back_to_email() -> None:
    """Summary: Attendees without a display name use the email local part.

    Importance: Collaborator labels stay readable.
    Alternatives: Show the full email address.
    """

    assert Attendee(email="jane.doe@company.com").name == "jane.doe"
    assert Attendee(email="").name == "Unknown"
