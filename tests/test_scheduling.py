"""Summary: Tests for writing suggestions to the calendar.

Importance: The scheduler is the only code path that mutates a user's calendar.
Alternatives: Verify scheduling manually against a test calendar.
"""

from __future__ import annotations

from typing import Any
from zoneinfo import ZoneInfo

from timesherpa.calendar import CalendarWriter, RecordingCalendarWriter
from timesherpa.events import event_duration_minutes, parse_google_event
from timesherpa.models import ActionableSuggestion, SuggestionType, TimeSlot
from timesherpa.scheduling import SuggestionScheduler


FOCUS = ActionableSuggestion(
    id="suggestion-1",
    text="Block 2-3 hour focus time sessions on your calendar for deep work",
    type=SuggestionType.FOCUS_TIME,
    actionable=True,
    action_label="Block Focus Time",
)


class ExplodingWriter(CalendarWriter):
    """Summary: Writer that fails every insert.

    Importance: Simulates calendar API outages.
    Alternatives: Point the Google provider at an invalid URL.
    """

    def insert_event(self, event_body: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("calendar unavailable")


def _scheduler(writer: CalendarWriter, timezone_name: str = "UTC") -> SuggestionScheduler:
    """Summary: Build a scheduler bound to a single writer.

    Importance: Keeps tests independent of configuration.
    Alternatives: Build the scheduler through build_services.
    """

    return SuggestionScheduler(
        writer_factory=lambda _token: writer,
        tz=ZoneInfo(timezone_name),
        timezone_name=timezone_name,
    )


def test_schedule_focus_slot_round_trip() -> None:
    """Summary: A focus slot becomes a tagged event that reads back as generated.

    Importance: Created events must be recognizable as TimeSherpa-generated.
    Alternatives: Track created event ids locally.
    """

    writer = RecordingCalendarWriter()
    slot = TimeSlot(start_time="14:00", end_time="16:00", date="2025-01-15")
    result = _scheduler(writer).schedule(FOCUS, slot, access_token="token")
    assert result.success
    assert result.event_id == "local-1"
    assert result.event_link
    body = writer.inserted[0]
    assert body["summary"] == "Focus Time - Deep Work"
    assert body["colorId"] == "9"
    assert body["start"] == {"dateTime": "2025-01-15T14:00:00+00:00", "timeZone": "UTC"}
    assert body["reminders"] == {"useDefault": True}
    assert body["extendedProperties"]["private"] == {
        "timeSherpaGenerated": "true",
        "suggestionId": "suggestion-1",
        "suggestionType": "focus_time",
    }
    assert body["description"].startswith(f'Scheduled based on TimeSherpa insight: "{FOCUS.text}"')
    created = parse_google_event(dict(body, id=result.event_id))
    assert created.generated
    assert event_duration_minutes(created) == 120


def test_schedule_uses_configured_timezone() -> None:
    """Summary: Slot times are interpreted in the configured IANA timezone.

    Importance: 14:00 means 14:00 on the user's wall clock.
    Alternatives: Interpret slots in UTC.
    """

    writer = RecordingCalendarWriter()
    slot = TimeSlot(start_time="14:00", end_time="15:00", date="2025-01-15")
    _scheduler(writer, "America/New_York").schedule(FOCUS, slot)
    start = writer.inserted[0]["start"]
    assert start == {"dateTime": "2025-01-15T14:00:00-05:00", "timeZone": "America/New_York"}


def test_invalid_slots_never_reach_the_writer() -> None:
    """Summary: Malformed dates and inverted ranges fail validation.

    Importance: No partial or invalid events are written.
    Alternatives: Let the calendar API reject them.
    """

    writer = RecordingCalendarWriter()
    scheduler = _scheduler(writer)
    bad_date = scheduler.schedule(FOCUS, TimeSlot(start_time="14:00", end_time="16:00", date="15/01/2025"))
    inverted = scheduler.schedule(FOCUS, TimeSlot(start_time="16:00", end_time="14:00", date="2025-01-15"))
    bad_time = scheduler.schedule(FOCUS, TimeSlot(start_time="2pm", end_time="16:00", date="2025-01-15"))
    assert not bad_date.success and bad_date.error
    assert not inverted.success and "after" in inverted.error
    assert not bad_time.success
    missing_id = ActionableSuggestion(id="", text="x", type=SuggestionType.BREAK, actionable=True)
    assert not scheduler.schedule(
        missing_id, TimeSlot(start_time="13:00", end_time="14:00", date="2025-01-15")
    ).success
    assert writer.inserted == []


def test_writer_failure_returns_error_result() -> None:
    """Summary: Writer exceptions become unsuccessful results.

    Importance: The scheduler never raises to its caller.
    Alternatives: Propagate the exception.
    """

    slot = TimeSlot(start_time="14:00", end_time="16:00", date="2025-01-15")
    result = _scheduler(ExplodingWriter()).schedule(FOCUS, slot)
    assert not result.success
    assert result.error == "calendar unavailable"
    assert result.to_dict() == {"success": False, "error": "calendar unavailable"}


def test_general_suggestion_uses_default_template() -> None:
    """Summary: Types without a template use the generic event details.

    Importance: Every type produces a valid event.
    Alternatives: Reject types without templates.
    """

    writer = RecordingCalendarWriter()
    general = ActionableSuggestion(id="s-9", text="Try something new", type=SuggestionType.GENERAL, actionable=False)
    slot = TimeSlot(start_time="09:00", end_time="09:30", date="2025-01-16")
    assert _scheduler(writer).schedule(general, slot).success
    body = writer.inserted[0]
    assert body["summary"] == "TimeSherpa Suggestion"
    assert body["colorId"] == "1"
    assert body["description"] == 'Scheduled based on insight: "Try something new"'
