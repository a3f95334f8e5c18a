"""Summary: Turns an accepted suggestion and time slot into a calendar event.

Importance: The only path by which TimeSherpa writes to a user's calendar.
Alternatives: Let clients create calendar events directly from suggestion text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable

from timesherpa.calendar import CalendarWriter
from timesherpa.models import ActionableSuggestion, ScheduleResult, SuggestionType, TimeSlot


logger = logging.getLogger(__name__)


class SchedulingValidationError(ValueError):
    """Summary: Raised when a schedule request is malformed.

    Importance: Stops bad payloads before any calendar write.
    Alternatives: Let the calendar API reject invalid times.
    """


@dataclass(frozen=True)
class EventTemplate:
    summary: str
    details: str
    color_id: str
    lead: str = "Scheduled based on TimeSherpa insight"


EVENT_TEMPLATES: dict[SuggestionType, EventTemplate] = {
    SuggestionType.FOCUS_TIME: EventTemplate(
        "Focus Time - Deep Work",
        "This time is blocked for deep work and strategic thinking.",
        "9",
    ),
    SuggestionType.BREAK: EventTemplate(
        "Break Time",
        "Take a break to recharge and maintain productivity.",
        "10",
    ),
    SuggestionType.REVIEW_SESSION: EventTemplate(
        "Meeting Review Session",
        "Use this time to:\n"
        "• Review recurring meetings for consolidation opportunities\n"
        "• Identify meetings that can be delegated\n"
        "• Optimize your meeting schedule",
        "6",
    ),
    SuggestionType.PLANNING_TIME: EventTemplate(
        "Strategic Planning Time",
        "Use this time for:\n"
        "• Strategic planning and preparation\n"
        "• Weekly/monthly planning\n"
        "• Goal setting and review",
        "8",
    ),
    SuggestionType.MEETING_SCHEDULING: EventTemplate(
        "Scheduled Meeting",
        "Please add attendees and agenda details.",
        "11",
        lead="Meeting scheduled based on TimeSherpa insight",
    ),
}
DEFAULT_TEMPLATE = EventTemplate("TimeSherpa Suggestion", "", "1", lead="Scheduled based on insight")


def event_description(template: EventTemplate, suggestion_text: str) -> str:
    description = f'{template.lead}: "{suggestion_text}"'
    if template.details:
        description += f"\n\n{template.details}"
    return description


def _parse_slot_time(slot: TimeSlot, value: str, tz: tzinfo | None) -> datetime:
    try:
        return datetime.strptime(f"{slot.date} {value}", "%Y-%m-%d %H:%M").replace(tzinfo=tz)
    except ValueError as exc:
        raise SchedulingValidationError(
            f"Invalid time slot {slot.date} {value}; expected YYYY-MM-DD and HH:MM"
        ) from exc


def validate_schedule_request(
    suggestion: ActionableSuggestion, slot: TimeSlot, tz: tzinfo | None = None
) -> tuple[datetime, datetime]:
    """Summary: Check a schedule request and resolve its start and end instants.

    Importance: Guarantees no write happens for a payload that cannot form a valid event.
    Alternatives: Validate on the client only.
    """

    if not suggestion.id:
        raise SchedulingValidationError("Suggestion id is required")
    if not isinstance(suggestion.type, SuggestionType):
        raise SchedulingValidationError(f"Unknown suggestion type: {suggestion.type}")
    start = _parse_slot_time(slot, slot.start_time, tz)
    end = _parse_slot_time(slot, slot.end_time, tz)
    if end <= start:
        raise SchedulingValidationError("Time slot end must be after its start")
    return start, end


def build_event_body(
    suggestion: ActionableSuggestion,
    start: datetime,
    end: datetime,
    timezone_name: str,
) -> dict[str, Any]:
    """Summary: Build the calendar event resource for a suggestion.

    Importance: Tags every created event so it can be recognized as TimeSherpa-generated.
    Alternatives: Track created event ids in a local store.
    """

    template = EVENT_TEMPLATES.get(suggestion.type, DEFAULT_TEMPLATE)
    return {
        "summary": template.summary,
        "description": event_description(template, suggestion.text),
        "start": {"dateTime": start.isoformat(), "timeZone": timezone_name},
        "end": {"dateTime": end.isoformat(), "timeZone": timezone_name},
        "colorId": template.color_id,
        "reminders": {"useDefault": True},
        "extendedProperties": {
            "private": {
                "timeSherpaGenerated": "true",
                "suggestionId": suggestion.id,
                "suggestionType": suggestion.type.value,
            }
        },
    }


@dataclass(frozen=True)
class SuggestionScheduler:
    """Summary: Writes accepted suggestions to the calendar.

    Importance: Converts every failure into a ScheduleResult instead of raising.
    Alternatives: Raise and let the HTTP layer map errors to status codes.
    """

    writer_factory: Callable[[str | None], CalendarWriter]
    tz: tzinfo | None = None
    timezone_name: str = "UTC"

    def schedule(
        self,
        suggestion: ActionableSuggestion,
        time_slot: TimeSlot,
        access_token: str | None = None,
    ) -> ScheduleResult:
        """Summary: Validate, build, and insert exactly one calendar event.

        Importance: A validation failure never reaches the calendar writer.
        Alternatives: Insert first and delete on validation failure.
        """

        try:
            start, end = validate_schedule_request(suggestion, time_slot, self.tz)
            body = build_event_body(suggestion, start, end, self.timezone_name)
            created = self.writer_factory(access_token).insert_event(body)
        except SchedulingValidationError as exc:
            logger.warning("Rejected schedule request for %s: %s", suggestion.id, exc)
            return ScheduleResult(success=False, error=str(exc))
        except Exception as exc:
            logger.exception("Error scheduling calendar event for %s.", suggestion.id)
            return ScheduleResult(success=False, error=str(exc) or "Unknown error occurred")
        logger.info("Scheduled %s suggestion %s.", suggestion.type.value, suggestion.id)
        return ScheduleResult(
            success=True,
            event_id=created.get("id"),
            event_link=created.get("htmlLink"),
        )
