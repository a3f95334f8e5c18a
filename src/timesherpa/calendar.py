"""Summary: Calendar provider interfaces and implementations.

Importance: Encapsulates reading events from and writing events to calendar services.
Alternatives: Use provider SDKs directly without a shared abstraction.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from timesherpa.config import AppConfig
from timesherpa.events import event_start_datetime, parse_google_event
from timesherpa.models import Attendee, CalendarEvent, EventTime


logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30
MAX_RESULTS = 2500


class CalendarApiError(RuntimeError):
    """Summary: Raised when a calendar API request fails.

    Importance: Lets services distinguish calendar failures from programming errors.
    Alternatives: Propagate urllib errors directly.
    """


def default_range(
    start: datetime | None, end: datetime | None, lookback_days: int = DEFAULT_LOOKBACK_DAYS
) -> tuple[datetime, datetime]:
    """Summary: Fill in missing bounds with "last N days to now".

    Importance: Gives every provider the same default analysis window.
    Alternatives: Require callers to always pass both bounds.
    """

    resolved_end = end or datetime.now(timezone.utc)
    resolved_start = start or resolved_end - timedelta(days=lookback_days)
    return resolved_start, resolved_end


def _to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


class CalendarProvider(ABC):
    """Summary: Abstract interface for calendar ingestion.

    Importance: Standardizes retrieval across mocked and real providers.
    Alternatives: Couple ingestion to a single calendar API.
    """

    @abstractmethod
    def fetch_events(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[CalendarEvent]:
        """Summary: Fetch events between two instants.

        Importance: Drives every analysis, trend, and slot search.
        Alternatives: Fetch a fixed number of upcoming events.
        """


class CalendarWriter(ABC):
    """Summary: Abstract interface for creating calendar events.

    Importance: The only write path the engine uses, kept separate from reads.
    Alternatives: Add write methods to CalendarProvider.
    """

    @abstractmethod
    def insert_event(self, event_body: dict[str, Any]) -> dict[str, Any]:
        """Summary: Insert an event and return at least its id and htmlLink.

        Importance: Lets the scheduler report where the new event lives.
        Alternatives: Return nothing and require a follow-up lookup.
        """


def _filter_range(
    events: list[CalendarEvent], start: datetime, end: datetime
) -> list[CalendarEvent]:
    lower, upper = _to_utc(start), _to_utc(end)
    selected = []
    for event in events:
        event_start = event_start_datetime(event)
        if event_start is None:
            continue
        if lower <= _to_utc(event_start) <= upper:
            selected.append(event)
    return selected


class MockCalendarProvider(CalendarProvider):
    """Summary: Loads events from a local JSON fixture in Google event shape.

    Importance: Supports offline demos and tests.
    Alternatives: Generate synthetic events in code.
    """

    def __init__(self, fixture_path: Path, filter_by_range: bool = True) -> None:
        """Summary: Initialize the mock calendar provider.

        Importance: Range filtering can be disabled to analyze a whole fixture.
        Alternatives: Embed sample data directly in the class.
        """

        self._fixture_path = fixture_path
        self._filter_by_range = filter_by_range

    def fetch_events(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[CalendarEvent]:
        """Summary: Load events from the fixture file.

        Importance: Provides predictable calendar data for demos.
        Alternatives: Return an empty list when fixtures are missing.
        """

        data = json.loads(self._fixture_path.read_text(encoding="utf-8"))
        events = [parse_google_event(item) for item in data]
        if not self._filter_by_range:
            return events
        return _filter_range(events, *default_range(start, end))


class IcsCalendarProvider(CalendarProvider):
    """Summary: Loads events from an iCalendar (.ics) file.

    Importance: Enables analysis of exported calendars without provider APIs.
    Alternatives: Use Google or Microsoft APIs with OAuth.
    """

    def __init__(self, ics_path: Path, filter_by_range: bool = True) -> None:
        self._ics_path = ics_path
        self._filter_by_range = filter_by_range

    def fetch_events(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[CalendarEvent]:
        """Summary: Parse events from an .ics file.

        Importance: Supports local-first calendar imports.
        Alternatives: Use a dedicated iCalendar parsing library.
        """

        raw = self._ics_path.read_text(encoding="utf-8")
        events = [
            CalendarEvent(
                id=event.get("UID", f"ics-{index}"),
                title=event.get("SUMMARY", "Untitled"),
                description=event.get("DESCRIPTION"),
                start=_parse_ics_time(event.get("DTSTART", "")),
                end=_parse_ics_time(event.get("DTEND", "")),
                attendees=tuple(
                    Attendee(email=email) for email in _split_attendees(event.get("ATTENDEE", ""))
                ),
                organizer=(
                    Attendee(email=event["ORGANIZER"]) if event.get("ORGANIZER") else None
                ),
            )
            for index, event in enumerate(_parse_ics_events(raw))
        ]
        if not self._filter_by_range:
            return events
        return _filter_range(events, *default_range(start, end))


def _split_attendees(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_ics_events(raw: str) -> list[dict[str, str]]:
    """Summary: Parse raw iCalendar data into event dictionaries.

    Importance: Extracts minimal fields needed for analysis.
    Alternatives: Use an iCalendar library for robust parsing.
    """

    unfolded_lines: list[str] = []
    for line in raw.splitlines():
        if line.startswith(" ") and unfolded_lines:
            unfolded_lines[-1] += line[1:]
        else:
            unfolded_lines.append(line.strip())
    events: list[dict[str, str]] = []
    current: dict[str, str] | None = None
    for line in unfolded_lines:
        if line == "BEGIN:VEVENT":
            current = {}
            continue
        if line == "END:VEVENT" and current is not None:
            events.append(current)
            current = None
            continue
        if current is None or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.split(";", 1)[0]
        value = value.replace("mailto:", "").replace("MAILTO:", "")
        if key == "ATTENDEE":
            existing = current.get("ATTENDEE", "")
            current["ATTENDEE"] = ", ".join([item for item in [existing, value] if item])
        else:
            current[key] = value
    return events


def _parse_ics_time(value: str) -> EventTime:
    """Summary: Parse a minimal iCalendar date or datetime.

    Importance: Keeps all-day VALUE=DATE entries distinct from timed entries.
    Alternatives: Treat timestamps as raw strings.
    """

    cleaned = value.replace("Z", "")
    try:
        if len(cleaned) == 8:
            return EventTime(date=datetime.strptime(cleaned, "%Y%m%d").date())
        parsed = datetime.strptime(cleaned, "%Y%m%dT%H%M%S")
    except ValueError:
        return EventTime()
    if value.endswith("Z"):
        parsed = parsed.replace(tzinfo=timezone.utc)
    return EventTime(date_time=parsed)


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat()


class GoogleCalendarProvider(CalendarProvider, CalendarWriter):
    """Summary: Reads and writes the primary Google Calendar using an OAuth token.

    Importance: Production event source and the scheduling writer target.
    Alternatives: Use the google-api-python-client SDK.
    """

    def __init__(self, access_token: str, base_url: str, calendar_id: str = "primary") -> None:
        """Summary: Initialize the Google Calendar provider.

        Importance: Stores access token and API base URL for requests.
        Alternatives: Fetch tokens on demand inside each request.
        """

        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._calendar_id = calendar_id

    def _events_url(self) -> str:
        calendar_id = urllib.parse.quote(self._calendar_id, safe="")
        return f"{self._base_url}/calendars/{calendar_id}/events"

    def fetch_events(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[CalendarEvent]:
        """Summary: List single (expanded) events ordered by start time.

        Importance: Follows nextPageToken so busy calendars are read completely.
        Alternatives: Read only the first page of results.
        """

        time_min, time_max = default_range(start, end)
        params = {
            "timeMin": _rfc3339(time_min),
            "timeMax": _rfc3339(time_max),
            "maxResults": str(MAX_RESULTS),
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        events: list[CalendarEvent] = []
        page_token: str | None = None
        while True:
            query = dict(params, pageToken=page_token) if page_token else params
            url = f"{self._events_url()}?{urllib.parse.urlencode(query)}"
            payload = _calendar_api_request(url, self._access_token)
            events.extend(parse_google_event(item) for item in payload.get("items", []))
            page_token = payload.get("nextPageToken")
            if not page_token:
                break
        logger.info("Fetched %s calendar events.", len(events))
        return events

    def insert_event(self, event_body: dict[str, Any]) -> dict[str, Any]:
        """Summary: Insert an event into the calendar.

        Importance: Performs exactly one write per call.
        Alternatives: Batch inserts through the batch endpoint.
        """

        return _calendar_api_request(self._events_url(), self._access_token, event_body)


def _calendar_api_request(
    url: str, access_token: str, payload: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Summary: Send a Calendar API request and parse the JSON response.

    Importance: Encapsulates Calendar API calls without new dependencies.
    Alternatives: Use a third-party HTTP client or SDK.
    """

    headers = {"Authorization": f"Bearer {access_token}"}
    data = None
    if payload is not None:
        headers["Content-Type"] = "application/json"
        data = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(
        url,
        data=data,
        headers=headers,
        method="POST" if payload is not None else "GET",
    )
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            raw = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        error_body = exc.read().decode("utf-8", errors="replace")
        raise CalendarApiError(f"Calendar API request failed: {error_body or exc.reason}") from exc
    except (urllib.error.URLError, TimeoutError) as exc:
        raise CalendarApiError(f"Calendar API request failed: {exc}") from exc
    return json.loads(raw) if raw else {}


@dataclass
class RecordingCalendarWriter(CalendarWriter):
    """Summary: In-memory writer that records inserted event bodies.

    Importance: Lets the mock calendar mode and tests exercise scheduling without a network.
    Alternatives: Write events back into the fixture file.
    """

    inserted: list[dict[str, Any]] = field(default_factory=list)

    def insert_event(self, event_body: dict[str, Any]) -> dict[str, Any]:
        self.inserted.append(event_body)
        event_id = f"local-{len(self.inserted)}"
        return {"id": event_id, "htmlLink": f"https://calendar.local/event/{event_id}"}


@dataclass
class CalendarClientFactory:
    """Summary: Builds calendar readers and writers for an access token.

    Importance: Keeps the google versus mock choice in configuration.
    Alternatives: Construct providers inline in every route.
    """

    config: AppConfig
    writer: RecordingCalendarWriter = field(default_factory=RecordingCalendarWriter)

    def provider(self, access_token: str | None) -> CalendarProvider:
        """Summary: Return the event source for a token.

        Importance: Mock mode ignores the token and reads the configured fixture.
        Alternatives: Require a token in every mode.
        """

        if self.config.calendar_provider == "google":
            if not access_token:
                raise CalendarApiError("A calendar access token is required")
            return GoogleCalendarProvider(access_token, self.config.calendar_api_base_url)
        return MockCalendarProvider(Path(self.config.calendar_fixture_path))

    def calendar_writer(self, access_token: str | None) -> CalendarWriter:
        if self.config.calendar_provider == "google":
            if not access_token:
                raise CalendarApiError("A calendar access token is required")
            return GoogleCalendarProvider(access_token, self.config.calendar_api_base_url)
        return self.writer
