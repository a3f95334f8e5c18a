"""Summary: Tests for calendar providers and writers.

Importance: Ensures events are read from fixtures, .ics files, and the Calendar API correctly.
Alternatives: Test against a live calendar account.
"""

from __future__ import annotations

import io
import json
import urllib.error
import urllib.request
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from timesherpa.calendar import (
    CalendarApiError,
    CalendarClientFactory,
    GoogleCalendarProvider,
    IcsCalendarProvider,
    MockCalendarProvider,
    RecordingCalendarWriter,
    default_range,
)
from timesherpa.config import AppConfig


def _config(calendar_provider: str, fixture: str = "data/mock_events.json") -> AppConfig:
    """Summary: Build an AppConfig for calendar factory tests.

    Importance: Avoids reading defaults from disk.
    Alternatives: Load AppConfig from environment variables.
    """

    return AppConfig(
        ai_provider="mock",
        gemini_api_key=None,
        gemini_model="gemini-1.5-flash",
        gemini_base_url="https://generativelanguage.googleapis.com/v1beta",
        ollama_url="http://localhost:11434",
        ollama_model="llama3",
        calendar_provider=calendar_provider,
        calendar_api_base_url="https://calendar.test/v3",
        calendar_fixture_path=fixture,
        timezone="UTC",
        default_workweek="monday,tuesday,wednesday,thursday,friday",
        analysis_lookback_days=30,
        api_host="127.0.0.1",
        api_port=8000,
        api_key="",
    )


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _write_fixture(tmp_path: Path) -> Path:
    """Summary: Write a two-event fixture in Google event shape.

    Importance: Exercises range filtering across a known boundary.
    Alternatives: Use the bundled data/mock_events.json.
    """

    fixture = tmp_path / "events.json"
    fixture.write_text(
        json.dumps(
            [
                {
                    "id": "inside",
                    "summary": "1:1 with John",
                    "start": {"dateTime": "2025-01-20T10:00:00Z"},
                    "end": {"dateTime": "2025-01-20T11:00:00Z"},
                    "attendees": [{"email": "john@company.com"}],
                },
                {
                    "id": "outside",
                    "summary": "Old meeting",
                    "start": {"dateTime": "2024-11-01T10:00:00Z"},
                    "end": {"dateTime": "2024-11-01T11:00:00Z"},
                },
            ]
        ),
        encoding="utf-8",
    )
    return fixture


def test_default_range_is_last_thirty_days() -> None:
    """Summary: Missing bounds default to the last 30 days.

    Importance: Every provider shares the same default window.
    Alternatives: Require explicit bounds.
    """

    end = datetime(2025, 1, 26, tzinfo=timezone.utc)
    start, resolved_end = default_range(None, end)
    assert resolved_end == end
    assert end - start == timedelta(days=30)


def test_mock_calendar_provider_filters_range(tmp_path: Path) -> None:
    """Summary: Fixture events outside the requested range are excluded.

    Importance: Mock mode behaves like a real provider query.
    Alternatives: Return every fixture event.
    """

    fixture = _write_fixture(tmp_path)
    provider = MockCalendarProvider(fixture)
    events = provider.fetch_events(
        datetime(2025, 1, 1, tzinfo=timezone.utc), datetime(2025, 1, 31, tzinfo=timezone.utc)
    )
    assert [event.id for event in events] == ["inside"]
    assert len(MockCalendarProvider(fixture, filter_by_range=False).fetch_events()) == 2


def test_bundled_fixture_parses() -> None:
    """Summary: The bundled fixture loads and flags generated events.

    Importance: The CLI demo depends on this fixture.
    Alternatives: Build demo events in code.
    """

    events = MockCalendarProvider(Path("data/mock_events.json"), filter_by_range=False).fetch_events()
    assert len(events) >= 10
    assert any(event.generated for event in events)
    assert any(event.start.is_all_day for event in events)


def test_ics_calendar_provider(tmp_path: Path) -> None:
    """Summary: Parse an .ics file into calendar events.

    Importance: Validates local calendar imports.
    Alternatives: Skip .ics support tests.
    """

    ics = tmp_path / "sample.ics"
    ics.write_text(
        "\n".join(
            [
                "BEGIN:VCALENDAR",
                "BEGIN:VEVENT",
                "UID:test-1",
                "DTSTART:20250115T100000Z",
                "DTEND:20250115T103000Z",
                "SUMMARY:Team Sync",
                "ATTENDEE;CN=A:MAILTO:a@example.com",
                "ATTENDEE:MAILTO:b@example.com",
                "END:VEVENT",
                "BEGIN:VEVENT",
                "UID:test-2",
                "DTSTART;VALUE=DATE:20250116",
                "DTEND;VALUE=DATE:20250117",
                "SUMMARY:Offsite",
                "END:VEVENT",
                "END:VCALENDAR",
            ]
        ),
        encoding="utf-8",
    )
    events = IcsCalendarProvider(ics, filter_by_range=False).fetch_events()
    assert events[0].id == "test-1"
    assert [attendee.email for attendee in events[0].attendees] == ["a@example.com", "b@example.com"]
    assert events[0].start.date_time == datetime(2025, 1, 15, 10, tzinfo=timezone.utc)
    assert events[1].start.is_all_day


def test_google_provider_pages_through_results(monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: The Google provider follows nextPageToken and sends the bearer token.

    Importance: Busy calendars span multiple result pages.
    Alternatives: Read only the first page.
    """

    requests: list[urllib.request.Request] = []
    pages = [
        {"items": [{"id": "a", "summary": "One"}], "nextPageToken": "p2"},
        {"items": [{"id": "b", "summary": "Two"}]},
    ]

    def _fake_urlopen(request: urllib.request.Request, timeout: int) -> _FakeResponse:
        requests.append(request)
        return _FakeResponse(json.dumps(pages[len(requests) - 1]).encode("utf-8"))

    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen)
    provider = GoogleCalendarProvider("tok", "https://calendar.test/v3")
    events = provider.fetch_events(
        datetime(2025, 1, 1, tzinfo=timezone.utc), datetime(2025, 1, 31, tzinfo=timezone.utc)
    )
    assert [event.id for event in events] == ["a", "b"]
    assert requests[0].get_header("Authorization") == "Bearer tok"
    assert "singleEvents=true" in requests[0].full_url
    assert "orderBy=startTime" in requests[0].full_url
    assert requests[0].full_url.startswith("https://calendar.test/v3/calendars/primary/events?")
    assert "pageToken=p2" in requests[1].full_url


def test_google_provider_insert_and_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Inserts POST JSON; HTTP failures become CalendarApiError.

    Importance: Callers handle one exception type for calendar failures.
    Alternatives: Propagate urllib errors.
    """

    sent: list[urllib.request.Request] = []

    def _fake_urlopen(request: urllib.request.Request, timeout: int) -> _FakeResponse:
        sent.append(request)
        return _FakeResponse(b'{"id": "new", "htmlLink": "https://calendar.test/e/new"}')

    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen)
    provider = GoogleCalendarProvider("tok", "https://calendar.test/v3")
    created = provider.insert_event({"summary": "Focus"})
    assert created["id"] == "new"
    assert sent[0].get_method() == "POST"
    assert json.loads(sent[0].data.decode("utf-8")) == {"summary": "Focus"}

    def _failing_urlopen(request: urllib.request.Request, timeout: int) -> None:
        raise urllib.error.HTTPError(request.full_url, 401, "Unauthorized", None, io.BytesIO(b"invalid token"))

    monkeypatch.setattr(urllib.request, "urlopen", _failing_urlopen)
    with pytest.raises(CalendarApiError, match="invalid token"):
        provider.fetch_events()


def test_client_factory_modes(tmp_path: Path) -> None:
    """Summary: Mock mode reads the fixture; Google mode requires a token.

    Importance: Provider choice lives in configuration.
    Alternatives: Choose providers in each route.
    """

    fixture = _write_fixture(tmp_path)
    mock_factory = CalendarClientFactory(_config("mock", str(fixture)))
    assert isinstance(mock_factory.provider(None), MockCalendarProvider)
    assert isinstance(mock_factory.calendar_writer(None), RecordingCalendarWriter)
    google_factory = CalendarClientFactory(_config("google"))
    assert isinstance(google_factory.provider("tok"), GoogleCalendarProvider)
    with pytest.raises(CalendarApiError):
        google_factory.provider(None)
