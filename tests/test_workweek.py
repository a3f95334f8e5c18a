"""Summary: Tests for workweek utilities.

Importance: Slot search depends on enumerating the right workdays.
Alternatives: Validate workday handling only through slot search tests.
"""

from __future__ import annotations

from datetime import date

import pytest

from timesherpa.models import WorkweekSettings
from timesherpa.workweek import (
    StaticWorkweekSource,
    get_next_workdays,
    get_workdays_in_range,
    is_workday,
    parse_workweek,
)


def test_next_workdays_skip_weekend() -> None:
    """Summary: Starting on a Saturday yields the following Monday onwards.

    Importance: Suggestions must never land on non-working days.
    Alternatives: Filter weekends after slot search.
    """

    days = get_next_workdays(date(2025, 1, 18), 3)
    assert days == [date(2025, 1, 20), date(2025, 1, 21), date(2025, 1, 22)]


def test_next_workdays_include_start() -> None:
    """Summary: A workday start date is the first result.

    Importance: Callers decide whether today counts by choosing the start date.
    Alternatives: Always begin from the day after start.
    """

    assert get_next_workdays(date(2025, 1, 15), 2) == [date(2025, 1, 15), date(2025, 1, 16)]


def test_next_workdays_empty_workweek_returns_early() -> None:
    """Summary: A workweek with no days enabled returns an empty list.

    Importance: The bounded scan prevents an infinite loop.
    Alternatives: Raise on empty workweeks.
    """

    nobody_works = WorkweekSettings(
        monday=False, tuesday=False, wednesday=False, thursday=False, friday=False
    )
    assert get_next_workdays(date(2025, 1, 13), 5, nobody_works) == []


def test_next_workdays_respects_custom_week() -> None:
    """Summary: Weekend-only workweeks yield weekend days.

    Importance: Users with unusual schedules get slots on their days.
    Alternatives: Support only Monday to Friday.
    """

    weekend = WorkweekSettings(
        monday=False,
        tuesday=False,
        wednesday=False,
        thursday=False,
        friday=False,
        saturday=True,
        sunday=True,
    )
    assert get_next_workdays(date(2025, 1, 13), 2, weekend) == [date(2025, 1, 18), date(2025, 1, 19)]
    assert not is_workday(date(2025, 1, 13), weekend)


def test_next_workdays_single_day_week_spans_two_weeks() -> None:
    """Summary: A Wednesday-only week yields two Wednesdays from a Monday start.

    Importance: Sparse workweeks still fill the request inside the 14-day bound.
    Alternatives: Stop scanning after a single week.
    """

    wednesdays = WorkweekSettings.from_dict(
        {
            "monday": False,
            "tuesday": False,
            "wednesday": True,
            "thursday": False,
            "friday": False,
        }
    )
    days = get_next_workdays(date(2025, 1, 13), 2, wednesdays)
    assert days == [date(2025, 1, 15), date(2025, 1, 22)]
    assert all(day.weekday() == 2 for day in days)


def test_workdays_in_range() -> None:
    """Summary: A full calendar week contains five default workdays.

    Importance: Range reporting counts only configured days.
    Alternatives: Count calendar days.
    """

    days = get_workdays_in_range(date(2025, 1, 13), date(2025, 1, 19))
    assert len(days) == 5
    assert days[0] == date(2025, 1, 13)
    assert days[-1] == date(2025, 1, 17)


def test_parse_workweek_accepts_short_and_full_names() -> None:
    """Summary: Parse mixed day name formats.

    Importance: Workweeks are configured from env vars and CLI flags.
    Alternatives: Accept only JSON.
    """

    settings = parse_workweek("mon, Wednesday,fri")
    assert settings.monday and settings.wednesday and settings.friday
    assert not settings.tuesday
    assert not settings.saturday


def test_parse_workweek_rejects_unknown_days() -> None:
    """Summary: Unknown day names raise ValueError.

    Importance: Typos should not silently disable a day.
    Alternatives: Ignore unknown names.
    """

    with pytest.raises(ValueError):
        parse_workweek("monday,funday")


def test_workweek_from_partial_dict_uses_defaults() -> None:
    """Summary: Missing days fall back to the default workweek.

    Importance: Clients can send only the days they change.
    Alternatives: Require all seven flags.
    """

    settings = WorkweekSettings.from_dict({"saturday": True, "friday": False})
    assert settings.saturday
    assert not settings.friday
    assert settings.monday


def test_static_workweek_source_overrides() -> None:
    """Summary: Per-user overrides take precedence over the default.

    Importance: Lets the API honor stored user preferences.
    Alternatives: Use one workweek for every user.
    """

    custom = WorkweekSettings(friday=False)
    source = StaticWorkweekSource(overrides={"user-1": custom})
    assert source.get_user_workweek("user-1") is custom
    assert source.get_user_workweek("user-2").friday
