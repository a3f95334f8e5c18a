"""Summary: Workweek date utilities and workweek sources.

Importance: Keeps slot suggestions on days the user actually works.
Alternatives: Use a business-day calendar library with holiday support.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta

from timesherpa.models import WEEKDAY_NAMES, WorkweekSettings


DEFAULT_WORKWEEK = WorkweekSettings()
MAX_LOOKAHEAD_DAYS = 14


def is_workday(day: date, workweek: WorkweekSettings = DEFAULT_WORKWEEK) -> bool:
    """Summary: Check whether a day is flagged as a workday.

    Importance: Single source of truth for workday membership.
    Alternatives: Compare weekday numbers inline at each call site.
    """

    return workweek.is_enabled(day.weekday())


def get_next_workdays(
    start: date,
    count: int,
    workweek: WorkweekSettings = DEFAULT_WORKWEEK,
    max_days: int = MAX_LOOKAHEAD_DAYS,
) -> list[date]:
    """Summary: Enumerate up to `count` workdays starting at `start` (inclusive).

    Importance: Bounds the scan so sparse or empty workweeks return early instead of hanging.
    Alternatives: Loop until `count` workdays are found.
    """

    workdays: list[date] = []
    for offset in range(max_days):
        if len(workdays) >= count:
            break
        candidate = start + timedelta(days=offset)
        if is_workday(candidate, workweek):
            workdays.append(candidate)
    return workdays


def get_workdays_in_range(
    start: date, end: date, workweek: WorkweekSettings = DEFAULT_WORKWEEK
) -> list[date]:
    """Summary: List every workday between two dates, inclusive.

    Importance: Supports range-based reporting over a configured workweek.
    Alternatives: Filter a full date range at the call site.
    """

    workdays: list[date] = []
    current = start
    while current <= end:
        if is_workday(current, workweek):
            workdays.append(current)
        current += timedelta(days=1)
    return workdays


def parse_workweek(text: str) -> WorkweekSettings:
    """Summary: Parse a comma-separated list of day names into settings.

    Importance: Allows workweeks to be configured from env vars and CLI flags.
    Alternatives: Accept only JSON dictionaries.
    """

    tokens = {token.strip().lower() for token in text.split(",") if token.strip()}
    unknown = tokens - set(WEEKDAY_NAMES) - {day[:3] for day in WEEKDAY_NAMES}
    if unknown:
        raise ValueError(f"Unknown workweek days: {', '.join(sorted(unknown))}")
    return WorkweekSettings(
        **{name: name in tokens or name[:3] in tokens for name in WEEKDAY_NAMES}
    )


class WorkweekSource(ABC):
    """Summary: Abstract lookup of a user's workweek settings.

    Importance: Decouples the engine from the user preferences store.
    Alternatives: Pass workweek settings explicitly everywhere.
    """

    @abstractmethod
    def get_user_workweek(self, user_id: str) -> WorkweekSettings:
        """Summary: Return the workweek for a user.

        Importance: Feeds slot search with per-user availability.
        Alternatives: Read settings from the request payload.
        """


@dataclass
class StaticWorkweekSource(WorkweekSource):
    """Summary: In-memory workweek source with a configurable default.

    Importance: Serves users without stored preferences and supports tests.
    Alternatives: Require every user to save settings before analysis.
    """

    default: WorkweekSettings = DEFAULT_WORKWEEK
    overrides: dict[str, WorkweekSettings] = field(default_factory=dict)

    def get_user_workweek(self, user_id: str) -> WorkweekSettings:
        return self.overrides.get(user_id, self.default)
