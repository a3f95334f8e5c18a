"""Summary: Free time-slot search for actionable suggestions.

Importance: Turns a suggestion type into concrete, bookable slots on upcoming workdays.
Alternatives: Query a provider free/busy endpoint and pick the first gap.
"""

from __future__ import annotations

import re
from collections import defaultdict
from datetime import date, datetime, time, timedelta, tzinfo

from timesherpa.events import event_end_datetime, event_start_datetime
from timesherpa.models import CalendarEvent, SuggestionType, TimeSlot, WorkweekSettings
from timesherpa.workweek import get_next_workdays


MAX_SLOTS = 4
WORKDAY_START = time(9, 0)
WORKDAY_END = time(17, 0)
FOCUS_MIN_GAP = timedelta(hours=2)
FOCUS_MAX_BLOCK = timedelta(hours=3)
FOCUS_SCAN_DAYS = 7
FOCUS_LIMIT = 3
BREAK_SCAN_DAYS = 5
BREAK_DURATION = timedelta(hours=1)

# (start, duration) candidate windows, checked in this order for each day.
MEETING_WINDOWS: tuple[tuple[time, timedelta], ...] = (
    (time(10, 0), timedelta(hours=1)),
    (time(14, 0), timedelta(hours=1)),
    (time(15, 0), timedelta(hours=1)),
)
REVIEW_WINDOWS: tuple[tuple[time, timedelta], ...] = (
    (time(9, 0), timedelta(hours=1)),
    (time(16, 0), timedelta(hours=1)),
    (time(13, 0), timedelta(hours=1)),
)
PLANNING_WINDOWS: tuple[tuple[time, timedelta], ...] = (
    (time(8, 0), timedelta(hours=2)),
    (time(17, 0), timedelta(hours=1)),
    (time(10, 0), timedelta(hours=1)),
)

TIME_MENTION = re.compile(r"\b(\d{1,2})\s*(am|pm)\b", re.IGNORECASE)

Interval = tuple[datetime, datetime]


def _format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def _make_slot(start: datetime, end: datetime, reasoning: str) -> TimeSlot:
    return TimeSlot(
        start_time=_format_time(start),
        end_time=_format_time(end),
        date=start.date().isoformat(),
        reasoning=reasoning,
    )


def _part_of_day(value: datetime) -> str:
    if value.hour < 12:
        return "morning"
    if value.hour < 17:
        return "afternoon"
    return "evening"


def _format_hours(delta: timedelta) -> str:
    hours = delta.total_seconds() / 3600
    return f"{hours:g}-hour"


def index_events_by_day(
    events: list[CalendarEvent], tz: tzinfo | None = None
) -> dict[date, list[Interval]]:
    """Summary: Group timed events into sorted local intervals per day.

    Importance: Each day is scanned independently against working hours.
    Alternatives: Re-filter the full event list for every candidate slot.
    """

    by_day: dict[date, list[Interval]] = defaultdict(list)
    for event in events:
        if event.start.is_all_day:
            continue
        start = event_start_datetime(event, tz)
        end = event_end_datetime(event, tz)
        if start is None:
            continue
        if end is None or end < start:
            end = start
        by_day[start.date()].append((start, end))
    for intervals in by_day.values():
        intervals.sort()
    return dict(by_day)


def _is_free(intervals: list[Interval], start: datetime, end: datetime) -> bool:
    """A window is free when no event starts inside it."""

    return not any(start <= event_start < end for event_start, _ in intervals)


def find_focus_slots(
    events: list[CalendarEvent],
    workweek: WorkweekSettings,
    start: date,
    tz: tzinfo | None = None,
    day_start: time = WORKDAY_START,
    day_end: time = WORKDAY_END,
    min_gap: timedelta = FOCUS_MIN_GAP,
    max_block: timedelta = FOCUS_MAX_BLOCK,
    scan_days: int = FOCUS_SCAN_DAYS,
    limit: int = FOCUS_LIMIT,
) -> list[TimeSlot]:
    """Summary: Find open focus blocks of at least two hours during working hours.

    Importance: Walks each day's meetings in order with a free-time pointer, so only real gaps qualify.
    Alternatives: Check a fixed grid of hourly candidates.
    """

    by_day = index_events_by_day(events, tz)
    slots: list[TimeSlot] = []
    for day in get_next_workdays(start, scan_days, workweek):
        window_start = datetime.combine(day, day_start)
        window_end = datetime.combine(day, day_end)
        gaps: list[Interval] = []
        pointer = window_start
        for event_start, event_end in by_day.get(day, []):
            if event_start >= window_end:
                break
            if event_start > pointer:
                gaps.append((pointer, event_start))
            pointer = max(pointer, event_end)
        if pointer < window_end:
            gaps.append((pointer, window_end))
        for gap_start, gap_end in gaps:
            if gap_end - gap_start < min_gap:
                continue
            block_end = min(gap_start + max_block, gap_end)
            reasoning = (
                f"Open {_format_hours(block_end - gap_start)} block on "
                f"{day:%A} {_part_of_day(gap_start)} with no meetings scheduled"
            )
            slots.append(_make_slot(gap_start, block_end, reasoning))
            if len(slots) >= limit:
                return slots
    return slots


def parse_time_mention(text: str) -> time | None:
    """Summary: Extract the first "<N>am" or "<N>pm" mention as a time.

    Importance: Lets break suggestions such as "lunch at 1pm" become exact slots.
    Alternatives: Use a natural-language date parser.
    """

    for match in TIME_MENTION.finditer(text):
        hour = int(match.group(1))
        if not 1 <= hour <= 12:
            continue
        meridiem = match.group(2).lower()
        if meridiem == "am":
            hour = 0 if hour == 12 else hour
        else:
            hour = 12 if hour == 12 else hour + 12
        return time(hour, 0)
    return None


def find_break_slots(
    suggestion_text: str,
    workweek: WorkweekSettings,
    start: date,
    scan_days: int = BREAK_SCAN_DAYS,
    duration: timedelta = BREAK_DURATION,
    limit: int = MAX_SLOTS,
) -> list[TimeSlot]:
    """Summary: Propose the break time mentioned in the suggestion on upcoming workdays.

    Importance: Only explicit times are honored; without one no break slot is invented.
    Alternatives: Default to a midday break when no time is mentioned.
    """

    mentioned = parse_time_mention(suggestion_text)
    if mentioned is None:
        return []
    slots: list[TimeSlot] = []
    for day in get_next_workdays(start, scan_days, workweek):
        slot_start = datetime.combine(day, mentioned)
        reasoning = f"Break at {slot_start:%H:%M} as suggested, on {day:%A}"
        slots.append(_make_slot(slot_start, slot_start + duration, reasoning))
        if len(slots) >= limit:
            break
    return slots


def find_window_slots(
    events: list[CalendarEvent],
    workweek: WorkweekSettings,
    start: date,
    windows: tuple[tuple[time, timedelta], ...],
    scan_days: int,
    limit: int,
    purpose: str,
    tz: tzinfo | None = None,
) -> list[TimeSlot]:
    """Summary: Check fixed candidate windows across upcoming workdays.

    Importance: Shared search for meeting, review, and planning suggestions.
    Alternatives: Write one loop per suggestion type.
    """

    by_day = index_events_by_day(events, tz)
    slots: list[TimeSlot] = []
    for day in get_next_workdays(start, scan_days, workweek):
        intervals = by_day.get(day, [])
        for window_start_time, duration in windows:
            window_start = datetime.combine(day, window_start_time)
            window_end = window_start + duration
            if not _is_free(intervals, window_start, window_end):
                continue
            reasoning = f"{day:%A} {_part_of_day(window_start)} is open for {purpose}"
            slots.append(_make_slot(window_start, window_end, reasoning))
            if len(slots) >= limit:
                return slots
    return slots


def find_time_slots(
    suggestion_type: SuggestionType,
    events: list[CalendarEvent],
    workweek: WorkweekSettings,
    suggestion_text: str,
    start: date,
    tz: tzinfo | None = None,
) -> list[TimeSlot]:
    """Summary: Dispatch slot search by suggestion type.

    Importance: Single entrypoint so every actionable type maps to exactly one strategy.
    Alternatives: Let callers pick the search function directly.
    """

    if suggestion_type is SuggestionType.FOCUS_TIME:
        return find_focus_slots(events, workweek, start, tz=tz)
    if suggestion_type is SuggestionType.BREAK:
        return find_break_slots(suggestion_text, workweek, start)
    if suggestion_type is SuggestionType.MEETING_SCHEDULING:
        return find_window_slots(
            events, workweek, start, MEETING_WINDOWS, 7, 4, "a meeting", tz=tz
        )
    if suggestion_type is SuggestionType.REVIEW_SESSION:
        return find_window_slots(
            events, workweek, start, REVIEW_WINDOWS, 5, 3, "a meeting review session", tz=tz
        )
    if suggestion_type is SuggestionType.PLANNING_TIME:
        return find_window_slots(
            events, workweek, start, PLANNING_WINDOWS, 7, 3, "strategic planning", tz=tz
        )
    return []
