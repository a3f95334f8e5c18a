"""Summary: Rule-based categorization of calendar events.

Importance: Assigns every event to exactly one time category and tallies collaborators.
Alternatives: Ask an LLM to categorize each event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from timesherpa.events import event_duration_hours, event_sort_key, other_attendees
from timesherpa.models import CalendarEvent


ONE_ON_ONE = "1:1 Meetings"
TEAM_MEETINGS = "Team Meetings"
EXTERNAL_MEETINGS = "External Meetings"
FOCUS_TIME = "Focus Time"
PERSONAL_TIME = "Personal Time"
SMALL_GROUP_MEETINGS = "Small Group Meetings"
OTHER = "Other"

CATEGORY_NAMES = (
    ONE_ON_ONE,
    TEAM_MEETINGS,
    EXTERNAL_MEETINGS,
    FOCUS_TIME,
    PERSONAL_TIME,
    SMALL_GROUP_MEETINGS,
    OTHER,
)

EventPredicate = Callable[[str, int], bool]


def _title_has(title: str, *keywords: str) -> bool:
    return any(keyword in title for keyword in keywords)


def _is_one_on_one(title: str, attendee_count: int) -> bool:
    return attendee_count == 1 or _title_has(title, "1:1", "1-1", "one on one")


def _is_team_meeting(title: str, attendee_count: int) -> bool:
    return attendee_count > 5 or _title_has(title, "team", "standup", "all hands")


def _is_focus_time(title: str, attendee_count: int) -> bool:
    return _title_has(title, "focus", "work time", "blocked") or attendee_count == 0


def _is_personal_time(title: str, attendee_count: int) -> bool:
    return _title_has(title, "lunch", "break", "personal")


def _is_small_group(title: str, attendee_count: int) -> bool:
    return 0 < attendee_count <= 5


# Evaluated top-down, first match wins. Focus Time precedes Personal Time, so a
# "Lunch" event with no attendees counts as focus time.
CATEGORY_RULES: tuple[tuple[str, EventPredicate], ...] = (
    (ONE_ON_ONE, _is_one_on_one),
    (TEAM_MEETINGS, _is_team_meeting),
    (FOCUS_TIME, _is_focus_time),
    (PERSONAL_TIME, _is_personal_time),
    (SMALL_GROUP_MEETINGS, _is_small_group),
)


@dataclass
class CategoryBucket:
    """Summary: Running totals for one category.

    Importance: Accumulates hours, counts, and member events during a single pass.
    Alternatives: Group events first and sum afterwards.
    """

    hours: float = 0.0
    count: int = 0
    events: list[CalendarEvent] = field(default_factory=list)


@dataclass
class CollaboratorTally:
    name: str
    hours: float = 0.0
    meeting_count: int = 0


@dataclass
class CategorizationResult:
    """Summary: Output of categorizing an event list.

    Importance: Carries everything the aggregator needs in one structure.
    Alternatives: Return parallel dictionaries.
    """

    buckets: dict[str, CategoryBucket] = field(default_factory=dict)
    collaborators: dict[str, CollaboratorTally] = field(default_factory=dict)
    total_hours: float = 0.0
    event_count: int = 0

    def hours_for(self, category: str) -> float:
        bucket = self.buckets.get(category)
        return bucket.hours if bucket else 0.0


def categorize_event(event: CalendarEvent) -> str:
    """Summary: Resolve the category for a single event.

    Importance: Applies CATEGORY_RULES in order so tie-breaks are deterministic.
    Alternatives: Score every category and pick the maximum.
    """

    title = event.title.lower()
    attendee_count = len(other_attendees(event))
    for category, predicate in CATEGORY_RULES:
        if predicate(title, attendee_count):
            return category
    return OTHER


def categorize(events: list[CalendarEvent]) -> CategorizationResult:
    """Summary: Categorize events and tally collaborator time.

    Importance: Pure partitioning step feeding the deterministic analysis.
    Alternatives: Categorize lazily when rendering each category.
    """

    result = CategorizationResult()
    for event in events:
        hours = event_duration_hours(event)
        category = categorize_event(event)
        bucket = result.buckets.setdefault(category, CategoryBucket())
        bucket.hours += hours
        bucket.count += 1
        bucket.events.append(event)
        result.total_hours += hours
        result.event_count += 1
        for attendee in other_attendees(event):
            key = (attendee.email or attendee.name).lower()
            tally = result.collaborators.setdefault(key, CollaboratorTally(name=attendee.name))
            tally.hours += hours
            tally.meeting_count += 1
    for bucket in result.buckets.values():
        bucket.events.sort(key=event_sort_key)
    return result
