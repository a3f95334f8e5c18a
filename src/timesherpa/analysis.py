"""Summary: Deterministic calendar analysis.

Importance: Always-available analysis used directly and as the fallback when AI fails.
Alternatives: Depend on the model for every analysis and surface its errors.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from timesherpa.categorizer import (
    FOCUS_TIME,
    PERSONAL_TIME,
    CategorizationResult,
    categorize,
)
from timesherpa.events import other_attendees, to_meeting_detail
from timesherpa.models import CalendarAnalysis, CalendarEvent, Collaborator, TimeCategory


TOP_COLLABORATOR_LIMIT = 5
BUSY_EVENT_THRESHOLD = 50
LIGHT_EVENT_THRESHOLD = 20
LOW_FOCUS_SHARE = 0.2
HIGH_MEETING_PERCENTAGE = 70
LARGE_MEETING_ATTENDEES = 8

FOCUS_SUGGESTION = "Block 2-3 hour focus time sessions on your calendar for deep work"
DELEGATE_SUGGESTION = (
    "Consider delegating or declining some meetings to reduce your meeting load"
)
LARGE_MEETING_SUGGESTION = (
    "Large meetings with more than 8 attendees are often inefficient - "
    "consider consolidating them or sharing updates asynchronously"
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Summary: Round halves away from negative infinity, like JavaScript's Math.round.

    Importance: Keeps percentages stable for values such as 12.5 that bankers rounding would flip.
    Alternatives: Use the built-in round and accept half-to-even results.
    """

    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def percentage(part: float, whole: float) -> int:
    """Summary: Rounded percentage with a zero-denominator guard.

    Importance: Empty calendars report 0% instead of NaN or a ZeroDivisionError.
    Alternatives: Return None when the denominator is zero.
    """

    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))


def build_categories(result: CategorizationResult) -> tuple[TimeCategory, ...]:
    """Summary: Convert category buckets into sorted TimeCategory records.

    Importance: Largest categories come first for charts and summaries.
    Alternatives: Return categories in rule order.
    """

    categories = [
        TimeCategory(
            name=name,
            total_hours=round_half_up(bucket.hours, 1),
            percentage=percentage(bucket.hours, result.total_hours),
            event_count=bucket.count,
            meetings=tuple(to_meeting_detail(event) for event in bucket.events),
        )
        for name, bucket in result.buckets.items()
    ]
    categories.sort(key=lambda category: (-category.total_hours, category.name))
    return tuple(categories)


def rank_collaborators(
    result: CategorizationResult, limit: int = TOP_COLLABORATOR_LIMIT
) -> tuple[Collaborator, ...]:
    ranked = sorted(
        result.collaborators.values(),
        key=lambda tally: (-tally.hours, -tally.meeting_count, tally.name),
    )
    return tuple(
        Collaborator(
            name=tally.name,
            total_hours=round_half_up(tally.hours, 1),
            meeting_count=tally.meeting_count,
        )
        for tally in ranked[:limit]
    )


def build_key_insights(
    meeting_hours: float,
    meeting_percentage: int,
    focus_hours: float,
    event_count: int,
    collaborators: tuple[Collaborator, ...],
) -> tuple[str, ...]:
    """Summary: Narrative insights from fixed thresholds.

    Importance: Gives a readable summary even when no model is available.
    Alternatives: Show only charts without narrative text.
    """

    if event_count > BUSY_EVENT_THRESHOLD:
        load = "Your calendar is very busy - consider delegating or declining some meetings"
    elif event_count < LIGHT_EVENT_THRESHOLD:
        load = "Your calendar has room for more strategic activities"
    else:
        load = "Your meeting load appears balanced"
    insights = [
        f"You spent {meeting_percentage}% of your time in meetings ({meeting_hours:.1f} hours)",
        f"You have {focus_hours:.1f} hours of focus time scheduled",
        load,
    ]
    if collaborators:
        top = collaborators[0]
        insights.append(f"You spend the most time with {top.name} ({top.total_hours} hours)")
    return tuple(insights)


def build_baseline_suggestions(
    events: list[CalendarEvent],
    total_hours: float,
    focus_hours: float,
    meeting_percentage: int,
) -> tuple[str, ...]:
    """Summary: Heuristic suggestions used when the model provides none.

    Importance: Seeds the intent classifier so users always get actionable ideas.
    Alternatives: Leave suggestions empty without a model.
    """

    suggestions: list[str] = []
    if total_hours > 0 and focus_hours < total_hours * LOW_FOCUS_SHARE:
        suggestions.append(FOCUS_SUGGESTION)
    if meeting_percentage > HIGH_MEETING_PERCENTAGE:
        suggestions.append(DELEGATE_SUGGESTION)
    if any(len(other_attendees(event)) > LARGE_MEETING_ATTENDEES for event in events):
        suggestions.append(LARGE_MEETING_SUGGESTION)
    return tuple(suggestions)


def build_fallback_analysis(
    events: list[CalendarEvent], now: datetime | None = None
) -> CalendarAnalysis:
    """Summary: Compute the full deterministic CalendarAnalysis.

    Importance: Guarantees a valid analysis shape for any event list, including an empty one.
    Alternatives: Return an error when events cannot be analyzed.
    """

    result = categorize(events)
    total_hours = result.total_hours
    focus_hours = result.hours_for(FOCUS_TIME)
    meeting_hours = total_hours - focus_hours - result.hours_for(PERSONAL_TIME)
    meeting_percentage = percentage(meeting_hours, total_hours)
    collaborators = rank_collaborators(result)
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return CalendarAnalysis(
        categories=build_categories(result),
        total_meeting_hours=round_half_up(meeting_hours, 1),
        focus_hours=round_half_up(focus_hours, 1),
        key_insights=build_key_insights(
            meeting_hours, meeting_percentage, focus_hours, result.event_count, collaborators
        ),
        suggestions=build_baseline_suggestions(
            events, total_hours, focus_hours, meeting_percentage
        ),
        top_collaborators=collaborators,
        last_updated=timestamp,
        source="fallback",
    )
