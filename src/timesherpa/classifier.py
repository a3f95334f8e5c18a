"""Summary: Suggestion intent classification helpers.

Importance: Decides which free-text suggestions can become calendar events.
Alternatives: Use an LLM-based intent classifier for higher accuracy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Callable

from timesherpa.models import (
    ActionableSuggestion,
    CalendarEvent,
    SuggestionIntent,
    SuggestionType,
    WorkweekSettings,
)
from timesherpa.slots import MAX_SLOTS, find_time_slots


def _has_any(text: str, *keywords: str) -> bool:
    return any(keyword in text for keyword in keywords)


def _is_focus_time(text: str) -> bool:
    return _has_any(text, "focus time", "deep work") or (
        "block" in text and _has_any(text, "time", "hour")
    )


def _is_break(text: str) -> bool:
    return _has_any(text, "break", "lunch")


def _is_review_session(text: str) -> bool:
    return _has_any(text, "consolidat", "delegat") and "meeting" in text


def _is_meeting_scheduling(text: str) -> bool:
    return _has_any(text, "1:1", "1-1") or ("schedule" in text and "meeting" in text)


def _is_planning_time(text: str) -> bool:
    return _has_any(text, "plan", "strategy") or ("review" in text and "meeting" not in text)


def _is_work_life_balance(text: str) -> bool:
    return _has_any(text, "work-life", "balance") or ("late" in text and "meeting" in text)


@dataclass(frozen=True)
class IntentRule:
    """Summary: One keyword rule mapping text to an intent.

    Importance: Keeps each rule's outcome next to its predicate.
    Alternatives: Encode rules as a chain of if statements.
    """

    matches: Callable[[str], bool]
    intent: SuggestionIntent


# Order is load-bearing: review_session must be tested before meeting_scheduling
# so "consolidate your meetings" is not read as a request to schedule one.
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        _is_focus_time,
        SuggestionIntent(
            type=SuggestionType.FOCUS_TIME,
            actionable=True,
            action_label="Block Focus Time",
            action_description="Reserve a 2-3 hour block for deep work",
        ),
    ),
    IntentRule(
        _is_break,
        SuggestionIntent(
            type=SuggestionType.BREAK,
            actionable=True,
            action_label="Schedule Break",
            action_description="Add a recurring break to recharge during the day",
        ),
    ),
    IntentRule(
        _is_review_session,
        SuggestionIntent(
            type=SuggestionType.REVIEW_SESSION,
            actionable=True,
            action_label="Schedule Review Session",
            action_description="Set aside time to review meetings to consolidate or delegate",
        ),
    ),
    IntentRule(
        _is_meeting_scheduling,
        SuggestionIntent(
            type=SuggestionType.MEETING_SCHEDULING,
            actionable=True,
            action_label="Schedule Meeting",
            action_description="Find an open slot for this meeting",
        ),
    ),
    IntentRule(
        _is_planning_time,
        SuggestionIntent(
            type=SuggestionType.PLANNING_TIME,
            actionable=True,
            action_label="Block Planning Time",
            action_description="Reserve time for strategic planning",
        ),
    ),
    IntentRule(
        _is_work_life_balance,
        SuggestionIntent(
            type=SuggestionType.WORK_LIFE_BALANCE,
            actionable=False,
            action_description="Advisory only, review your working hours",
        ),
    ),
)

GENERAL_INTENT = SuggestionIntent(type=SuggestionType.GENERAL, actionable=False)


def classify_suggestion(text: str) -> SuggestionIntent:
    """Summary: Map a suggestion string to an intent using ordered keyword rules.

    Importance: Deterministic, fast classification that works without a model.
    Alternatives: Require the model to tag suggestions with an action type.
    """

    lowered = text.lower()
    for rule in INTENT_RULES:
        if rule.matches(lowered):
            return rule.intent
    return GENERAL_INTENT


def build_actionable_suggestions(
    suggestions: tuple[str, ...] | list[str],
    events: list[CalendarEvent],
    workweek: WorkweekSettings,
    start: date,
    tz: tzinfo | None = None,
) -> tuple[ActionableSuggestion, ...]:
    """Summary: Classify suggestions and attach candidate slots to actionable ones.

    Importance: Produces the schedulable suggestions embedded in every analysis.
    Alternatives: Search for slots only when the user opens a suggestion.
    """

    actionable: list[ActionableSuggestion] = []
    for index, text in enumerate(suggestions, start=1):
        intent = classify_suggestion(text)
        slots = None
        if intent.actionable:
            found = find_time_slots(intent.type, events, workweek, text, start, tz=tz)
            slots = tuple(found[:MAX_SLOTS])
        actionable.append(
            ActionableSuggestion(
                id=f"suggestion-{index}",
                text=text,
                type=intent.type,
                actionable=intent.actionable,
                action_label=intent.action_label,
                action_description=intent.action_description,
                suggested_time_slots=slots,
            )
        )
    return tuple(actionable)
