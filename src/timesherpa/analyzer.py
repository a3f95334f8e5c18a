"""Summary: AI-assisted calendar analysis with deterministic fallback.

Importance: Adds model-written insights while guaranteeing a usable analysis on any failure.
Alternatives: Surface model errors to the caller and let them retry.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, timedelta, tzinfo
from typing import Any, Union

from timesherpa.ai import AiConfigurationError, AiProvider, estimate_tokens
from timesherpa.analysis import build_fallback_analysis, round_half_up
from timesherpa.classifier import build_actionable_suggestions
from timesherpa.events import (
    event_duration_hours,
    event_timestamp,
    is_recurring_hint,
    other_attendees,
)
from timesherpa.models import (
    CalendarAnalysis,
    CalendarEvent,
    Collaborator,
    ScheduleSuggestions,
    WorkweekSettings,
)
from timesherpa.workweek import DEFAULT_WORKWEEK


logger = logging.getLogger(__name__)

HISTORY_PURPOSE = "calendar_analysis"
UPCOMING_PURPOSE = "upcoming_analysis"

UPCOMING_UNAVAILABLE = ScheduleSuggestions(
    suggestions=("Unable to analyze upcoming schedule at this time.",),
    anomalies=(),
    focus_time_recommendations=("Try to schedule some focus time blocks.",),
)
UPCOMING_UNPARSEABLE = ScheduleSuggestions(
    suggestions=("Review your upcoming schedule for optimization opportunities.",),
    anomalies=(),
    focus_time_recommendations=("Consider blocking time for focused work.",),
)

HISTORY_PROMPT = """
You are analyzing calendar events for a leader or executive to help them understand their time allocation.

Events to analyze: {events}

Categorize each event into EXACTLY one of these categories based on title, attendees, and patterns:
- "1:1 Meetings": exactly one other attendee, or titles containing "1:1", "1-1", "one on one"
- "Team Meetings": more than five attendees, standups, team syncs, all-hands
- "External Meetings": attendees from outside the organization, client, customer or vendor meetings
- "Focus Time": blocked time for deep work, no attendees, titles like "focus", "work time", "blocked"
- "Personal Time": lunch, breaks, personal appointments
- "Other": everything else

Identify the top 5 people the user spends the most time with.

Provide 3-5 key insights about their time management patterns (meeting load, balance between
meetings and focus time, collaboration patterns, schedule density, optimization opportunities).

Provide 2-4 specific suggestions the user could act on, for example blocking focus time,
taking breaks, consolidating or delegating meetings, scheduling 1:1s, or planning time.

Return ONLY valid JSON in this exact structure:
{{
  "keyInsights": ["You spend 60% of your time in meetings"],
  "suggestions": ["Block Thursday afternoon for deep work"],
  "topCollaborators": [{{"name": "Jane Doe", "totalHours": 5.5, "meetingCount": 4}}]
}}
"""

UPCOMING_PROMPT = """
You are a productivity coach analyzing an executive's upcoming week to help them optimize their schedule.

Upcoming events for the next 7 days: {events}

Provide:
1. SUGGESTIONS: 2-4 specific, actionable recommendations (back-to-back meeting warnings,
   meeting-heavy days, missing 1:1s or team syncs, late meetings or missing lunch breaks).
2. ANOMALIES: 1-3 unusual patterns compared to typical executive schedules.
3. FOCUS TIME RECOMMENDATIONS: 2-3 specific suggestions for deep work, naming days and times.

Return ONLY valid JSON in this exact structure:
{{
  "suggestions": ["Schedule a 30-min lunch break at 1pm on Tuesday"],
  "anomalies": ["No team meetings scheduled this week"],
  "focusTimeRecommendations": ["Block Thursday 2-5pm for strategic planning"]
}}
"""


@dataclass(frozen=True)
class ParsedJson:
    """Summary: Successful extraction of a JSON object from model output.

    Importance: Carries the decoded object to validation.
    Alternatives: Return the raw dictionary directly.
    """

    data: dict[str, Any]


@dataclass(frozen=True)
class ParseFallback:
    """Summary: Extraction failed; the caller should use its fallback.

    Importance: Makes the failure reason loggable without raising.
    Alternatives: Raise a parsing exception.
    """

    reason: str


ParseResult = Union[ParsedJson, ParseFallback]


def extract_json_block(text: str) -> str | None:
    """Summary: Return the first balanced `{...}` block in free-form text.

    Importance: Models often wrap JSON in prose or code fences.
    Alternatives: Require the model to return JSON only and parse strictly.
    """

    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def parse_model_json(text: str) -> ParseResult:
    """Summary: Best-effort structured extraction from model output.

    Importance: Callers branch on the result type and never see decoding exceptions.
    Alternatives: Let json.JSONDecodeError propagate.
    """

    block = extract_json_block(text)
    if block is None:
        return ParseFallback("no JSON object found in model response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        return ParseFallback(f"invalid JSON in model response: {exc.msg}")
    if not isinstance(data, dict):
        return ParseFallback("model response JSON is not an object")
    return ParsedJson(data)


def _string_list(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    items = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return items or None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) and number >= 0 else None


def _collaborators(value: Any) -> tuple[Collaborator, ...] | None:
    """Summary: Validate model-provided collaborators.

    Importance: Accepts both `totalHours` and the older `hours` key; drops malformed entries.
    Alternatives: Trust the model output as-is.
    """

    if not isinstance(value, list):
        return None
    collaborators: list[Collaborator] = []
    for item in value:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            continue
        hours = _number(item.get("totalHours", item.get("hours")))
        if hours is None:
            continue
        count = item.get("meetingCount", 0)
        collaborators.append(
            Collaborator(
                name=item["name"],
                total_hours=round_half_up(hours, 1),
                meeting_count=count if isinstance(count, int) and not isinstance(count, bool) else 0,
            )
        )
    collaborators.sort(key=lambda collaborator: -collaborator.total_hours)
    return tuple(collaborators[:5]) or None


def summarize_events(events: list[CalendarEvent]) -> list[dict[str, Any]]:
    """Summary: Compact event summaries embedded in prompts.

    Importance: Gives the model enough context without sending raw provider payloads.
    Alternatives: Send full event JSON to the model.
    """

    summaries = []
    for event in events:
        attendees = other_attendees(event)
        organizer = event.organizer
        summaries.append(
            {
                "title": event.title,
                "description": event.description,
                "duration": round(event_duration_hours(event), 2),
                "attendeeCount": len(attendees),
                "attendees": ", ".join(
                    attendee.email or attendee.display_name or "Unknown" for attendee in attendees
                ),
                "organizer": (organizer.email or organizer.display_name or "") if organizer else "",
                "isRecurring": is_recurring_hint(event.title),
                "time": event_timestamp(event.start),
            }
        )
    return summaries


def build_history_prompt(events: list[CalendarEvent]) -> str:
    return HISTORY_PROMPT.format(events=json.dumps(summarize_events(events), indent=2))


def build_upcoming_prompt(events: list[CalendarEvent]) -> str:
    return UPCOMING_PROMPT.format(events=json.dumps(summarize_events(events), indent=2))


def merge_ai_narrative(fallback: CalendarAnalysis, data: dict[str, Any]) -> CalendarAnalysis:
    """Summary: Overlay model narrative fields on the deterministic analysis.

    Importance: Categories, meetings, and hours always come from the deterministic pass.
    Alternatives: Trust the model's category totals.
    """

    insights = _string_list(data.get("keyInsights"))
    suggestions = _string_list(data.get("suggestions"))
    collaborators = _collaborators(data.get("topCollaborators"))
    if insights is None and suggestions is None and collaborators is None:
        return fallback
    return replace(
        fallback,
        key_insights=insights or fallback.key_insights,
        suggestions=suggestions or fallback.suggestions,
        top_collaborators=collaborators or fallback.top_collaborators,
        source="ai",
    )


@dataclass(frozen=True)
class CalendarAnalyzer:
    """Summary: Runs calendar analysis through the model with a deterministic safety net.

    Importance: The single place where model failures are converted into fallbacks.
    Alternatives: Handle fallbacks in each HTTP route.
    """

    ai_provider: AiProvider
    model_name: str = "mock"
    tz: tzinfo | None = None

    def analyze(
        self,
        events: list[CalendarEvent],
        is_upcoming: bool = False,
        workweek: WorkweekSettings = DEFAULT_WORKWEEK,
        today: date | None = None,
    ) -> CalendarAnalysis | ScheduleSuggestions:
        """Summary: Analyze history or the upcoming week depending on the mode.

        Importance: Mirrors the two analysis modes exposed to clients.
        Alternatives: Expose only the mode-specific methods.
        """

        if is_upcoming:
            return self.analyze_upcoming(events)
        return self.analyze_history(events, workweek=workweek, today=today)

    def analyze_history(
        self,
        events: list[CalendarEvent],
        workweek: WorkweekSettings = DEFAULT_WORKWEEK,
        today: date | None = None,
        upcoming_events: list[CalendarEvent] | None = None,
    ) -> CalendarAnalysis:
        """Summary: Produce a CalendarAnalysis with actionable suggestions.

        Importance: Never raises for model problems; the deterministic analysis backs every field.
        Alternatives: Return a partial analysis when the model fails.
        """

        fallback = build_fallback_analysis(events)
        analysis = self._with_ai_narrative(events, fallback)
        search_start = (today or date.today()) + timedelta(days=1)
        busy_events = upcoming_events if upcoming_events is not None else events
        actionable = build_actionable_suggestions(
            analysis.suggestions, busy_events, workweek, search_start, tz=self.tz
        )
        return replace(analysis, actionable_suggestions=actionable)

    def analyze_upcoming(self, events: list[CalendarEvent]) -> ScheduleSuggestions:
        """Summary: Produce suggestions, anomalies, and focus recommendations for the next week.

        Importance: Uses fixed generic strings whenever the model cannot be used.
        Alternatives: Compute upcoming recommendations deterministically.
        """

        prompt = build_upcoming_prompt(events)
        try:
            text, latency_ms = self.ai_provider.generate_text(prompt, purpose=UPCOMING_PURPOSE)
        except AiConfigurationError as exc:
            logger.warning("AI provider not configured (%s); using generic upcoming suggestions.", exc)
            return UPCOMING_UNAVAILABLE
        except Exception as exc:
            logger.warning("Upcoming analysis failed (%s); using generic upcoming suggestions.", exc)
            return UPCOMING_UNAVAILABLE
        logger.info("Upcoming analysis from %s in %sms.", self.model_name, latency_ms)
        result = parse_model_json(text)
        if isinstance(result, ParseFallback):
            logger.warning("Could not parse upcoming analysis: %s.", result.reason)
            return UPCOMING_UNPARSEABLE
        suggestions = _string_list(result.data.get("suggestions"))
        if suggestions is None:
            logger.warning("Upcoming analysis is missing suggestions.")
            return UPCOMING_UNPARSEABLE
        return ScheduleSuggestions(
            suggestions=suggestions,
            anomalies=_string_list(result.data.get("anomalies")) or (),
            focus_time_recommendations=(
                _string_list(result.data.get("focusTimeRecommendations")) or ()
            ),
        )

    def _with_ai_narrative(
        self, events: list[CalendarEvent], fallback: CalendarAnalysis
    ) -> CalendarAnalysis:
        if not events:
            return fallback
        prompt = build_history_prompt(events)
        try:
            text, latency_ms = self.ai_provider.generate_text(prompt, purpose=HISTORY_PURPOSE)
        except AiConfigurationError as exc:
            logger.warning("AI provider not configured (%s); using fallback analysis.", exc)
            return fallback
        except Exception as exc:
            logger.warning("AI analysis failed (%s); using fallback analysis.", exc)
            return fallback
        logger.info(
            "Analyzed %s events with %s in %sms (~%s prompt tokens).",
            len(events),
            self.model_name,
            latency_ms,
            estimate_tokens(prompt),
        )
        result = parse_model_json(text)
        if isinstance(result, ParseFallback):
            logger.warning("Could not parse AI analysis: %s; using fallback analysis.", result.reason)
            return fallback
        try:
            return merge_ai_narrative(fallback, result.data)
        except Exception as exc:
            logger.warning("Could not merge AI analysis (%s); using fallback analysis.", exc)
            return fallback
