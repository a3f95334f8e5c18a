"""Summary: Week-over-week windows, summaries, and trend math.

Importance: Shows whether meeting load and focus time are improving over recent weeks.
Alternatives: Report a single rolling 30-day analysis without comparisons.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

from timesherpa.analysis import percentage, round_half_up
from timesherpa.models import CalendarAnalysis, TrendMetric, WeekSummary, WeekWindow


WEEKS_COMPARED = 4
STABLE_THRESHOLD_PERCENT = 5
TREND_METRICS = ("meetingHours", "focusHours", "focusTimePercentage", "eventCount")


def build_week_windows(now: datetime, count: int = WEEKS_COMPARED) -> list[WeekWindow]:
    """Summary: Build consecutive seven-day windows ending today, oldest first.

    Importance: Each window covers six whole days plus the full end day.
    Alternatives: Align windows to calendar weeks starting on Monday.
    """

    windows = []
    for weeks_ago in range(count - 1, -1, -1):
        end_day = now.date() - timedelta(days=7 * weeks_ago)
        start_day = end_day - timedelta(days=6)
        windows.append(
            WeekWindow(
                start=datetime.combine(start_day, time.min, tzinfo=now.tzinfo),
                end=datetime.combine(end_day, time.max, tzinfo=now.tzinfo),
            )
        )
    return windows


def summarize_week(
    window: WeekWindow, analysis: CalendarAnalysis, event_count: int
) -> WeekSummary:
    """Summary: Condense one week's analysis into the numbers trends use.

    Importance: Focus share is measured against meeting plus focus time only.
    Alternatives: Measure focus share against all scheduled time.
    """

    meeting_hours = analysis.total_meeting_hours
    focus_hours = analysis.focus_hours
    return WeekSummary(
        window=window,
        total_meeting_hours=meeting_hours,
        focus_hours=focus_hours,
        focus_time_percentage=percentage(focus_hours, meeting_hours + focus_hours),
        categories=analysis.categories,
        top_category=analysis.categories[0] if analysis.categories else None,
        event_count=event_count,
    )


def calculate_trend(current: float, previous: float) -> TrendMetric:
    """Summary: Compare a metric between the latest week and the one before it.

    Importance: Small relative moves under five percent read as stable.
    Alternatives: Report raw deltas and let clients pick a threshold.
    """

    delta = current - previous
    change_percent = int(round_half_up(delta / previous * 100)) if previous else 0
    if abs(change_percent) < STABLE_THRESHOLD_PERCENT:
        direction = "stable"
    elif delta > 0:
        direction = "up"
    else:
        direction = "down"
    return TrendMetric(
        change=round_half_up(delta, 1),
        direction=direction,
        change_percent=change_percent,
    )


def _metric_values(week: WeekSummary) -> dict[str, float]:
    return {
        "meetingHours": week.total_meeting_hours,
        "focusHours": week.focus_hours,
        "focusTimePercentage": week.focus_time_percentage,
        "eventCount": week.event_count,
    }


def calculate_trends(weeks: list[WeekSummary] | tuple[WeekSummary, ...]) -> dict[str, TrendMetric]:
    """Summary: Trends between weeks[0] (most recent) and weeks[1].

    Importance: Fewer than two weeks yields zero, stable trends instead of an error.
    Alternatives: Fit a regression across all four weeks.
    """

    if len(weeks) < 2:
        return {name: TrendMetric(change=0.0, direction="stable", change_percent=0) for name in TREND_METRICS}
    current, previous = _metric_values(weeks[0]), _metric_values(weeks[1])
    return {name: calculate_trend(current[name], previous[name]) for name in TREND_METRICS}
