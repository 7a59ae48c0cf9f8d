"""Roll-up of completed advice sessions into dashboard statistics."""
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional, Sequence, Union

from wellness.analysis.trend import STABLE, engagement_trend


@dataclass
class CompletionStats:
    total: int               # completions in the long window
    weekly: int              # completions in the short window
    daily_average: float     # mean completions per active day in the long window
    best_day: int            # max completions on a single day
    best_week: int           # max completions in any rolling 7-day span
    active_day_rate: float   # share of long-window days with >= 1 completion, 0-1, 3 decimals
    trend_pct: float         # last 7 days vs previous 7 days, percent
    engagement_trend: str = STABLE


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def daily_counts(events: Iterable[Union[date, datetime]]) -> Dict[date, int]:
    return dict(Counter(_as_date(e) for e in events))


def _window_total(counts: Dict[date, int], end: date, days: int) -> int:
    """Completions in the `days` calendar days ending at `end` (inclusive)."""
    start = end - timedelta(days=days - 1)
    return sum(n for day, n in counts.items() if start <= day <= end)


def week_over_week_pct(counts: Dict[date, int], today: date) -> float:
    """(recentAvg - prevAvg) / prevAvg * 100 over two consecutive 7-day spans."""
    recent_avg = _window_total(counts, today, 7) / 7
    previous_avg = _window_total(counts, today - timedelta(days=7), 7) / 7
    if previous_avg == 0:
        return 0.0
    return round((recent_avg - previous_avg) / previous_avg * 100, 1)


def best_rolling_week(counts: Dict[date, int]) -> int:
    if not counts:
        return 0
    return max(_window_total(counts, day + timedelta(days=6), 7) for day in counts)


def aggregate_completions(
    events: Iterable[Union[date, datetime]],
    today: date,
    long_window_days: int = 30,
    short_window_days: int = 7,
    session_actions: Optional[Sequence[Optional[str]]] = None,
) -> CompletionStats:
    """
    Summarise completion events relative to `today`.

    Args:
        events: one entry per completion (date or timestamp).
        today: last day of every window.
        long_window_days: span for totals, averages and the active-day rate.
        short_window_days: span for the weekly count.
        session_actions: optional response action per session in the long
            window, oldest first, for the engagement trend.

    Returns:
        CompletionStats with averages and percentages rounded to one decimal.
    """
    long_start = today - timedelta(days=long_window_days - 1)
    counts = {
        day: n
        for day, n in daily_counts(events).items()
        if long_start <= day <= today
    }

    total = sum(counts.values())
    weekly = _window_total(counts, today, short_window_days)
    active_days = len(counts)
    daily_average = round(total / active_days, 1) if active_days else 0.0

    return CompletionStats(
        total=total,
        weekly=weekly,
        daily_average=daily_average,
        best_day=max(counts.values(), default=0),
        best_week=best_rolling_week(counts),
        active_day_rate=round(active_days / long_window_days, 3),
        trend_pct=week_over_week_pct(counts, today),
        engagement_trend=engagement_trend(session_actions or []),
    )
