"""
Consecutive-day completion streaks.

Inputs are calendar dates, so repeated completions on the same day (or the
same completion event submitted twice) collapse to one date and cannot
inflate a streak.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

DAILY_COMPLETIONS = "daily_completions"


@dataclass
class StreakSummary:
    streak_type: str
    current_count: int
    best_count: int
    last_activity_date: Optional[date]


def current_streak(dates: Iterable[date], today: date) -> int:
    """
    Count consecutive days ending today (today, today-1, ...) present in `dates`.

    A day without a completion today means the current streak is 0, even if
    yesterday had one.
    """
    present = set(dates)
    count = 0
    day = today
    while day in present:
        count += 1
        day -= timedelta(days=1)
    return count


def best_streak(dates: Iterable[date]) -> int:
    """Longest run of consecutive calendar days anywhere in the history."""
    ordered = sorted(set(dates), reverse=True)
    if not ordered:
        return 0
    best = run = 1
    for newer, older in zip(ordered, ordered[1:]):
        if (newer - older).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
    return best


def compute_streaks(
    dates: Iterable[date],
    today: date,
    streak_type: str = DAILY_COMPLETIONS,
) -> StreakSummary:
    """
    Current and best streak for a set of completion dates.

    Dates after `today` are ignored. best_count >= current_count always.
    """
    history = {d for d in dates if d <= today}
    current = current_streak(history, today)
    best = max(best_streak(history), current)
    return StreakSummary(
        streak_type=streak_type,
        current_count=current,
        best_count=best,
        last_activity_date=max(history) if history else None,
    )
