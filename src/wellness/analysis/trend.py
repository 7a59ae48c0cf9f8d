"""
Half-split trend classification.

A series is split into a first and second half (the first half takes the
extra element when the length is odd) and the half means are compared:

    delta = mean(second) - mean(first)
    delta >  threshold → "improving"
    delta < -threshold → "declining"
    otherwise          → "stable"

The threshold depends on the scale of the series, so each use has its own
named constant instead of one shared magic number:

  SCORE_TREND_THRESHOLD       0.5  raw score points (LifeScore 1-10, stress 1-5)
  EMOTIONAL_TREND_THRESHOLD   0.3  combined, normalized mood/stress/energy trend
  ENGAGEMENT_TREND_THRESHOLD  0.1  rates in [0, 1] (completion rate halves)

The threshold is an absolute gap between half means, so a strictly increasing
series whose steps are small relative to it stays "stable": [1.0, 1.1, 1.2,
1.3] has a delta of 0.2 and does not clear SCORE_TREND_THRESHOLD.
"""
from datetime import datetime
from statistics import mean
from typing import List, Optional, Sequence, Tuple

IMPROVING = "improving"
STABLE = "stable"
DECLINING = "declining"

SCORE_TREND_THRESHOLD = 0.5
EMOTIONAL_TREND_THRESHOLD = 0.3
ENGAGEMENT_TREND_THRESHOLD = 0.1

# Engagement halves are only meaningful with two weeks of sessions
MIN_ENGAGEMENT_SESSIONS = 14


def split_halves(values: Sequence[float]) -> Tuple[List[float], List[float]]:
    """Split values into (first, second); first gets the middle element when odd."""
    midpoint = (len(values) + 1) // 2
    return list(values[:midpoint]), list(values[midpoint:])


def half_delta(values: Sequence[float]) -> float:
    """mean(second half) - mean(first half); 0.0 with fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    first, second = split_halves(values)
    return mean(second) - mean(first)


def label_delta(delta: float, threshold: float) -> str:
    if delta > threshold:
        return IMPROVING
    if delta < -threshold:
        return DECLINING
    return STABLE


def classify_trend(
    values: Sequence[float],
    threshold: float = SCORE_TREND_THRESHOLD,
) -> str:
    """
    Classify a chronological numeric series.

    Args:
        values: oldest first.
        threshold: minimum absolute half-mean difference to call a direction.

    Returns:
        "improving", "stable" or "declining". Always "stable" with < 2 points.
    """
    return label_delta(half_delta(values), threshold)


def classify_series(
    points: Sequence[Tuple[datetime, float]],
    threshold: float = SCORE_TREND_THRESHOLD,
) -> str:
    """classify_trend over (timestamp, value) pairs, sorted chronologically first."""
    ordered = sorted(points, key=lambda p: p[0])
    return classify_trend([value for _, value in ordered], threshold)


def engagement_trend(
    actions: Sequence[Optional[str]],
    threshold: float = ENGAGEMENT_TREND_THRESHOLD,
) -> str:
    """
    Compare the completion rate of the older vs newer half of a session history.

    Args:
        actions: response action per session, oldest first (None = unanswered).
    """
    if len(actions) < MIN_ENGAGEMENT_SESSIONS:
        return STABLE
    rates = [1.0 if action == "completed" else 0.0 for action in actions]
    return classify_trend(rates, threshold)


def improvement_rate(scores: Sequence[float], window: int = 7) -> float:
    """
    Percent change of the mean of the last `window` scores vs the `window` before.

    Returns 0.0 with fewer than `window` scores or when the previous mean is 0.
    Rounded to one decimal place.
    """
    if len(scores) < window:
        return 0.0
    recent = scores[-window:]
    previous = scores[-2 * window:-window]
    if not previous:
        return 0.0
    previous_avg = mean(previous)
    if previous_avg == 0:
        return 0.0
    return round((mean(recent) - previous_avg) / previous_avg * 100, 1)
