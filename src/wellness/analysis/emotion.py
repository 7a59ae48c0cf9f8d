"""
Emotional state classification from the latest check-ins and LifeScore.

The state label itself comes from a pluggable classifier
(score, metrics) → state; classify_by_rules is the built-in rule engine.
Everything around it is deterministic:

  trend         mood/stress/energy half-split over the last 5 check-ins,
                combined as (mood - stress + energy) / 3 and thresholded at
                EMOTIONAL_TREND_THRESHOLD
  factors       thresholded sleep/steps/stress labels + trend + time of day
  confidence    0.5 base + recency bonus + sample bonus + LifeScore bonus, <= 1
  recommendations  fixed table per state, extended by the trend direction
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from wellness.analysis.samples import LifeScoreSample, MetricSample
from wellness.analysis.trend import (
    DECLINING,
    EMOTIONAL_TREND_THRESHOLD,
    IMPROVING,
    STABLE,
    half_delta,
    label_delta,
)
from wellness.defaults import (
    DEFAULT_SLEEP_HOURS,
    DEFAULT_STRESS,
    default_life_score,
    default_metrics,
)

EMOTIONAL_STATES = ("stressed", "energetic", "tired", "balanced", "anxious", "motivated")

TREND_WINDOW = 5
MIN_TREND_SAMPLES = 3
METRIC_SCALE = 5  # mood/stress/energy are 1-5

Classifier = Callable[[LifeScoreSample, MetricSample], str]


@dataclass
class EmotionalStateResult:
    current_state: str
    confidence: float
    factors: List[str]
    trend: str
    recommendations: Dict[str, List[str]]
    last_analyzed: datetime
    used_default_metrics: bool = False
    used_default_life_score: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.used_default_metrics

    def to_dict(self) -> dict:
        return {
            "current_state": self.current_state,
            "confidence": self.confidence,
            "factors": list(self.factors),
            "trend": self.trend,
            "recommendations": {k: list(v) for k, v in self.recommendations.items()},
            "last_analyzed": self.last_analyzed.isoformat(),
        }


def classify_by_rules(score: LifeScoreSample, metrics: MetricSample) -> str:
    """Rule engine over the 1-10 LifeScore sub-scores; first match wins."""
    if score.stress > 7 or score.overall < 4:
        return "stressed"
    if score.stress > 6 and score.sleep < 5:
        return "anxious"
    if score.energy > 7 and score.overall > 6:
        return "energetic"
    if score.energy > 6 and score.stress < 4:
        return "motivated"
    if score.energy < 4 or score.sleep < 4:
        return "tired"
    return "balanced"


# ─── Trend ─────────────────────────────────────────────────────────────────────

def metric_trend(recent: Sequence[MetricSample], field_name: str) -> float:
    """
    Normalized half-split trend of one 1-5 field over the latest check-ins.

    Args:
        recent: newest first.

    Returns:
        Roughly -1..1; 0.0 with fewer than MIN_TREND_SAMPLES values.
    """
    window = list(reversed(recent[:TREND_WINDOW]))  # chronological
    values = [getattr(s, field_name) for s in window if getattr(s, field_name) is not None]
    if len(values) < MIN_TREND_SAMPLES:
        return 0.0
    return half_delta(values) / METRIC_SCALE


def emotional_trend(recent: Sequence[MetricSample]) -> str:
    """Combined direction; lower stress counts as improvement."""
    if len(recent) < MIN_TREND_SAMPLES:
        return STABLE
    combined = (
        metric_trend(recent, "mood")
        - metric_trend(recent, "stress")
        + metric_trend(recent, "energy")
    ) / 3
    return label_delta(combined, EMOTIONAL_TREND_THRESHOLD)


# ─── Factors ───────────────────────────────────────────────────────────────────

def time_context(hour: int) -> str:
    if hour < 6:
        return "very_early"
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    if hour < 21:
        return "evening"
    return "late"


def contributing_factors(current: MetricSample, trend: str, now: datetime) -> List[str]:
    sleep_hours = current.sleep_hours if current.sleep_hours is not None else DEFAULT_SLEEP_HOURS
    if sleep_hours < 6:
        sleep_label = "poor"
    elif sleep_hours > 8.5:
        sleep_label = "excellent"
    else:
        sleep_label = "good"

    steps = current.steps or 0
    if steps < 2000:
        activity_label = "low"
    elif steps > 8000:
        activity_label = "high"
    else:
        activity_label = "moderate"

    stress = current.stress if current.stress is not None else DEFAULT_STRESS
    if stress >= 4:
        stress_label = "elevated"
    elif stress <= 2:
        stress_label = "low"
    else:
        stress_label = "normal"

    return [
        f"sleep_quality: {sleep_label}",
        f"activity_level: {activity_label}",
        f"stress_level: {stress_label}",
        f"recent_trend: {trend}",
        f"time_context: {time_context(now.hour)}",
    ]


# ─── Confidence ────────────────────────────────────────────────────────────────

def _sample_time(sample: MetricSample) -> datetime:
    if sample.recorded_at is not None:
        return sample.recorded_at
    return datetime.combine(sample.record_date, datetime.min.time())


def analysis_confidence(
    recent: Sequence[MetricSample],
    now: datetime,
    has_life_score: bool,
) -> float:
    confidence = 0.5
    if recent:
        newest = max(_sample_time(s) for s in recent)
        age = now - newest
        if age < timedelta(hours=24):
            confidence += 0.3
        elif age < timedelta(hours=48):
            confidence += 0.2
        else:
            confidence += 0.1
        confidence += min(len(recent) / 7, 1) * 0.2
    if has_life_score:
        confidence += 0.1
    return round(max(0.0, min(confidence, 1.0)), 3)


# ─── Recommendations ───────────────────────────────────────────────────────────

_RECOMMENDATIONS: Dict[str, Dict[str, List[str]]] = {
    "stressed": {
        "immediate": [
            "Try 5 minutes of deep breathing",
            "Take a short break from what you are doing",
        ],
        "preventive": [
            "Plan regular breaks during the day",
            "Consider an evening mindfulness practice",
        ],
    },
    "tired": {
        "immediate": ["Drink a glass of water", "Do some light stretching"],
        "preventive": [
            "Tune your sleep routine",
            "Consider a 20-minute power nap",
        ],
    },
    "energetic": {
        "immediate": [
            "Use this moment for demanding tasks",
            "Consider an energizing workout",
        ],
        "preventive": [
            "Schedule your hardest work for moments like this",
            "Keep your energy up with healthy snacks",
        ],
    },
    "balanced": {
        "immediate": [
            "Good moment to plan your day",
            "Carry on with your usual routine",
        ],
        "preventive": [
            "Keep the habits that bring you balance",
            "Keep an eye on what contributes to your wellbeing",
        ],
    },
}
_RECOMMENDATIONS["anxious"] = _RECOMMENDATIONS["stressed"]
_RECOMMENDATIONS["motivated"] = _RECOMMENDATIONS["energetic"]

_DECLINING_ADVICE = [
    "Watch for patterns that may be affecting your wellbeing",
    "Consider talking to a professional if the trend continues",
]
_IMPROVING_ADVICE = [
    "Notice and keep the things that are helping you improve",
]


def recommendations_for(state: str, trend: str) -> Dict[str, List[str]]:
    table = _RECOMMENDATIONS.get(state, {"immediate": [], "preventive": []})
    immediate = list(table["immediate"])
    preventive = list(table["preventive"])
    if trend == DECLINING:
        preventive.extend(_DECLINING_ADVICE)
    elif trend == IMPROVING:
        preventive.extend(_IMPROVING_ADVICE)
    return {"immediate": immediate, "preventive": preventive}


# ─── Entry point ───────────────────────────────────────────────────────────────

def analyze_emotional_state(
    recent: Sequence[MetricSample],
    life_score: Optional[LifeScoreSample],
    now: datetime,
    classify: Classifier = classify_by_rules,
) -> EmotionalStateResult:
    """
    Classify the current emotional state.

    Args:
        recent: latest check-ins, newest first (typically 7 days).
        life_score: latest LifeScore, or None to use the default.
        now: analysis time (drives recency and the time-of-day factor).
        classify: (score, metrics) → one of EMOTIONAL_STATES. An unknown
            label falls back to the rule engine.
    """
    current = recent[0] if recent else default_metrics(now.date())
    score = life_score or default_life_score(now.date())

    state = classify(score, current)
    if state not in EMOTIONAL_STATES:
        state = classify_by_rules(score, current)

    trend = emotional_trend(recent)
    return EmotionalStateResult(
        current_state=state,
        confidence=analysis_confidence(recent, now, has_life_score=life_score is not None),
        factors=contributing_factors(current, trend, now),
        trend=trend,
        recommendations=recommendations_for(state, trend),
        last_analyzed=now,
        used_default_metrics=not recent,
        used_default_life_score=life_score is None,
    )
