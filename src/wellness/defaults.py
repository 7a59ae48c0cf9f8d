"""
Shared fallback values used whenever the store has nothing (or fails).

Every analyzer and the dashboard composer read their defaults from here so
the fallback shape is defined exactly once.
"""
from datetime import date, datetime
from typing import Optional

from wellness.analysis.samples import (
    CircadianProfile,
    InterventionWindow,
    LifeScoreSample,
    MetricSample,
)

DEFAULT_SLEEP_HOURS = 7.0
DEFAULT_STEPS = 5000
DEFAULT_MOOD = 5
DEFAULT_STRESS = 3
DEFAULT_ENERGY = 5

DEFAULT_WAKE_TIME = "07:00"
DEFAULT_SLEEP_TIME = "23:00"
DEFAULT_PEAK_ENERGY_HOURS = [9, 10, 11, 15, 16]
DEFAULT_LOW_ENERGY_HOURS = [13, 14, 20, 21]
DEFAULT_STRESS_PEAK_HOURS = [11, 17]
DEFAULT_PROFILE_CONFIDENCE = 0.3


def default_metrics(today: Optional[date] = None) -> MetricSample:
    """Neutral metrics used when the owner has never checked in."""
    return MetricSample(
        record_date=today or datetime.utcnow().date(),
        sleep_hours=DEFAULT_SLEEP_HOURS,
        steps=DEFAULT_STEPS,
        mood=DEFAULT_MOOD,
        stress=DEFAULT_STRESS,
        energy=DEFAULT_ENERGY,
    )


def default_life_score(today: Optional[date] = None) -> LifeScoreSample:
    """Mid-scale LifeScore (5 on every 1-10 axis)."""
    return LifeScoreSample(
        record_date=today or datetime.utcnow().date(),
        stress=5.0,
        energy=5.0,
        sleep=5.0,
        overall=5.0,
    )


def default_intervention_windows():
    return [
        InterventionWindow(
            start_hour=9,
            end_hour=11,
            effectiveness_score=0.7,
            intervention_type="mindfulness",
            frequency_limit=1,
        ),
        InterventionWindow(
            start_hour=15,
            end_hour=17,
            effectiveness_score=0.8,
            intervention_type="energy_boost",
            frequency_limit=1,
        ),
    ]


def default_circadian_profile(now: Optional[datetime] = None) -> CircadianProfile:
    """Low-confidence profile returned when there is too little history to infer one."""
    return CircadianProfile(
        chronotype="intermediate",
        natural_wake_time=DEFAULT_WAKE_TIME,
        natural_sleep_time=DEFAULT_SLEEP_TIME,
        peak_energy_hours=list(DEFAULT_PEAK_ENERGY_HOURS),
        low_energy_hours=list(DEFAULT_LOW_ENERGY_HOURS),
        stress_peak_hours=list(DEFAULT_STRESS_PEAK_HOURS),
        optimal_intervention_windows=default_intervention_windows(),
        confidence_score=DEFAULT_PROFILE_CONFIDENCE,
        last_updated=now or datetime.utcnow(),
        is_default=True,
    )
