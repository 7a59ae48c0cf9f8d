"""
Circadian profile inference: chronotype, energy/stress rhythm and the
time-of-day windows where an intervention is most likely to land.

Inference only runs with at least MIN_DAYS of history. Below that the
default profile from wellness.defaults is returned with its fixed 0.3
confidence, since a handful of check-ins says nothing reliable about a
sleep rhythm.

Confidence of an inferred profile blends three factors, each in [0, 1]:

  quantity     min(samples / 30, 1)                              weight 0.4
  consistency  1 - min(var(bedtime minutes) / 120, 1)            weight 0.3
               (0.5 when fewer than 7 bedtimes are known)
  recency      max(0, 1 - days since newest sample / 7)          weight 0.3

Bedtime variance is taken over rolled-over minutes: a bedtime before noon
counts as the previous evening, so 00:30 is 24:30 and sits 60 minutes from
23:30 rather than 1380.
"""
from datetime import datetime, timedelta
from statistics import mean, pvariance
from typing import Dict, List, Optional, Sequence

from wellness.analysis.samples import (
    CircadianProfile,
    InterventionWindow,
    MetricSample,
    clock_to_minutes,
)
from wellness.defaults import DEFAULT_SLEEP_TIME, DEFAULT_WAKE_TIME, default_circadian_profile
from wellness.errors import InsufficientData

MIN_DAYS = 7
MAX_AGE_DAYS = 7

QUANTITY_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.3
RECENCY_WEIGHT = 0.3
QUANTITY_FULL_SAMPLES = 30
CONSISTENCY_MAX_VARIANCE = 120.0
CONSISTENCY_NEUTRAL = 0.5
RECENCY_HORIZON_DAYS = 7

_MINUTES_PER_DAY = 24 * 60
# Bedtimes before noon belong to the previous evening ("00:30" is 24:30)
_BEDTIME_ROLLOVER_MINUTES = 12 * 60


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ─── Sleep timing ──────────────────────────────────────────────────────────────

def bedtime_minutes(samples: Sequence[MetricSample]) -> List[int]:
    """Bedtimes as minutes after the previous midnight; post-midnight values exceed 1440."""
    minutes = []
    for s in samples:
        if not s.sleep_time:
            continue
        m = clock_to_minutes(s.sleep_time)
        if m < _BEDTIME_ROLLOVER_MINUTES:
            m += _MINUTES_PER_DAY
        minutes.append(m)
    return minutes


def waketime_minutes(samples: Sequence[MetricSample]) -> List[int]:
    return [clock_to_minutes(s.wake_time) for s in samples if s.wake_time]


def format_clock(minutes: float) -> str:
    total = int(round(minutes)) % _MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def determine_chronotype(avg_bedtime: float, avg_waketime: float) -> str:
    """
    early_bird:  up by 06:xx and in bed by 22:xx
    night_owl:   up at 09:00 or later and in bed after midnight
    otherwise intermediate.

    Args:
        avg_bedtime: minutes, post-midnight bedtimes expressed past 1440.
        avg_waketime: minutes after midnight.
    """
    bed_hour = int(avg_bedtime // 60)
    wake_hour = int(avg_waketime // 60)
    if wake_hour <= 6 and bed_hour <= 22:
        return "early_bird"
    if wake_hour >= 9 and bed_hour >= 24:
        return "night_owl"
    return "intermediate"


# ─── Hourly rhythm ─────────────────────────────────────────────────────────────

def hourly_means(samples: Sequence[MetricSample], field_name: str) -> Dict[int, float]:
    """Mean of a 1-5 field grouped by the check-in hour."""
    buckets: Dict[int, List[float]] = {}
    for s in samples:
        value = getattr(s, field_name)
        if s.recorded_at is None or value is None:
            continue
        buckets.setdefault(s.recorded_at.hour, []).append(value)
    return {hour: mean(values) for hour, values in buckets.items()}


def peak_hours(hourly: Dict[int, float], kind: str = "high") -> List[int]:
    """
    Hours at the top (>= 80% of the max) or bottom (<= 120% of the min) of the rhythm.
    """
    if not hourly:
        return []
    if kind == "high":
        threshold = max(hourly.values()) * 0.8
        return sorted(h for h, v in hourly.items() if v >= threshold)
    threshold = min(hourly.values()) * 1.2
    return sorted(h for h, v in hourly.items() if v <= threshold)


def generate_intervention_windows(
    chronotype: str,
    peak_energy: Sequence[int],
    low_energy: Sequence[int],
    stress_peaks: Sequence[int],
) -> List[InterventionWindow]:
    """Candidate windows, best first (effectiveness desc, then start hour)."""
    windows: List[InterventionWindow] = []

    # Energy boosts in waking low-energy hours
    for hour in low_energy:
        if 6 <= hour <= 20:
            windows.append(InterventionWindow(hour, hour + 1, 0.85, "energy_boost", 1))

    # Stress relief just before and during stress peaks
    for hour in stress_peaks:
        windows.append(
            InterventionWindow(max(hour - 1, 6), min(hour + 1, 24), 0.9, "stress_relief", 2)
        )

    if chronotype == "early_bird":
        windows.append(InterventionWindow(6, 8, 0.8, "mindfulness", 1))
    elif chronotype == "night_owl":
        windows.append(InterventionWindow(21, 23, 0.75, "mindfulness", 1))

    # Celebrate when energy is naturally high
    for hour in peak_energy:
        windows.append(InterventionWindow(hour, min(hour + 2, 24), 0.7, "celebration", 1))

    return sorted(windows, key=lambda w: (-w.effectiveness_score, w.start_hour))


# ─── Confidence ────────────────────────────────────────────────────────────────

def quantity_factor(sample_count: int) -> float:
    return _clamp(sample_count / QUANTITY_FULL_SAMPLES)


def consistency_factor(samples: Sequence[MetricSample]) -> float:
    bedtimes = bedtime_minutes(samples)
    if len(bedtimes) < MIN_DAYS:
        return CONSISTENCY_NEUTRAL
    return _clamp(1 - min(pvariance(bedtimes) / CONSISTENCY_MAX_VARIANCE, 1))


def recency_factor(samples: Sequence[MetricSample], now: datetime) -> float:
    if not samples:
        return 0.0
    newest = max(s.record_date for s in samples)
    days_since = (now.date() - newest).days
    return _clamp(1 - days_since / RECENCY_HORIZON_DAYS)


def confidence_score(samples: Sequence[MetricSample], now: datetime) -> float:
    """Weighted blend of quantity, consistency and recency, clamped to [0, 1]."""
    if not samples:
        return 0.0
    score = (
        quantity_factor(len(samples)) * QUANTITY_WEIGHT
        + consistency_factor(samples) * CONSISTENCY_WEIGHT
        + recency_factor(samples, now) * RECENCY_WEIGHT
    )
    return round(_clamp(score), 3)


# ─── Profile ───────────────────────────────────────────────────────────────────

def infer_circadian_profile(
    samples: Sequence[MetricSample],
    now: datetime,
    min_days: int = MIN_DAYS,
) -> CircadianProfile:
    """
    Infer a profile from history.

    Raises:
        InsufficientData: fewer than `min_days` distinct days of metrics.
    """
    days = {s.record_date for s in samples}
    if len(days) < min_days:
        raise InsufficientData(f"{len(days)} days of metrics, need {min_days}")

    bedtimes = bedtime_minutes(samples)
    waketimes = waketime_minutes(samples)
    avg_bed = mean(bedtimes) if bedtimes else clock_to_minutes(DEFAULT_SLEEP_TIME)
    avg_wake = mean(waketimes) if waketimes else clock_to_minutes(DEFAULT_WAKE_TIME)
    chronotype = determine_chronotype(avg_bed, avg_wake)

    energy = hourly_means(samples, "energy")
    stress = hourly_means(samples, "stress")
    peak_energy = peak_hours(energy, "high")
    low_energy = peak_hours(energy, "low")
    stress_peaks = peak_hours(stress, "high")

    return CircadianProfile(
        chronotype=chronotype,
        natural_wake_time=format_clock(avg_wake),
        natural_sleep_time=format_clock(avg_bed),
        peak_energy_hours=peak_energy,
        low_energy_hours=low_energy,
        stress_peak_hours=stress_peaks,
        optimal_intervention_windows=generate_intervention_windows(
            chronotype, peak_energy, low_energy, stress_peaks
        ),
        confidence_score=confidence_score(samples, now),
        last_updated=now,
    )


def build_circadian_profile(
    samples: Sequence[MetricSample],
    now: datetime,
    min_days: int = MIN_DAYS,
) -> CircadianProfile:
    """Inferred profile, or the default profile when history is too thin."""
    try:
        return infer_circadian_profile(samples, now, min_days=min_days)
    except InsufficientData:
        return default_circadian_profile(now)


def is_stale(
    profile: Optional[CircadianProfile],
    now: datetime,
    max_age_days: int = MAX_AGE_DAYS,
) -> bool:
    """True when there is no profile or it is older than `max_age_days`."""
    if profile is None:
        return True
    return now - profile.last_updated > timedelta(days=max_age_days)
