"""
Plain in-memory records used by every analyzer, and the validating bridge
from store rows to those records.

Analyzers only ever see these dataclasses: no SQLModel, no DB session. The
`*_to_samples` converters are the validation boundary: a row that is
malformed (non-numeric metric, out-of-range score, unparseable date) raises
ValidationFailure inside the per-row coercer and is dropped from the batch,
so one bad check-in never aborts a whole analysis.
"""
import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

from wellness.errors import ValidationFailure

logger = logging.getLogger(__name__)

ADVICE_ACTIONS = ("completed", "dismissed", "snoozed")


@dataclass
class MetricSample:
    """One owner-day of health signals. Every signal is optional."""

    record_date: date
    sleep_hours: Optional[float] = None
    steps: Optional[int] = None
    mood: Optional[int] = None          # 1-5
    stress: Optional[int] = None        # 1-5
    energy: Optional[int] = None        # 1-5
    heart_rate: Optional[float] = None  # bpm
    sleep_time: Optional[str] = None    # "HH:MM" bedtime
    wake_time: Optional[str] = None     # "HH:MM"
    recorded_at: Optional[datetime] = None  # when the check-in was captured


@dataclass
class LifeScoreSample:
    """Daily LifeScore sub-scores, each on a 1-10 scale."""

    record_date: date
    stress: float
    energy: float
    sleep: float
    overall: float


@dataclass
class AdviceResponse:
    """An advice session and (if the user answered) its response."""

    session_id: str
    created_at: datetime
    action: Optional[str] = None  # completed | dismissed | snoozed
    responded_at: Optional[datetime] = None
    rating: Optional[int] = None
    completed_at: Optional[datetime] = None


@dataclass
class InterventionWindow:
    start_hour: int
    end_hour: int
    effectiveness_score: float  # 0.0-1.0
    intervention_type: str      # stress_relief | energy_boost | mindfulness | celebration
    frequency_limit: int        # max interventions in this window per day


@dataclass
class CircadianProfile:
    chronotype: str  # early_bird | night_owl | intermediate
    natural_wake_time: str
    natural_sleep_time: str
    peak_energy_hours: List[int]
    low_energy_hours: List[int]
    stress_peak_hours: List[int]
    optimal_intervention_windows: List[InterventionWindow]
    confidence_score: float
    last_updated: datetime
    is_default: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_updated"] = self.last_updated.isoformat()
        return data


# ─── Field coercion ────────────────────────────────────────────────────────────

def _get(raw: Any, key: str) -> Any:
    if isinstance(raw, dict):
        return raw.get(key)
    return getattr(raw, key, None)


def _number(
    value: Any,
    name: str,
    low: Optional[float] = None,
    high: Optional[float] = None,
) -> Optional[float]:
    """Coerce a nullable numeric field, rejecting non-numbers and out-of-range values."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationFailure(f"{name} is not numeric: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationFailure(f"{name} is not numeric: {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise ValidationFailure(f"{name} is not finite: {value!r}")
    if low is not None and number < low:
        raise ValidationFailure(f"{name}={number} below {low}")
    if high is not None and number > high:
        raise ValidationFailure(f"{name}={number} above {high}")
    return number


def _int_or_none(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(value))


def _date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise ValidationFailure(f"{name} is not a date: {value!r}")


def naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _datetime(value: Any, name: str, required: bool = False) -> Optional[datetime]:
    """Parse a timestamp into naive UTC, the convention used throughout the store."""
    if value is None:
        if required:
            raise ValidationFailure(f"{name} is missing")
        return None
    if isinstance(value, datetime):
        return naive_utc(value)
    if isinstance(value, str):
        try:
            return naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            pass
    raise ValidationFailure(f"{name} is not a timestamp: {value!r}")


def clock_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes after midnight. Raises ValueError on bad input."""
    hours_str, minutes_str = value.strip().split(":")[:2]
    hours, minutes = int(hours_str), int(minutes_str)
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"clock value out of range: {value!r}")
    return hours * 60 + minutes


def _clock(value: Any, name: str) -> Optional[str]:
    if value in (None, ""):
        return None
    try:
        minutes = clock_to_minutes(str(value))
    except ValueError:
        raise ValidationFailure(f"{name} is not HH:MM: {value!r}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# ─── Per-row coercers ──────────────────────────────────────────────────────────

def coerce_metric(raw: Any) -> MetricSample:
    """Validate one DailyMetric row (model instance or dict)."""
    return MetricSample(
        record_date=_date(_get(raw, "record_date"), "record_date"),
        sleep_hours=_number(_get(raw, "sleep_hours"), "sleep_hours", 0, 24),
        steps=_int_or_none(_number(_get(raw, "steps"), "steps", 0)),
        mood=_int_or_none(_number(_get(raw, "mood"), "mood", 1, 5)),
        stress=_int_or_none(_number(_get(raw, "stress"), "stress", 1, 5)),
        energy=_int_or_none(_number(_get(raw, "energy"), "energy", 1, 5)),
        heart_rate=_number(_get(raw, "heart_rate"), "heart_rate", 20, 250),
        sleep_time=_clock(_get(raw, "sleep_time"), "sleep_time"),
        wake_time=_clock(_get(raw, "wake_time"), "wake_time"),
        recorded_at=_datetime(_get(raw, "created_at"), "created_at"),
    )


def coerce_life_score(raw: Any) -> LifeScoreSample:
    """Validate one LifeScore row; all four sub-scores are required and 1-10."""
    scores = {}
    for name in ("stress", "energy", "sleep", "overall"):
        value = _number(_get(raw, f"{name}_score"), f"{name}_score", 1, 10)
        if value is None:
            raise ValidationFailure(f"{name}_score is missing")
        scores[name] = value
    return LifeScoreSample(
        record_date=_date(_get(raw, "record_date"), "record_date"),
        **scores,
    )


def coerce_advice_response(raw: Any) -> AdviceResponse:
    """Validate one AdviceSession row."""
    action = _get(raw, "action")
    if action is not None and action not in ADVICE_ACTIONS:
        raise ValidationFailure(f"unknown advice action: {action!r}")
    session_id = _get(raw, "id")
    if not session_id:
        raise ValidationFailure("advice session has no id")
    return AdviceResponse(
        session_id=str(session_id),
        created_at=_datetime(_get(raw, "created_at"), "created_at", required=True),
        action=action,
        responded_at=_datetime(_get(raw, "responded_at"), "responded_at"),
        rating=_int_or_none(_number(_get(raw, "rating"), "rating", 1, 5)),
        completed_at=_datetime(_get(raw, "completed_at"), "completed_at"),
    )


# ─── Batch converters ──────────────────────────────────────────────────────────

def _convert(rows: Iterable[Any], coercer, kind: str) -> list:
    samples = []
    for row in rows:
        try:
            samples.append(coercer(row))
        except ValidationFailure as exc:
            logger.debug("Dropping %s row: %s", kind, exc)
    return samples


def metrics_to_samples(rows: Iterable[Any]) -> List[MetricSample]:
    return _convert(rows, coerce_metric, "metric")


def life_scores_to_samples(rows: Iterable[Any]) -> List[LifeScoreSample]:
    return _convert(rows, coerce_life_score, "life score")


def sessions_to_responses(rows: Iterable[Any]) -> List[AdviceResponse]:
    return _convert(rows, coerce_advice_response, "advice session")
