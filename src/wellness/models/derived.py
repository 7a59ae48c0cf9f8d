"""Records derived by the analyzers: streaks, circadian profiles, emotional analyses, flags."""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class StreakRecord(SQLModel, table=True):
    """Consecutive-day streak per owner and streak type. best_count >= current_count."""

    __table_args__ = (UniqueConstraint("owner_id", "streak_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    streak_type: str = "daily_completions"
    current_count: int = 0
    best_count: int = 0
    last_activity_date: Optional[date] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CircadianProfileRecord(SQLModel, table=True):
    """Latest inferred circadian profile, one per owner."""

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(unique=True, index=True)

    chronotype: str  # "early_bird", "night_owl", "intermediate"
    natural_wake_time: str
    natural_sleep_time: str
    peak_energy_hours: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    low_energy_hours: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    stress_peak_hours: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    # [{start_hour, end_hour, effectiveness_score, intervention_type, frequency_limit}, ...]
    intervention_windows: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON)
    )
    confidence_score: float
    last_updated: datetime = Field(default_factory=datetime.utcnow)


class EmotionalAnalysis(SQLModel, table=True):
    """Append-only audit log of emotional state classifications."""

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    emotional_state: str
    confidence_score: float
    contributing_factors: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    trend: str  # "improving", "stable", "declining"
    recommendations: Dict[str, List[str]] = Field(
        default_factory=dict, sa_column=Column(JSON)
    )
    analyzed_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class WellnessFlag(SQLModel, table=True):
    """Active wellness flag, one row per owner and flag type."""

    __table_args__ = (UniqueConstraint("owner_id", "flag_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    flag_type: str  # "high_dismissal_rate"
    flag_value: float
    flag_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
