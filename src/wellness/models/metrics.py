"""Daily check-in models: raw health metrics and the derived LifeScore."""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class DailyMetric(SQLModel, table=True):
    """One row per owner per calendar day; re-submissions upsert in place."""

    __table_args__ = (UniqueConstraint("owner_id", "record_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    record_date: date = Field(index=True)

    sleep_hours: Optional[float] = None
    steps: Optional[int] = None
    mood: Optional[int] = None     # 1-5
    stress: Optional[int] = None   # 1-5
    energy: Optional[int] = None   # 1-5
    heart_rate: Optional[float] = None
    sleep_time: Optional[str] = None  # "HH:MM" bedtime the night before
    wake_time: Optional[str] = None   # "HH:MM"
    source: str = "manual"            # "manual", "healthkit", "google_fit", ...

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LifeScore(SQLModel, table=True):
    """Composite daily wellness rating; sub-scores on a 1-10 scale."""

    __table_args__ = (UniqueConstraint("owner_id", "record_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(index=True)
    record_date: date = Field(index=True)

    stress_score: float
    energy_score: float
    sleep_score: float
    overall_score: float

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
