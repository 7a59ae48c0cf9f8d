"""Shared test fixtures."""
from datetime import date, datetime, timedelta
from typing import Generator, List, Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from wellness.models.advice import AdviceSession  # noqa: F401
from wellness.models.derived import (  # noqa: F401
    CircadianProfileRecord,
    EmotionalAnalysis,
    StreakRecord,
    WellnessFlag,
)
from wellness.models.metrics import DailyMetric, LifeScore  # noqa: F401
from wellness.analysis.samples import AdviceResponse, MetricSample
from wellness.config import Settings
from wellness.services.wellness_service import WellnessService
from wellness.store.repository import WellnessStore

NOW = datetime(2025, 3, 14, 10, 0)
TODAY = NOW.date()
OWNER = "owner-1"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Settings with defaults only (no .env file, rule-based classifier)."""
    return Settings(_env_file=None, emotion_classifier="rules", anthropic_api_key="")


@pytest.fixture(name="store")
def store_fixture(engine) -> WellnessStore:
    return WellnessStore(engine)


@pytest.fixture(name="service")
def service_fixture(engine, settings) -> WellnessService:
    return WellnessService(engine, settings=settings)


# ─── Factories ────────────────────────────────────────────────────────────────

def make_metric(
    record_date: date = TODAY,
    *,
    sleep_hours: Optional[float] = 7.5,
    steps: Optional[int] = 6000,
    mood: Optional[int] = 3,
    stress: Optional[int] = 3,
    energy: Optional[int] = 3,
    sleep_time: Optional[str] = "23:00",
    wake_time: Optional[str] = "07:00",
    hour: int = 9,
) -> MetricSample:
    return MetricSample(
        record_date=record_date,
        sleep_hours=sleep_hours,
        steps=steps,
        mood=mood,
        stress=stress,
        energy=energy,
        sleep_time=sleep_time,
        wake_time=wake_time,
        recorded_at=datetime.combine(record_date, datetime.min.time()).replace(hour=hour),
    )


def daily_metrics(days: int, end: date = TODAY, **kwargs) -> List[MetricSample]:
    """`days` consecutive daily samples ending at `end`, newest first."""
    return [make_metric(end - timedelta(days=i), **kwargs) for i in range(days)]


def make_response(
    action: Optional[str],
    created_at: datetime,
    session_id: Optional[str] = None,
) -> AdviceResponse:
    return AdviceResponse(
        session_id=session_id or f"s-{created_at.isoformat()}",
        created_at=created_at,
        action=action,
        responded_at=created_at + timedelta(minutes=5) if action else None,
        completed_at=created_at + timedelta(minutes=5) if action == "completed" else None,
    )
