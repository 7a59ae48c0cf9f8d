"""Streak, completion, flag and raw check-in routes."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from wellness.api.deps import get_owner_id, get_service
from wellness.models.derived import StreakRecord, WellnessFlag
from wellness.models.metrics import DailyMetric, LifeScore
from wellness.services.wellness_service import WellnessService

router = APIRouter()

_CLOCK = r"^([01]\d|2[0-3]):[0-5]\d$"


class MetricUpsert(BaseModel):
    sleep_hours: Optional[float] = Field(default=None, ge=0, le=24)
    steps: Optional[int] = Field(default=None, ge=0)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    stress: Optional[int] = Field(default=None, ge=1, le=5)
    energy: Optional[int] = Field(default=None, ge=1, le=5)
    heart_rate: Optional[float] = Field(default=None, ge=20, le=250)
    sleep_time: Optional[str] = Field(default=None, pattern=_CLOCK)
    wake_time: Optional[str] = Field(default=None, pattern=_CLOCK)
    source: str = Field(default="manual", min_length=1)


class LifeScoreUpsert(BaseModel):
    stress: float = Field(ge=1, le=10)
    energy: float = Field(ge=1, le=10)
    sleep: float = Field(ge=1, le=10)
    overall: float = Field(ge=1, le=10)


@router.get("/streaks", response_model=List[StreakRecord])
def list_streaks(
    active_only: bool = False,
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    if active_only:
        return service.active_streaks(owner_id)
    return service.streaks(owner_id)


@router.get("/completions/stats")
def completion_stats(
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """Completion totals, averages and week-over-week trend for the last 30 days."""
    stats = service.completion_stats(owner_id)
    return {
        "total_completions": stats.total,
        "weekly_completions": stats.weekly,
        "daily_average": stats.daily_average,
        "best_day": stats.best_day,
        "best_week": stats.best_week,
        "active_day_rate": stats.active_day_rate,
        "trend_pct": stats.trend_pct,
        "engagement_trend": stats.engagement_trend,
    }


@router.get("/flags", response_model=List[WellnessFlag])
def list_flags(
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    return service.flags(owner_id)


@router.put("/metrics/{record_date}", response_model=DailyMetric)
def upsert_metric(
    record_date: date,
    request: MetricUpsert,
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """Insert or update the check-in for one day. Omitted fields are left as they are."""
    return service.store.upsert_daily_metric(
        owner_id, record_date, **request.model_dump(exclude_unset=True)
    )


@router.put("/lifescores/{record_date}", response_model=LifeScore)
def upsert_life_score(
    record_date: date,
    request: LifeScoreUpsert,
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    return service.store.upsert_life_score(
        owner_id,
        record_date,
        stress=request.stress,
        energy=request.energy,
        sleep=request.sleep,
        overall=request.overall,
    )
