"""Advice response route."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from wellness.analysis.samples import ADVICE_ACTIONS, naive_utc
from wellness.api.deps import get_owner_id, get_service
from wellness.services.wellness_service import WellnessService

router = APIRouter()


class AdviceResponseRequest(BaseModel):
    session_id: str = Field(min_length=1)
    action: str
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    responded_at: Optional[datetime] = None


class AdviceResponseResult(BaseModel):
    session_id: str
    action: str
    recorded: bool
    current_streak: Optional[int] = None
    best_streak: Optional[int] = None
    celebration: Optional[dict] = None
    dismissal_rate: Optional[float] = None
    burnout_risk: Optional[str] = None


@router.post("/response", response_model=AdviceResponseResult)
def record_response(
    request: AdviceResponseRequest,
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """
    Record the first response to an advice session.

    Re-submitting a response for an answered session is accepted and
    reported with recorded=false; nothing changes.
    """
    if request.action not in ADVICE_ACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"action must be one of {', '.join(ADVICE_ACTIONS)}",
        )
    responded_at = naive_utc(request.responded_at) if request.responded_at else None
    outcome = service.record_advice_response(
        owner_id,
        request.session_id,
        request.action,
        rating=request.rating,
        responded_at=responded_at,
    )
    return AdviceResponseResult(
        session_id=outcome.session_id,
        action=outcome.action,
        recorded=outcome.recorded,
        current_streak=outcome.streak.current_count if outcome.streak else None,
        best_streak=outcome.streak.best_count if outcome.streak else None,
        celebration=outcome.celebration.to_dict() if outcome.celebration else None,
        dismissal_rate=outcome.dismissal.dismissal_rate if outcome.dismissal else None,
        burnout_risk=outcome.burnout.risk_level if outcome.burnout else None,
    )
