"""Emotional state route."""
from fastapi import APIRouter, Depends

from wellness.api.deps import get_owner_id, get_service
from wellness.services.wellness_service import WellnessService

router = APIRouter()


@router.get("")
def get_emotional_state(
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    return service.analyze_emotional_state(owner_id).to_dict()
