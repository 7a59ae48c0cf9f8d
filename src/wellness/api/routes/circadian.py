"""Circadian profile routes."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from wellness.api.deps import get_owner_id, get_service
from wellness.services.wellness_service import WellnessService

router = APIRouter()


class ProfileRefreshRequest(BaseModel):
    force_regenerate: bool = False


@router.get("")
def get_profile(
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """Current profile, regenerated first if older than 7 days."""
    return service.get_circadian_profile(owner_id).to_dict()


@router.post("")
def refresh_profile(
    request: ProfileRefreshRequest,
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """Regenerate the profile; force_regenerate skips the freshness check."""
    return service.get_circadian_profile(owner_id, force=request.force_regenerate).to_dict()
