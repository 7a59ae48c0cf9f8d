"""Dashboard read model route."""
from fastapi import APIRouter, Depends

from wellness.api.deps import get_owner_id, get_service
from wellness.services.dashboard import compose_dashboard
from wellness.services.wellness_service import WellnessService

router = APIRouter()


@router.get("")
def get_dashboard(
    owner_id: str = Depends(get_owner_id),
    service: WellnessService = Depends(get_service),
):
    """Composed wellness dashboard; degraded parts are listed in `fallbacks`."""
    return compose_dashboard(service, owner_id)
