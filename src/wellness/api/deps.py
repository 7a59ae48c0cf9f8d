"""Shared FastAPI dependencies: owner resolution and the per-request service."""
from typing import Optional

from fastapi import Depends, Header

from wellness.ai.emotion_classifier import build_classifier
from wellness.config import Settings, get_settings
from wellness.db.engine import get_engine
from wellness.services.wellness_service import WellnessService


def get_owner_id(
    x_user_id: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Owner from the X-User-Id header; authentication happens upstream."""
    return x_user_id or settings.default_owner_id


def get_service(
    engine=Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> WellnessService:
    return WellnessService(engine, settings=settings, classify=build_classifier(settings))
