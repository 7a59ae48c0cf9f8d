"""Advice session model: one micro-advice delivery and the user's response."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class AdviceSession(SQLModel, table=True):
    """
    The response columns are written once, on the first response. Completion
    events for streaks and stats are derived from rows with action="completed".
    """

    id: str = Field(primary_key=True)  # session id issued by the advice generator
    owner_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    action: Optional[str] = None  # "completed", "dismissed", "snoozed"
    responded_at: Optional[datetime] = None
    rating: Optional[int] = None  # 1-5
    completed_at: Optional[datetime] = None

    updated_at: datetime = Field(default_factory=datetime.utcnow)
