"""
Activity (audit log) model definitions.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.enums import ActivityAction


class ActivityCreate(BaseModel):
    """One audit event describing an effective change."""

    description: str = Field(..., min_length=1, max_length=1000)
    actor_id: str
    action: ActivityAction
    entity_type: str = "milestone"
    entity_id: UUID
    metadata: dict[str, Any] = Field(default_factory=dict)


class Activity(ActivityCreate):
    """Stored audit event."""

    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
