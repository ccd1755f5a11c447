"""
Activity log repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.models.activity import Activity, ActivityCreate


class IActivityRepository(ABC):
    """Abstract interface for the audit-log sink."""

    @abstractmethod
    async def create(self, activity: ActivityCreate) -> Activity:
        """Append one audit event."""
        pass

    @abstractmethod
    async def list(
        self,
        entity_id: Optional[UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Activity]:
        """List audit events, newest first."""
        pass
