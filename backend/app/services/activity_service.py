"""
Audit trail writer.

Events are fire-and-forget: a failure to record one is logged and never
turns a successful request into a failed one.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from app.core.logger import logger
from app.interfaces.activity_repository import IActivityRepository
from app.models.activity import Activity, ActivityCreate
from app.models.enums import ActivityAction


class ActivityLogger:
    def __init__(self, activity_repo: IActivityRepository, enabled: bool = True):
        self._activity_repo = activity_repo
        self._enabled = enabled

    async def log(
        self,
        actor_id: str,
        action: ActivityAction,
        entity_id: UUID,
        description: str,
        metadata: Optional[dict[str, Any]] = None,
        entity_type: str = "milestone",
    ) -> Optional[Activity]:
        if not self._enabled:
            return None
        try:
            return await self._activity_repo.create(
                ActivityCreate(
                    description=description,
                    actor_id=actor_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    metadata=metadata or {},
                )
            )
        except Exception as e:
            logger.error(f"Failed to record {action.value} activity for {entity_id}: {e}", exc_info=True)
            return None
