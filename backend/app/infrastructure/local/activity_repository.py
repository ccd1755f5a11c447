"""
SQLite implementation of the activity (audit log) repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from app.infrastructure.local.database import ActivityORM, get_session_factory
from app.interfaces.activity_repository import IActivityRepository
from app.models.activity import Activity, ActivityCreate
from app.models.enums import ActivityAction
from app.utils.datetime_utils import ensure_utc


class SqliteActivityRepository(IActivityRepository):
    """SQLite implementation of activity repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ActivityORM) -> Activity:
        """Convert ORM object to Pydantic model."""
        return Activity(
            id=UUID(orm.id),
            description=orm.description,
            actor_id=orm.actor_id,
            action=ActivityAction(orm.action),
            entity_type=orm.entity_type,
            entity_id=UUID(orm.entity_id),
            metadata=orm.metadata_json or {},
            created_at=ensure_utc(orm.created_at),
        )

    async def create(self, activity: ActivityCreate) -> Activity:
        """Append one audit event."""
        async with self._session_factory() as session:
            orm = ActivityORM(
                id=str(uuid4()),
                description=activity.description,
                actor_id=activity.actor_id,
                action=activity.action.value,
                entity_type=activity.entity_type,
                entity_id=str(activity.entity_id),
                metadata_json=activity.model_dump(mode="json")["metadata"],
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list(
        self,
        entity_id: Optional[UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Activity]:
        """List audit events, newest first."""
        async with self._session_factory() as session:
            query = select(ActivityORM)
            if entity_id:
                query = query.where(ActivityORM.entity_id == str(entity_id))
            query = query.order_by(ActivityORM.created_at.desc()).limit(limit).offset(offset)
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
