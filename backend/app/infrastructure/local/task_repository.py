"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select, update

from app.infrastructure.local.database import TaskORM, get_session_factory
from app.interfaces.task_repository import ITaskRepository
from app.models.enums import TaskStatus
from app.models.task import Task, TaskCreate
from app.utils.datetime_utils import ensure_utc, now_utc


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            user_id=orm.user_id,
            project_id=UUID(orm.project_id) if orm.project_id else None,
            milestone_id=UUID(orm.milestone_id) if orm.milestone_id else None,
            title=orm.title,
            description=orm.description,
            status=TaskStatus(orm.status),
            due_date=ensure_utc(orm.due_date),
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """Create a new task."""
        async with self._session_factory() as session:
            orm = TaskORM(
                id=str(uuid4()),
                user_id=user_id,
                project_id=str(task.project_id) if task.project_id else None,
                milestone_id=str(task.milestone_id) if task.milestone_id else None,
                title=task.title,
                description=task.description,
                status=TaskStatus.TODO.value,
                due_date=ensure_utc(task.due_date),
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.id == str(task_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(
        self,
        project_id: Optional[UUID] = None,
        milestone_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """List tasks, optionally filtered by project or milestone."""
        async with self._session_factory() as session:
            query = select(TaskORM)
            if project_id:
                query = query.where(TaskORM.project_id == str(project_id))
            if milestone_id:
                query = query.where(TaskORM.milestone_id == str(milestone_id))
            query = query.order_by(TaskORM.created_at.desc()).limit(limit).offset(offset)
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def clear_milestone(self, milestone_id: UUID) -> int:
        """Clear the milestone back-reference on its tasks in one statement."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(TaskORM)
                .where(TaskORM.milestone_id == str(milestone_id))
                .values(milestone_id=None, updated_at=now_utc())
            )
            await session.commit()
            return result.rowcount or 0

    async def clear_orphaned_milestones(self, existing_milestone_ids: set[UUID]) -> int:
        """Clear ``milestone_id`` on tasks pointing at a missing milestone."""
        async with self._session_factory() as session:
            query = update(TaskORM).where(TaskORM.milestone_id.is_not(None))
            if existing_milestone_ids:
                query = query.where(
                    TaskORM.milestone_id.not_in([str(m_id) for m_id in existing_milestone_ids])
                )
            result = await session.execute(query.values(milestone_id=None, updated_at=now_utc()))
            await session.commit()
            return result.rowcount or 0
