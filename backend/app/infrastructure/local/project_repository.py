"""
SQLite implementation of Project repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from app.infrastructure.local.database import ProjectORM, get_session_factory
from app.interfaces.project_repository import IProjectRepository
from app.models.enums import ProjectStatus
from app.models.project import Project, ProjectCreate
from app.utils.datetime_utils import ensure_utc


class SqliteProjectRepository(IProjectRepository):
    """SQLite implementation of project repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ProjectORM) -> Project:
        """Convert ORM object to Pydantic model."""
        return Project(
            id=UUID(orm.id),
            user_id=orm.user_id,
            name=orm.name,
            description=orm.description,
            status=ProjectStatus(orm.status),
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def create(self, user_id: str, project: ProjectCreate) -> Project:
        """Create a new project."""
        async with self._session_factory() as session:
            orm = ProjectORM(
                id=str(uuid4()),
                user_id=user_id,
                name=project.name,
                description=project.description,
                status=ProjectStatus.ACTIVE.value,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProjectORM).where(ProjectORM.id == str(project_id))
            )
            orm = result.scalars().first()
            return self._orm_to_model(orm) if orm else None

    async def list(self, limit: int = 100, offset: int = 0) -> list[Project]:
        """List projects, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProjectORM)
                .order_by(ProjectORM.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
