"""
SQLite implementation of Milestone repository.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError, NotFoundError
from app.infrastructure.local.database import (
    MilestoneApprovalORM,
    MilestoneDependencyORM,
    MilestoneORM,
    MilestoneReviewerORM,
    TaskORM,
    get_session_factory,
)
from app.interfaces.milestone_repository import IMilestoneRepository
from app.models.enums import MilestonePriority, MilestoneStatus
from app.models.milestone import Milestone, MilestoneCreate, MilestoneFilters
from app.utils.datetime_utils import ensure_utc, now_utc


def _column_value(value: Any) -> Any:
    """Normalize a model value for storage."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, UUID):
        return str(value)
    return value


class SqliteMilestoneRepository(IMilestoneRepository):
    """SQLite implementation of milestone repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(
        self,
        orm: MilestoneORM,
        reviewer_ids: list[str],
        dependency_ids: list[str],
        approved_by: list[str],
        task_ids: list[str],
    ) -> Milestone:
        """Convert ORM object plus its child rows to Pydantic model."""
        return Milestone(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id),
            title=orm.title,
            description=orm.description,
            owner_id=orm.owner_id,
            reviewer_ids=reviewer_ids,
            dependency_ids=[UUID(dep_id) for dep_id in dependency_ids],
            approved_by=approved_by,
            task_ids=[UUID(task_id) for task_id in task_ids],
            progress=orm.progress,
            status=MilestoneStatus(orm.status),
            actual_completion_date=ensure_utc(orm.actual_completion_date),
            start_date=ensure_utc(orm.start_date),
            target_completion_date=ensure_utc(orm.target_completion_date),
            deliverables=orm.deliverables or [],
            approval_required=bool(orm.approval_required),
            priority=MilestonePriority(orm.priority),
            notes=orm.notes,
            tags=orm.tags or [],
            created_by=orm.created_by,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def _to_models(self, session, orms: list[MilestoneORM]) -> list[Milestone]:
        """Load child rows for a batch of milestones in four queries."""
        if not orms:
            return []
        ids = [orm.id for orm in orms]

        reviewers: dict[str, list[str]] = defaultdict(list)
        result = await session.execute(
            select(MilestoneReviewerORM.milestone_id, MilestoneReviewerORM.user_id)
            .where(MilestoneReviewerORM.milestone_id.in_(ids))
            .order_by(MilestoneReviewerORM.id)
        )
        for milestone_id, user_id in result.all():
            reviewers[milestone_id].append(user_id)

        dependencies: dict[str, list[str]] = defaultdict(list)
        result = await session.execute(
            select(MilestoneDependencyORM.milestone_id, MilestoneDependencyORM.depends_on_id)
            .where(MilestoneDependencyORM.milestone_id.in_(ids))
            .order_by(MilestoneDependencyORM.id)
        )
        for milestone_id, depends_on_id in result.all():
            dependencies[milestone_id].append(depends_on_id)

        approvals: dict[str, list[str]] = defaultdict(list)
        result = await session.execute(
            select(MilestoneApprovalORM.milestone_id, MilestoneApprovalORM.user_id)
            .where(MilestoneApprovalORM.milestone_id.in_(ids))
            .order_by(MilestoneApprovalORM.id)
        )
        for milestone_id, user_id in result.all():
            approvals[milestone_id].append(user_id)

        tasks: dict[str, list[str]] = defaultdict(list)
        result = await session.execute(
            select(TaskORM.milestone_id, TaskORM.id)
            .where(TaskORM.milestone_id.in_(ids))
            .order_by(TaskORM.created_at)
        )
        for milestone_id, task_id in result.all():
            tasks[milestone_id].append(task_id)

        return [
            self._orm_to_model(
                orm,
                reviewers[orm.id],
                dependencies[orm.id],
                approvals[orm.id],
                tasks[orm.id],
            )
            for orm in orms
        ]

    async def _get(self, session, milestone_id: UUID) -> Optional[Milestone]:
        result = await session.execute(
            select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
        )
        orm = result.scalar_one_or_none()
        if not orm:
            return None
        models = await self._to_models(session, [orm])
        return models[0]

    def _replace_reviewers(self, session, milestone_id: str, reviewer_ids: list[str]) -> None:
        for user_id in reviewer_ids:
            session.add(MilestoneReviewerORM(milestone_id=milestone_id, user_id=user_id))

    def _replace_dependencies(self, session, milestone_id: str, dependency_ids: list[UUID]) -> None:
        for depends_on_id in dependency_ids:
            session.add(
                MilestoneDependencyORM(milestone_id=milestone_id, depends_on_id=str(depends_on_id))
            )

    def _apply_filters(self, query, filters: Optional[MilestoneFilters]):
        if not filters:
            return query
        if filters.project_id:
            query = query.where(MilestoneORM.project_id == str(filters.project_id))
        if filters.status:
            query = query.where(MilestoneORM.status == filters.status.value)
        if filters.owner_id:
            query = query.where(MilestoneORM.owner_id == filters.owner_id)
        if filters.priority:
            query = query.where(MilestoneORM.priority == filters.priority.value)
        if filters.from_date:
            query = query.where(MilestoneORM.target_completion_date >= ensure_utc(filters.from_date))
        if filters.to_date:
            query = query.where(MilestoneORM.target_completion_date <= ensure_utc(filters.to_date))
        if filters.involved_user_id:
            reviewing = select(MilestoneReviewerORM.milestone_id).where(
                MilestoneReviewerORM.user_id == filters.involved_user_id
            )
            query = query.where(
                or_(
                    MilestoneORM.owner_id == filters.involved_user_id,
                    MilestoneORM.created_by == filters.involved_user_id,
                    MilestoneORM.id.in_(reviewing),
                )
            )
        return query

    async def create(self, user_id: str, milestone: MilestoneCreate, fields: dict[str, Any]) -> Milestone:
        """Create a new milestone."""
        async with self._session_factory() as session:
            orm = MilestoneORM(
                id=str(uuid4()),
                project_id=str(milestone.project_id),
                title=milestone.title,
                description=milestone.description,
                owner_id=milestone.owner_id,
                start_date=ensure_utc(milestone.start_date),
                target_completion_date=ensure_utc(milestone.target_completion_date),
                deliverables=list(milestone.deliverables),
                approval_required=milestone.approval_required,
                priority=milestone.priority.value,
                notes=milestone.notes,
                tags=list(milestone.tags),
                created_by=user_id,
                **{key: _column_value(value) for key, value in fields.items()},
            )
            session.add(orm)
            self._replace_reviewers(session, orm.id, milestone.reviewer_ids)
            self._replace_dependencies(session, orm.id, milestone.dependency_ids)
            await session.commit()
            return await self._get(session, UUID(orm.id))

    async def get_by_id(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        async with self._session_factory() as session:
            return await self._get(session, milestone_id)

    async def list(
        self,
        filters: Optional[MilestoneFilters] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Milestone]:
        """List milestones ordered by target completion date."""
        async with self._session_factory() as session:
            query = self._apply_filters(select(MilestoneORM), filters)
            query = (
                query.order_by(MilestoneORM.target_completion_date.asc(), MilestoneORM.created_at.asc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return await self._to_models(session, list(result.scalars().all()))

    async def count(self, filters: Optional[MilestoneFilters] = None) -> int:
        """Count milestones matching the filters."""
        async with self._session_factory() as session:
            query = self._apply_filters(select(func.count(MilestoneORM.id)), filters)
            result = await session.execute(query)
            return result.scalar() or 0

    async def count_dependents(self, milestone_id: UUID) -> int:
        """Count milestones whose dependency list contains ``milestone_id``."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count(MilestoneDependencyORM.id)).where(
                    MilestoneDependencyORM.depends_on_id == str(milestone_id)
                )
            )
            return result.scalar() or 0

    async def update_fields(self, milestone_id: UUID, fields: dict[str, Any]) -> Milestone:
        """Overwrite the given fields; list fields are replaced wholesale."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Milestone {milestone_id} not found")

            fields = dict(fields)
            reviewer_ids = fields.pop("reviewer_ids", None)
            dependency_ids = fields.pop("dependency_ids", None)
            if reviewer_ids is not None:
                await session.execute(
                    delete(MilestoneReviewerORM).where(MilestoneReviewerORM.milestone_id == orm.id)
                )
                self._replace_reviewers(session, orm.id, reviewer_ids)
            if dependency_ids is not None:
                await session.execute(
                    delete(MilestoneDependencyORM).where(MilestoneDependencyORM.milestone_id == orm.id)
                )
                self._replace_dependencies(session, orm.id, dependency_ids)

            for field, value in fields.items():
                setattr(orm, field, _column_value(value))

            orm.updated_at = now_utc()
            await session.commit()
            return await self._get(session, milestone_id)

    async def add_approver(self, milestone_id: UUID, user_id: str) -> list[str]:
        """Atomically add ``user_id`` to the approval set."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneORM.id).where(MilestoneORM.id == str(milestone_id))
            )
            if result.scalar_one_or_none() is None:
                raise NotFoundError(f"Milestone {milestone_id} not found")

            session.add(MilestoneApprovalORM(milestone_id=str(milestone_id), user_id=user_id))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError("You have already approved this milestone") from e

            result = await session.execute(
                select(MilestoneApprovalORM.user_id)
                .where(MilestoneApprovalORM.milestone_id == str(milestone_id))
                .order_by(MilestoneApprovalORM.id)
            )
            return list(result.scalars().all())

    async def delete(self, milestone_id: UUID) -> bool:
        """Physically delete a milestone together with its own child rows."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            await session.execute(
                delete(MilestoneReviewerORM).where(MilestoneReviewerORM.milestone_id == orm.id)
            )
            await session.execute(
                delete(MilestoneDependencyORM).where(MilestoneDependencyORM.milestone_id == orm.id)
            )
            await session.execute(
                delete(MilestoneApprovalORM).where(MilestoneApprovalORM.milestone_id == orm.id)
            )
            await session.delete(orm)
            await session.commit()
            return True

    async def list_ids(self) -> set[UUID]:
        """Return the IDs of every stored milestone."""
        async with self._session_factory() as session:
            result = await session.execute(select(MilestoneORM.id))
            return {UUID(milestone_id) for milestone_id in result.scalars().all()}

    async def list_dependency_edges(self) -> list[tuple[UUID, UUID]]:
        """Return every ``(milestone_id, depends_on_id)`` edge."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneDependencyORM.milestone_id, MilestoneDependencyORM.depends_on_id)
                .order_by(MilestoneDependencyORM.id)
            )
            return [(UUID(src), UUID(dst)) for src, dst in result.all()]
