"""
Milestone lifecycle orchestration.

Every mutating call follows the same sequence: load the milestone, authorize
the actor, route status/progress edits through ``apply_transition`` and
approvals through the approval workflow, re-check integrity constraints,
persist, then emit exactly one audit event. Failed calls emit nothing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from app.core.exceptions import NotFoundError, ValidationError
from app.core.logger import logger
from app.interfaces.activity_repository import IActivityRepository
from app.interfaces.auth_provider import User
from app.interfaces.milestone_repository import IMilestoneRepository
from app.interfaces.project_repository import IProjectRepository
from app.interfaces.task_repository import ITaskRepository
from app.models.enums import ActivityAction
from app.models.milestone import (
    Milestone,
    MilestoneApprovalResult,
    MilestoneCreate,
    MilestoneFilters,
    MilestoneProgressResult,
    MilestoneUpdate,
)
from app.services.activity_service import ActivityLogger
from app.services.milestone_approval import MilestoneApprovalWorkflow
from app.services.milestone_permissions import MilestoneOperation, ensure_authorized
from app.services.milestone_status import (
    INITIAL_STATE,
    MilestoneState,
    SetProgress,
    SetStatus,
    apply_transition,
)
from app.utils.datetime_utils import ensure_utc, now_utc
from app.utils.dependency_validator import DependencyValidator

# Fields an update may clear by sending null
NULLABLE_FIELDS = {"description", "notes"}
# Routed through apply_transition rather than written directly
LIFECYCLE_FIELDS = {"status", "progress"}


class MilestoneLifecycleService:
    """Create / read / update / progress / approve / delete for milestones."""

    def __init__(
        self,
        milestone_repo: IMilestoneRepository,
        project_repo: IProjectRepository,
        task_repo: ITaskRepository,
        activity_repo: IActivityRepository,
        activity_enabled: bool = True,
        max_page_size: int = 100,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._milestone_repo = milestone_repo
        self._project_repo = project_repo
        self._validator = DependencyValidator(milestone_repo, task_repo)
        self._approvals = MilestoneApprovalWorkflow(milestone_repo)
        self._activity = ActivityLogger(activity_repo, enabled=activity_enabled)
        self._max_page_size = max_page_size
        self._clock = clock

    async def _load(self, milestone_id: UUID) -> Milestone:
        milestone = await self._milestone_repo.get_by_id(milestone_id)
        if not milestone:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        return milestone

    @staticmethod
    def _state_of(milestone: Milestone) -> MilestoneState:
        return MilestoneState(
            status=milestone.status,
            progress=milestone.progress,
            actual_completion_date=milestone.actual_completion_date,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, actor: User, milestone_id: UUID) -> Milestone:
        milestone = await self._load(milestone_id)
        ensure_authorized(MilestoneOperation.READ, actor, milestone)
        return milestone

    async def list(
        self,
        actor: User,
        filters: Optional[MilestoneFilters] = None,
        limit: int = 10,
        offset: int = 0,
        mine: bool = False,
    ) -> tuple[list[Milestone], int]:
        """List milestones and the total number matching the filters."""
        ensure_authorized(MilestoneOperation.READ, actor)
        filters = filters or MilestoneFilters()
        if mine:
            filters = filters.model_copy(update={"involved_user_id": actor.id})
        limit = max(1, min(limit, self._max_page_size))
        offset = max(0, offset)
        milestones = await self._milestone_repo.list(filters, limit=limit, offset=offset)
        total = await self._milestone_repo.count(filters)
        return milestones, total

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create(self, actor: User, data: MilestoneCreate) -> Milestone:
        ensure_authorized(MilestoneOperation.CREATE, actor)

        project = await self._project_repo.get_by_id(data.project_id)
        if not project:
            raise NotFoundError(f"Project {data.project_id} not found")

        self._validator.validate_dependencies(data.dependency_ids)

        state = INITIAL_STATE
        if data.status is not None:
            state = apply_transition(state, SetStatus(data.status), self._clock())

        milestone = await self._milestone_repo.create(actor.id, data, state.as_fields())
        logger.info(f"Milestone {milestone.id} created in project {project.id} by {actor.id}")

        await self._activity.log(
            actor_id=actor.id,
            action=ActivityAction.CREATE,
            entity_id=milestone.id,
            description=f'Milestone "{milestone.title}" created for project "{project.name}"',
            metadata={"milestone_id": str(milestone.id), "project_id": str(project.id)},
        )
        return milestone

    async def update(self, actor: User, milestone_id: UUID, update: MilestoneUpdate) -> Milestone:
        """
        Apply a partial update.

        List fields replace the stored lists wholesale. ``progress`` and
        ``status`` go through the single transition function; when both are
        sent, progress wins and a disagreeing status is rejected.
        """
        milestone = await self._load(milestone_id)
        ensure_authorized(MilestoneOperation.UPDATE, actor, milestone)

        changes = update.model_dump(exclude_unset=True)
        fields: dict[str, Any] = {
            key: value
            for key, value in changes.items()
            if key not in LIFECYCLE_FIELDS and (value is not None or key in NULLABLE_FIELDS)
        }

        if "dependency_ids" in fields:
            self._validator.validate_dependencies(fields["dependency_ids"], milestone_id)

        start = ensure_utc(fields.get("start_date", milestone.start_date))
        target = ensure_utc(fields.get("target_completion_date", milestone.target_completion_date))
        if target < start:
            raise ValidationError("target_completion_date must not precede start_date")

        fields.update(self._lifecycle_changes(milestone, update))

        if not fields:
            return milestone

        updated = await self._milestone_repo.update_fields(milestone_id, fields)
        logger.info(f"Milestone {milestone_id} updated by {actor.id}: {sorted(fields)}")

        await self._activity.log(
            actor_id=actor.id,
            action=ActivityAction.UPDATE,
            entity_id=milestone_id,
            description=f'Milestone "{updated.title}" updated',
            metadata={"milestone_id": str(milestone_id), "updated_fields": sorted(fields)},
        )
        return updated

    def _lifecycle_changes(self, milestone: Milestone, update: MilestoneUpdate) -> dict[str, Any]:
        if update.progress is None and update.status is None:
            return {}
        current = self._state_of(milestone)
        now = self._clock()
        if update.progress is not None:
            new_state = apply_transition(current, SetProgress(update.progress), now)
            if update.status is not None and update.status != new_state.status:
                raise ValidationError(
                    f"Status '{update.status.value}' conflicts with progress {update.progress}"
                )
        else:
            new_state = apply_transition(current, SetStatus(update.status), now)
        if new_state == current:
            return {}
        return new_state.as_fields()

    async def update_progress(
        self, actor: User, milestone_id: UUID, progress: int
    ) -> MilestoneProgressResult:
        milestone = await self._load(milestone_id)
        ensure_authorized(MilestoneOperation.PROGRESS, actor, milestone)

        new_state = apply_transition(self._state_of(milestone), SetProgress(progress), self._clock())
        updated = await self._milestone_repo.update_fields(milestone_id, new_state.as_fields())
        logger.info(
            f"Milestone {milestone_id} progress {milestone.progress} -> {updated.progress} "
            f"({updated.status.value}) by {actor.id}"
        )

        await self._activity.log(
            actor_id=actor.id,
            action=ActivityAction.PROGRESS,
            entity_id=milestone_id,
            description=f'Milestone "{updated.title}" progress updated to {updated.progress}%',
            metadata={"milestone_id": str(milestone_id), "progress": updated.progress},
        )
        return MilestoneProgressResult(
            progress=updated.progress,
            status=updated.status,
            actual_completion_date=updated.actual_completion_date,
        )

    async def approve(self, actor: User, milestone_id: UUID) -> MilestoneApprovalResult:
        milestone, approved_by = await self._approvals.approve(milestone_id, actor)
        logger.info(f"Milestone {milestone_id} approved by {actor.id} ({len(approved_by)} approval(s))")

        await self._activity.log(
            actor_id=actor.id,
            action=ActivityAction.APPROVE,
            entity_id=milestone_id,
            description=f'Milestone "{milestone.title}" approved by {actor.display_name or actor.id}',
            metadata={"milestone_id": str(milestone_id), "approved_by": approved_by},
        )
        return MilestoneApprovalResult(approved_by=approved_by)

    async def delete(self, actor: User, milestone_id: UUID) -> None:
        """
        Delete a milestone, then clear its tasks' back-references.

        The two steps are not atomic; a failure clearing task references is
        logged and repaired later by the reconciliation job.
        """
        milestone = await self._load(milestone_id)
        ensure_authorized(MilestoneOperation.DELETE, actor, milestone)

        await self._validator.ensure_deletable(milestone_id)

        deleted = await self._milestone_repo.delete(milestone_id)
        if not deleted:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        cleared = await self._validator.clear_task_references(milestone_id)
        logger.info(f"Milestone {milestone_id} deleted by {actor.id}")

        await self._activity.log(
            actor_id=actor.id,
            action=ActivityAction.DELETE,
            entity_id=milestone_id,
            description=f'Milestone "{milestone.title}" deleted',
            metadata={
                "milestone_id": str(milestone_id),
                "project_id": str(milestone.project_id),
                "tasks_cleared": cleared,
            },
        )
