"""
Reviewer approval workflow for milestones.

Approvals are a monotonic log: entries are only ever appended, and removing
a reviewer later leaves their approval in place. Approving never changes the
milestone's status.
"""

from __future__ import annotations

from uuid import UUID

from app.core.exceptions import ConflictError, NotFoundError
from app.core.logger import logger
from app.interfaces.auth_provider import User
from app.interfaces.milestone_repository import IMilestoneRepository
from app.models.milestone import Milestone
from app.services.milestone_permissions import MilestoneOperation, ensure_authorized


class MilestoneApprovalWorkflow:
    def __init__(self, milestone_repo: IMilestoneRepository):
        self._milestone_repo = milestone_repo

    async def approve(self, milestone_id: UUID, actor: User) -> tuple[Milestone, list[str]]:
        """
        Record ``actor``'s approval.

        Checks, in order: the milestone exists, the actor is a reviewer or an
        admin, the actor has not approved yet. The append itself is a single
        atomic set-add at the store, which also rejects a racing duplicate.

        Returns:
            The milestone as loaded before the approval and the new approval log

        Raises:
            NotFoundError: Milestone does not exist
            ForbiddenError: Actor is neither reviewer nor admin
            ConflictError: Actor already approved
        """
        milestone = await self._milestone_repo.get_by_id(milestone_id)
        if not milestone:
            raise NotFoundError(f"Milestone {milestone_id} not found")

        ensure_authorized(MilestoneOperation.APPROVE, actor, milestone)

        if actor.id in milestone.approved_by:
            logger.info(f"Duplicate approval of milestone {milestone_id} by {actor.id} rejected")
            raise ConflictError("You have already approved this milestone")

        approved_by = await self._milestone_repo.add_approver(milestone_id, actor.id)
        return milestone, approved_by
