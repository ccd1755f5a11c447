"""
Milestone dependency integrity utilities.

Guards deletion against incoming "depends on" edges and clears task
back-references once a milestone is gone. Outgoing ``dependency_ids`` are
not checked for existence and cycles are not detected.
"""

from typing import Optional
from uuid import UUID

from app.core.exceptions import ConflictError, ValidationError
from app.core.logger import logger


class DependencyValidator:
    """Validator for milestone dependencies."""

    def __init__(self, milestone_repo, task_repo):
        """
        Initialize validator with repositories.

        Args:
            milestone_repo: Milestone repository for dependency counts
            task_repo: Task repository for back-reference cleanup
        """
        self.milestone_repo = milestone_repo
        self.task_repo = task_repo

    def validate_dependencies(
        self,
        dependency_ids: list[UUID],
        milestone_id: Optional[UUID] = None,
    ) -> None:
        """
        Validate a milestone's dependency list.

        Args:
            dependency_ids: Milestones the milestone will depend on
            milestone_id: ID of the milestone being edited (None on create)

        Raises:
            ValidationError: If the milestone would depend on itself
        """
        if milestone_id is not None and milestone_id in dependency_ids:
            raise ValidationError("A milestone cannot depend on itself")

    async def count_dependents(self, milestone_id: UUID) -> int:
        """Count milestones listing ``milestone_id`` in their dependencies."""
        return await self.milestone_repo.count_dependents(milestone_id)

    async def can_delete(self, milestone_id: UUID) -> bool:
        """Only incoming edges block a delete."""
        return await self.count_dependents(milestone_id) == 0

    async def ensure_deletable(self, milestone_id: UUID) -> None:
        """
        Raise if other milestones depend on ``milestone_id``.

        Raises:
            ConflictError: With ``details={"dependent_count": n}``
        """
        count = await self.count_dependents(milestone_id)
        if count > 0:
            raise ConflictError(
                f"Cannot delete milestone: {count} other milestone(s) depend on this milestone",
                details={"dependent_count": count},
            )

    async def clear_task_references(self, milestone_id: UUID) -> int:
        """
        Clear ``milestone_id`` on every associated task.

        Runs after the milestone row is gone. A failure here is logged and
        left for the reconciliation job; the delete itself stands.

        Returns:
            Number of tasks updated (0 when the update failed)
        """
        try:
            cleared = await self.task_repo.clear_milestone(milestone_id)
        except Exception as e:
            logger.error(
                f"Failed to clear task references for deleted milestone {milestone_id}: {e}",
                exc_info=True,
            )
            return 0
        if cleared:
            logger.info(f"Cleared milestone {milestone_id} from {cleared} task(s)")
        return cleared
