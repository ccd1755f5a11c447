"""
Milestone repository interface.

Defines the contract for milestone persistence. ``add_approver`` must be an
atomic set-add so that concurrent approvals never overwrite each other.
``task_ids`` on returned milestones is read from the tasks' back-references.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from app.models.milestone import Milestone, MilestoneCreate, MilestoneFilters


class IMilestoneRepository(ABC):
    """Abstract interface for milestone persistence."""

    @abstractmethod
    async def create(self, user_id: str, milestone: MilestoneCreate, fields: dict[str, Any]) -> Milestone:
        """
        Create a new milestone.

        Args:
            user_id: Creator user ID (stored as ``created_by``)
            milestone: Milestone creation data
            fields: Lifecycle fields (status, progress, actual_completion_date)

        Returns:
            Created milestone
        """
        pass

    @abstractmethod
    async def get_by_id(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        pass

    @abstractmethod
    async def list(
        self,
        filters: Optional[MilestoneFilters] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Milestone]:
        """List milestones ordered by target completion date."""
        pass

    @abstractmethod
    async def count(self, filters: Optional[MilestoneFilters] = None) -> int:
        """Count milestones matching the filters."""
        pass

    @abstractmethod
    async def count_dependents(self, milestone_id: UUID) -> int:
        """Count milestones whose dependency list contains ``milestone_id``."""
        pass

    @abstractmethod
    async def update_fields(self, milestone_id: UUID, fields: dict[str, Any]) -> Milestone:
        """
        Overwrite the given fields ($set semantics).

        List fields (reviewer_ids, dependency_ids, deliverables, tags) are
        replaced wholesale.

        Raises:
            NotFoundError: If the milestone does not exist
        """
        pass

    @abstractmethod
    async def add_approver(self, milestone_id: UUID, user_id: str) -> list[str]:
        """
        Atomically add ``user_id`` to the approval set.

        Returns:
            The approval set after the insert

        Raises:
            ConflictError: If the user had already approved
            NotFoundError: If the milestone does not exist
        """
        pass

    @abstractmethod
    async def delete(self, milestone_id: UUID) -> bool:
        """Physically delete a milestone. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def list_ids(self) -> set[UUID]:
        """Return the IDs of every stored milestone."""
        pass

    @abstractmethod
    async def list_dependency_edges(self) -> list[tuple[UUID, UUID]]:
        """Return every ``(milestone_id, depends_on_id)`` edge."""
        pass
