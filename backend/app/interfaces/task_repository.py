"""
Task repository interface.

Defines the contract for task persistence operations used by the milestone
lifecycle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.models.task import Task, TaskCreate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Owner user ID
            task: Task creation data

        Returns:
            Created task with generated ID and timestamps
        """
        pass

    @abstractmethod
    async def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        pass

    @abstractmethod
    async def list(
        self,
        project_id: Optional[UUID] = None,
        milestone_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """List tasks, optionally filtered by project or milestone."""
        pass

    @abstractmethod
    async def clear_milestone(self, milestone_id: UUID) -> int:
        """
        Clear the milestone back-reference in bulk.

        Every task whose ``milestone_id`` equals ``milestone_id`` gets
        ``milestone_id = None``. Tasks moved to another milestone in the
        meantime keep their new reference. Tasks are never deleted.

        Returns:
            Number of tasks updated
        """
        pass

    @abstractmethod
    async def clear_orphaned_milestones(self, existing_milestone_ids: set[UUID]) -> int:
        """
        Clear ``milestone_id`` on tasks pointing at a milestone not in the set.

        Returns:
            Number of tasks updated
        """
        pass
