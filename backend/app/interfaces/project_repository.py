"""
Project repository interface.

Defines the contract for project persistence operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.models.project import Project, ProjectCreate


class IProjectRepository(ABC):
    """Abstract interface for project persistence."""

    @abstractmethod
    async def create(self, user_id: str, project: ProjectCreate) -> Project:
        """
        Create a new project.

        Args:
            user_id: Owner user ID
            project: Project creation data

        Returns:
            Created project
        """
        pass

    @abstractmethod
    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """
        Get a project by ID.

        Args:
            project_id: Project ID

        Returns:
            Project if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0) -> list[Project]:
        """List projects, newest first."""
        pass
