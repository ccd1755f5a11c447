"""Abstract interfaces for infrastructure abstraction."""

from app.interfaces.activity_repository import IActivityRepository
from app.interfaces.auth_provider import IAuthProvider
from app.interfaces.milestone_repository import IMilestoneRepository
from app.interfaces.project_repository import IProjectRepository
from app.interfaces.task_repository import ITaskRepository

__all__ = [
    "IActivityRepository",
    "IAuthProvider",
    "IMilestoneRepository",
    "IProjectRepository",
    "ITaskRepository",
]
