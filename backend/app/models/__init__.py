"""Pydantic models (schemas) for the application."""

from app.models.enums import (
    ActivityAction,
    MilestonePriority,
    MilestoneStatus,
    ProjectStatus,
    TaskStatus,
    UserRole,
)
from app.models.activity import Activity, ActivityCreate
from app.models.common import ApiResponse
from app.models.milestone import (
    Milestone,
    MilestoneApprovalResult,
    MilestoneCreate,
    MilestoneFilters,
    MilestoneProgressResult,
    MilestoneProgressUpdate,
    MilestoneUpdate,
)
from app.models.project import Project, ProjectCreate
from app.models.task import Task, TaskCreate

__all__ = [
    # Enums
    "ActivityAction",
    "MilestonePriority",
    "MilestoneStatus",
    "ProjectStatus",
    "TaskStatus",
    "UserRole",
    # Envelope
    "ApiResponse",
    # Activity
    "Activity",
    "ActivityCreate",
    # Milestone
    "Milestone",
    "MilestoneApprovalResult",
    "MilestoneCreate",
    "MilestoneFilters",
    "MilestoneProgressResult",
    "MilestoneProgressUpdate",
    "MilestoneUpdate",
    # Project
    "Project",
    "ProjectCreate",
    # Task
    "Task",
    "TaskCreate",
]
