"""API routers."""

from app.api import (
    activities,
    milestones,
    projects,
    tasks,
)

__all__ = [
    "activities",
    "milestones",
    "projects",
    "tasks",
]
