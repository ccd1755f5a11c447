"""
Project model definitions.

Projects own milestones and tasks.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.enums import ProjectStatus


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    description: Optional[str] = Field(None, max_length=2000, description="Project description")


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""

    pass


class Project(ProjectBase):
    """Complete project model."""

    id: UUID
    user_id: str = Field(..., description="Owner user ID")
    status: ProjectStatus = Field(ProjectStatus.ACTIVE)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
