"""
Task model definitions.

Only the fields the milestone lifecycle touches are modelled here; a task
may point at one milestone through ``milestone_id``.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.enums import TaskStatus


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: Optional[str] = Field(None, max_length=2000)
    project_id: Optional[UUID] = Field(None, description="Owning project ID")
    milestone_id: Optional[UUID] = Field(None, description="Associated milestone ID")
    due_date: Optional[datetime] = None


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    pass


class Task(TaskBase):
    """Complete task model."""

    id: UUID
    user_id: str
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
