"""
Milestone model definitions.

Milestones are deliverable checkpoints within a project. Their status is
derived from progress, they carry a reviewer approval log and a list of
milestones they depend on.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.enums import MilestonePriority, MilestoneStatus
from app.utils.datetime_utils import ensure_utc


def _unique(values: list) -> list:
    """Collapse duplicates while keeping first-seen order."""
    return list(dict.fromkeys(values))


class MilestoneBase(BaseModel):
    """Base milestone fields."""

    title: str = Field(..., min_length=1, max_length=200, description="Milestone title")
    description: Optional[str] = Field(None, max_length=2000, description="Milestone description")
    start_date: datetime = Field(..., description="Planned start")
    target_completion_date: datetime = Field(..., description="Target due date")
    owner_id: str = Field(..., min_length=1, description="Responsible user ID")
    reviewer_ids: list[str] = Field(default_factory=list, description="Users allowed to approve")
    dependency_ids: list[UUID] = Field(
        default_factory=list, description="Milestones that precede this one"
    )
    deliverables: list[str] = Field(default_factory=list)
    approval_required: bool = False
    priority: MilestonePriority = MilestonePriority.MEDIUM
    notes: Optional[str] = Field(None, max_length=5000)
    tags: list[str] = Field(default_factory=list)

    @field_validator("reviewer_ids", "dependency_ids")
    @classmethod
    def _collapse_duplicates(cls, value: list) -> list:
        return _unique(value)

    @field_validator("start_date", "target_completion_date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        # Naive values are taken as UTC
        return ensure_utc(value)


class MilestoneCreate(MilestoneBase):
    """Schema for creating a milestone."""

    project_id: UUID = Field(..., description="Owning project ID")
    status: Optional[MilestoneStatus] = Field(
        None, description="Initial status (defaults to not-started)"
    )

    @model_validator(mode="after")
    def _check_dates(self) -> "MilestoneCreate":
        if self.target_completion_date < self.start_date:
            raise ValueError("target_completion_date must not precede start_date")
        return self


class MilestoneUpdate(BaseModel):
    """
    Schema for a partial milestone update.

    Unknown keys (id, created_by, created_at, project_id, approved_by) are
    ignored. List fields replace the stored list wholesale.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: Optional[datetime] = None
    target_completion_date: Optional[datetime] = None
    owner_id: Optional[str] = Field(None, min_length=1)
    reviewer_ids: Optional[list[str]] = None
    dependency_ids: Optional[list[UUID]] = None
    deliverables: Optional[list[str]] = None
    approval_required: Optional[bool] = None
    priority: Optional[MilestonePriority] = None
    notes: Optional[str] = Field(None, max_length=5000)
    tags: Optional[list[str]] = None
    status: Optional[MilestoneStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("reviewer_ids", "dependency_ids")
    @classmethod
    def _collapse_duplicates(cls, value: Optional[list]) -> Optional[list]:
        if value is None:
            return None
        return _unique(value)

    @field_validator("start_date", "target_completion_date")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Milestone(MilestoneBase):
    """Complete milestone model."""

    id: UUID
    project_id: UUID
    approved_by: list[str] = Field(default_factory=list)
    task_ids: list[UUID] = Field(default_factory=list)
    progress: int = Field(0, ge=0, le=100)
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    actual_completion_date: Optional[datetime] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneProgressUpdate(BaseModel):
    """Body of the progress endpoint."""

    progress: int = Field(..., ge=0, le=100, description="Progress percentage (0-100)")


class MilestoneProgressResult(BaseModel):
    """Status triple returned after a progress update."""

    progress: int
    status: MilestoneStatus
    actual_completion_date: Optional[datetime] = None


class MilestoneApprovalResult(BaseModel):
    """Approval log returned after a successful approval."""

    approved_by: list[str]


class MilestoneFilters(BaseModel):
    """Filters accepted by the milestone listing."""

    project_id: Optional[UUID] = None
    status: Optional[MilestoneStatus] = None
    owner_id: Optional[str] = None
    priority: Optional[MilestonePriority] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    involved_user_id: Optional[str] = None
