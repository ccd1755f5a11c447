"""
Milestone API endpoints.

Provides the milestone lifecycle: CRUD, progress updates and reviewer
approval.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from app.api.deps import CurrentUser, MilestoneService
from app.api.errors import to_http_exception
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.models.common import ApiResponse
from app.models.enums import MilestonePriority, MilestoneStatus
from app.models.milestone import (
    Milestone,
    MilestoneApprovalResult,
    MilestoneCreate,
    MilestoneFilters,
    MilestoneProgressResult,
    MilestoneProgressUpdate,
    MilestoneUpdate,
)

router = APIRouter(prefix="/milestones", tags=["milestones"])


@router.get("", response_model=ApiResponse[list[Milestone]])
async def list_milestones(
    user: CurrentUser,
    service: MilestoneService,
    project_id: Optional[UUID] = Query(None, description="Filter by project"),
    status_filter: Optional[MilestoneStatus] = Query(None, alias="status"),
    owner_id: Optional[str] = Query(None, description="Filter by owner"),
    priority: Optional[MilestonePriority] = Query(None),
    from_date: Optional[datetime] = Query(None, description="Target date lower bound"),
    to_date: Optional[datetime] = Query(None, description="Target date upper bound"),
    mine: bool = Query(False, description="Only milestones the caller owns, reviews or created"),
    limit: int = Query(get_settings().DEFAULT_PAGE_SIZE, ge=1, le=get_settings().MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[Milestone]]:
    """List milestones ordered by target completion date."""
    filters = MilestoneFilters(
        project_id=project_id,
        status=status_filter,
        owner_id=owner_id,
        priority=priority,
        from_date=from_date,
        to_date=to_date,
    )
    try:
        milestones, total = await service.list(user, filters, limit=limit, offset=offset, mine=mine)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=milestones, total=total)


@router.get("/{milestone_id}", response_model=ApiResponse[Milestone])
async def get_milestone(
    milestone_id: UUID,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[Milestone]:
    """Get a milestone by ID."""
    try:
        milestone = await service.get(user, milestone_id)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=milestone)


@router.post("", response_model=ApiResponse[Milestone], status_code=status.HTTP_201_CREATED)
async def create_milestone(
    milestone: MilestoneCreate,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[Milestone]:
    """Create a new milestone."""
    try:
        created = await service.create(user, milestone)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=created, message="Milestone created successfully")


@router.put("/{milestone_id}", response_model=ApiResponse[Milestone])
async def update_milestone(
    milestone_id: UUID,
    milestone: MilestoneUpdate,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[Milestone]:
    """Update a milestone (owner, creator or admin)."""
    try:
        updated = await service.update(user, milestone_id, milestone)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=updated, message="Milestone updated successfully")


@router.delete("/{milestone_id}", response_model=ApiResponse[None])
async def delete_milestone(
    milestone_id: UUID,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[None]:
    """Delete a milestone nothing else depends on."""
    try:
        await service.delete(user, milestone_id)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(message="Milestone deleted successfully")


@router.put("/{milestone_id}/approve", response_model=ApiResponse[MilestoneApprovalResult])
async def approve_milestone(
    milestone_id: UUID,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[MilestoneApprovalResult]:
    """Approve a milestone (reviewer or admin, once per user)."""
    try:
        result = await service.approve(user, milestone_id)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=result, message="Milestone approved successfully")


@router.put("/{milestone_id}/progress", response_model=ApiResponse[MilestoneProgressResult])
async def update_milestone_progress(
    milestone_id: UUID,
    body: MilestoneProgressUpdate,
    user: CurrentUser,
    service: MilestoneService,
) -> ApiResponse[MilestoneProgressResult]:
    """Set progress; status and completion date follow from it."""
    try:
        result = await service.update_progress(user, milestone_id, body.progress)
    except AppError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(data=result, message="Milestone progress updated successfully")
