"""
Activity log API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from app.api.deps import ActivityRepo, CurrentUser
from app.models.activity import Activity
from app.models.common import ApiResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[list[Activity]])
async def list_activities(
    user: CurrentUser,
    repo: ActivityRepo,
    entity_id: Optional[UUID] = Query(None, description="Filter by entity"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[Activity]]:
    """List audit events, newest first."""
    activities = await repo.list(entity_id=entity_id, limit=limit, offset=offset)
    return ApiResponse(data=activities)
