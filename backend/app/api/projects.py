"""
Projects API endpoints.

Projects own milestones; only create and read are exposed.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import CurrentUser, ProjectRepo
from app.models.common import ApiResponse
from app.models.project import Project, ProjectCreate

router = APIRouter()


@router.post("", response_model=ApiResponse[Project], status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user: CurrentUser,
    repo: ProjectRepo,
) -> ApiResponse[Project]:
    """Create a new project owned by the caller."""
    created = await repo.create(user.id, project)
    return ApiResponse(data=created, message="Project created successfully")


@router.get("", response_model=ApiResponse[list[Project]])
async def list_projects(
    user: CurrentUser,
    repo: ProjectRepo,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[Project]]:
    """List projects."""
    projects = await repo.list(limit=limit, offset=offset)
    return ApiResponse(data=projects)


@router.get("/{project_id}", response_model=ApiResponse[Project])
async def get_project(
    project_id: UUID,
    user: CurrentUser,
    repo: ProjectRepo,
) -> ApiResponse[Project]:
    """Get a project by ID."""
    project = await repo.get_by_id(project_id)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_id} not found",
        )
    return ApiResponse(data=project)
