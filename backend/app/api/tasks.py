"""
Tasks API endpoints.

Tasks may reference a milestone; that reference is what milestone deletion
clears.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import CurrentUser, MilestoneRepo, ProjectRepo, TaskRepo
from app.models.common import ApiResponse
from app.models.task import Task, TaskCreate

router = APIRouter()


@router.post("", response_model=ApiResponse[Task], status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: CurrentUser,
    repo: TaskRepo,
    project_repo: ProjectRepo,
    milestone_repo: MilestoneRepo,
) -> ApiResponse[Task]:
    """Create a new task, optionally attached to a milestone."""
    if task.project_id and not await project_repo.get_by_id(task.project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {task.project_id} not found",
        )
    if task.milestone_id and not await milestone_repo.get_by_id(task.milestone_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Milestone {task.milestone_id} not found",
        )
    created = await repo.create(user.id, task)
    return ApiResponse(data=created, message="Task created successfully")


@router.get("", response_model=ApiResponse[list[Task]])
async def list_tasks(
    user: CurrentUser,
    repo: TaskRepo,
    project_id: Optional[UUID] = Query(None, description="Filter by project"),
    milestone_id: Optional[UUID] = Query(None, description="Filter by milestone"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[Task]]:
    """List tasks."""
    tasks = await repo.list(
        project_id=project_id,
        milestone_id=milestone_id,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=tasks)


@router.get("/{task_id}", response_model=ApiResponse[Task])
async def get_task(
    task_id: UUID,
    user: CurrentUser,
    repo: TaskRepo,
) -> ApiResponse[Task]:
    """Get a task by ID."""
    task = await repo.get(task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )
    return ApiResponse(data=task)
