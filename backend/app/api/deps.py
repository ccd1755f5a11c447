"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from app.core.config import get_settings
from app.interfaces.activity_repository import IActivityRepository
from app.interfaces.auth_provider import IAuthProvider, User
from app.interfaces.milestone_repository import IMilestoneRepository
from app.interfaces.project_repository import IProjectRepository
from app.interfaces.task_repository import ITaskRepository
from app.services.milestone_service import MilestoneLifecycleService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from app.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository()


@lru_cache()
def get_project_repository() -> IProjectRepository:
    """Get project repository instance."""
    from app.infrastructure.local.project_repository import SqliteProjectRepository
    return SqliteProjectRepository()


@lru_cache()
def get_milestone_repository() -> IMilestoneRepository:
    """Get milestone repository instance."""
    from app.infrastructure.local.milestone_repository import SqliteMilestoneRepository
    return SqliteMilestoneRepository()


@lru_cache()
def get_activity_repository() -> IActivityRepository:
    """Get activity log repository instance."""
    from app.infrastructure.local.activity_repository import SqliteActivityRepository
    return SqliteActivityRepository()


# ===========================================
# Auth Dependencies
# ===========================================


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "local":
        from app.infrastructure.auth.local_auth import LocalAuthProvider

        return LocalAuthProvider(settings)

    from app.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=True)


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With the mock provider the bearer token is the user ID.
    With the local provider the bearer token is a signed JWT.
    """
    if not auth_provider.is_enabled():
        # Mock user for development
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

TaskRepo = Annotated[ITaskRepository, Depends(get_task_repository)]
ProjectRepo = Annotated[IProjectRepository, Depends(get_project_repository)]
MilestoneRepo = Annotated[IMilestoneRepository, Depends(get_milestone_repository)]
ActivityRepo = Annotated[IActivityRepository, Depends(get_activity_repository)]
CurrentUser = Annotated[User, Depends(get_current_user)]


# ===========================================
# Service Dependencies
# ===========================================


def get_milestone_service(
    milestone_repo: MilestoneRepo,
    project_repo: ProjectRepo,
    task_repo: TaskRepo,
    activity_repo: ActivityRepo,
) -> MilestoneLifecycleService:
    """Build the lifecycle service over the request's repositories."""
    settings = get_settings()
    return MilestoneLifecycleService(
        milestone_repo=milestone_repo,
        project_repo=project_repo,
        task_repo=task_repo,
        activity_repo=activity_repo,
        activity_enabled=settings.ACTIVITY_LOG_ENABLED,
        max_page_size=settings.MAX_PAGE_SIZE,
    )


MilestoneService = Annotated[MilestoneLifecycleService, Depends(get_milestone_service)]
