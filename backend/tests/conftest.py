"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database; API tests drive the real
app through httpx with the repositories pointed at that database.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTH_PROVIDER", "mock")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.infrastructure.local.activity_repository import SqliteActivityRepository  # noqa: E402
from app.infrastructure.local.database import Base  # noqa: E402
from app.infrastructure.local.milestone_repository import SqliteMilestoneRepository  # noqa: E402
from app.infrastructure.local.project_repository import SqliteProjectRepository  # noqa: E402
from app.infrastructure.local.task_repository import SqliteTaskRepository  # noqa: E402
from app.interfaces.auth_provider import User  # noqa: E402
from app.models.enums import UserRole  # noqa: E402
from app.models.milestone import MilestoneCreate  # noqa: E402


@pytest.fixture
async def session_factory():
    """Create in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    yield async_session_factory

    await engine.dispose()


@pytest.fixture
def test_user_id():
    return "test_user_123"


@pytest.fixture
def milestone_repo(session_factory):
    return SqliteMilestoneRepository(session_factory=session_factory)


@pytest.fixture
def project_repo(session_factory):
    return SqliteProjectRepository(session_factory=session_factory)


@pytest.fixture
def task_repo(session_factory):
    return SqliteTaskRepository(session_factory=session_factory)


@pytest.fixture
def activity_repo(session_factory):
    return SqliteActivityRepository(session_factory=session_factory)


def _make_user(user_id: str, role: UserRole = UserRole.USER) -> User:
    return User(id=user_id, email=f"{user_id}@example.com", display_name=user_id, role=role)


def _milestone_create(project_id, owner_id: str = "owner", **overrides) -> MilestoneCreate:
    """Build a valid MilestoneCreate with a one-week window."""
    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    data = {
        "title": "Beta release",
        "project_id": project_id,
        "owner_id": owner_id,
        "start_date": start,
        "target_completion_date": start + timedelta(days=7),
    }
    data.update(overrides)
    return MilestoneCreate(**data)


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app, backed by the test database."""
    from app.api.deps import (
        get_activity_repository,
        get_auth_provider,
        get_milestone_repository,
        get_project_repository,
        get_task_repository,
    )
    from app.infrastructure.local.mock_auth import MockAuthProvider
    from main import app

    app.dependency_overrides[get_milestone_repository] = lambda: SqliteMilestoneRepository(
        session_factory=session_factory
    )
    app.dependency_overrides[get_project_repository] = lambda: SqliteProjectRepository(
        session_factory=session_factory
    )
    app.dependency_overrides[get_task_repository] = lambda: SqliteTaskRepository(
        session_factory=session_factory
    )
    app.dependency_overrides[get_activity_repository] = lambda: SqliteActivityRepository(
        session_factory=session_factory
    )
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider(enabled=True)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def new_milestone():
    """Factory for a valid MilestoneCreate."""
    return _milestone_create


@pytest.fixture
def auth():
    """Authorization header for the mock provider (token is the user id)."""
    return _auth_header
