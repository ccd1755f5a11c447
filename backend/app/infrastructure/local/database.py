"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings
from app.utils.datetime_utils import now_utc


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ProjectORM(Base):
    """Project ORM model."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    project_id = Column(String(36), nullable=True, index=True)
    milestone_id = Column(String(36), nullable=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="TODO", index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneORM(Base):
    """Milestone ORM model."""

    __tablename__ = "milestones"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="not-started", index=True)
    progress = Column(Integer, nullable=False, default=0)
    actual_completion_date = Column(DateTime(timezone=True), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    target_completion_date = Column(DateTime(timezone=True), nullable=False, index=True)
    deliverables = Column(JSON, nullable=False, default=list)
    approval_required = Column(Boolean, nullable=False, default=False)
    priority = Column(String(10), nullable=False, default="medium", index=True)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    created_by = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneReviewerORM(Base):
    """Reviewer set of a milestone (replaced wholesale on update)."""

    __tablename__ = "milestone_reviewers"
    __table_args__ = (UniqueConstraint("milestone_id", "user_id", name="uq_milestone_reviewer"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    milestone_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)


class MilestoneDependencyORM(Base):
    """Directed "milestone depends on depends_on" edge."""

    __tablename__ = "milestone_dependencies"
    __table_args__ = (
        UniqueConstraint("milestone_id", "depends_on_id", name="uq_milestone_dependency"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    milestone_id = Column(String(36), nullable=False, index=True)
    depends_on_id = Column(String(36), nullable=False, index=True)


class MilestoneApprovalORM(Base):
    """
    Approval log entry.

    The unique constraint makes an approval a single-row insert, so two
    reviewers approving at once both land and a repeated approval fails.
    """

    __tablename__ = "milestone_approvals"
    __table_args__ = (UniqueConstraint("milestone_id", "user_id", name="uq_milestone_approval"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    milestone_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    approved_at = Column(DateTime(timezone=True), default=now_utc)


class ActivityORM(Base):
    """Audit log entry."""

    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    description = Column(String(1000), nullable=False)
    actor_id = Column(String(255), nullable=False, index=True)
    action = Column(String(20), nullable=False)
    entity_type = Column(String(50), nullable=False, default="milestone")
    entity_id = Column(String(36), nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)


# ===========================================
# Database Session Management
# ===========================================

_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.DATABASE_URL, echo=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get async session factory."""
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: Optional[AsyncEngine] = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine():
    """Dispose of the shared engine (application shutdown)."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
