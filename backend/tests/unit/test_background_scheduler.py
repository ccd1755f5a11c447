"""
Unit tests for BackgroundScheduler.
"""

from uuid import uuid4

import pytest

from app.core.config import Settings
from app.models.task import TaskCreate
from app.services import background_scheduler
from app.services.background_scheduler import BackgroundScheduler
from fakes import FakeMilestoneRepository, FakeTaskRepository


class BrokenMilestoneRepository(FakeMilestoneRepository):
    async def list_ids(self):
        raise RuntimeError("database is locked")


@pytest.mark.asyncio
async def test_start_is_disabled_in_test_environment():
    task_repo = FakeTaskRepository()
    scheduler = BackgroundScheduler(FakeMilestoneRepository(task_repo), task_repo)

    await scheduler.start()

    assert scheduler._scheduler is None
    await scheduler.stop()


@pytest.mark.asyncio
async def test_run_reconciliation_records_last_run():
    task_repo = FakeTaskRepository()
    await task_repo.create("u", TaskCreate(title="orphan", milestone_id=uuid4()))
    scheduler = BackgroundScheduler(FakeMilestoneRepository(task_repo), task_repo)

    report = await scheduler._run_reconciliation()

    assert report.orphaned_tasks_cleared == 1
    assert scheduler.last_run is not None


@pytest.mark.asyncio
async def test_run_reconciliation_swallows_failures():
    task_repo = FakeTaskRepository()
    scheduler = BackgroundScheduler(BrokenMilestoneRepository(task_repo), task_repo)

    assert await scheduler._run_reconciliation() is None
    assert scheduler.last_run is None


@pytest.mark.asyncio
async def test_start_keeps_startup_pass_until_stop(monkeypatch):
    monkeypatch.setattr(
        background_scheduler, "get_settings", lambda: Settings(ENVIRONMENT="local")
    )
    task_repo = FakeTaskRepository()
    scheduler = BackgroundScheduler(FakeMilestoneRepository(task_repo), task_repo)

    await scheduler.start()
    startup = scheduler._startup_task

    assert startup is not None
    assert scheduler._scheduler is not None

    await scheduler.stop()

    assert startup.done()
    assert scheduler._startup_task is None
    assert scheduler._scheduler is None
