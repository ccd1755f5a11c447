"""
Background scheduler service for periodic jobs.

Runs the milestone reconciliation pass on a fixed interval.
Uses APScheduler for in-process scheduling without external dependencies.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import get_settings
from app.core.logger import logger
from app.interfaces.milestone_repository import IMilestoneRepository
from app.interfaces.task_repository import ITaskRepository
from app.services.milestone_reconciliation import (
    MilestoneReconciliationService,
    ReconciliationReport,
)
from app.utils.datetime_utils import now_utc


class BackgroundScheduler:
    """
    Background scheduler for periodic jobs.

    Features:
    - Milestone reconciliation every RECONCILE_INTERVAL_MINUTES
    - One reconciliation pass right after startup
    """

    def __init__(
        self,
        milestone_repo: IMilestoneRepository,
        task_repo: ITaskRepository,
    ):
        self._reconciliation = MilestoneReconciliationService(milestone_repo, task_repo)
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._last_run: Optional[datetime] = None
        self._startup_task: Optional[asyncio.Task] = None

    @property
    def last_run(self) -> Optional[datetime]:
        return self._last_run

    async def start(self):
        """Start the scheduler and run one reconciliation pass."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.ENVIRONMENT == "test":
            logger.info("Background scheduler disabled in test environment")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._run_reconciliation,
            IntervalTrigger(minutes=settings.RECONCILE_INTERVAL_MINUTES),
            id="milestone_reconciliation",
            name="Milestone Reconciliation",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Milestone reconciliation: every {settings.RECONCILE_INTERVAL_MINUTES} minutes"
        )

        # Catch up on anything left over from a previous crash (non-blocking)
        self._startup_task = asyncio.create_task(self._run_reconciliation())

    async def stop(self):
        """Stop the scheduler."""
        if self._startup_task and not self._startup_task.done():
            self._startup_task.cancel()
            try:
                await self._startup_task
            except asyncio.CancelledError:
                pass
        self._startup_task = None

        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def _run_reconciliation(self) -> Optional[ReconciliationReport]:
        """Run one reconciliation pass, logging instead of raising."""
        try:
            report = await self._reconciliation.run()
        except Exception as e:
            logger.error(f"Milestone reconciliation failed: {e}", exc_info=True)
            return None
        self._last_run = now_utc()
        logger.info(
            f"Milestone reconciliation finished: {report.orphaned_tasks_cleared} orphaned task(s) cleared, "
            f"{len(report.dangling_dependencies)} dangling dependency edge(s)"
        )
        return report
