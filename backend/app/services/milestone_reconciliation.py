"""
Repair pass for milestone references.

Deleting a milestone and clearing its tasks' back-references are two separate
writes. This job is the idempotent cleanup for a crash between them: it
clears task references to milestones that no longer exist and reports (but
does not touch) dependency edges that point at missing milestones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from app.core.logger import logger
from app.interfaces.milestone_repository import IMilestoneRepository
from app.interfaces.task_repository import ITaskRepository


@dataclass
class ReconciliationReport:
    orphaned_tasks_cleared: int = 0
    dangling_dependencies: list[tuple[UUID, UUID]] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "orphaned_tasks_cleared": self.orphaned_tasks_cleared,
            "dangling_dependencies": [
                {"milestone_id": str(src), "depends_on_id": str(dst)}
                for src, dst in self.dangling_dependencies
            ],
        }


class MilestoneReconciliationService:
    def __init__(self, milestone_repo: IMilestoneRepository, task_repo: ITaskRepository):
        self._milestone_repo = milestone_repo
        self._task_repo = task_repo

    async def run(self) -> ReconciliationReport:
        existing = await self._milestone_repo.list_ids()
        report = ReconciliationReport()

        report.orphaned_tasks_cleared = await self._task_repo.clear_orphaned_milestones(existing)
        if report.orphaned_tasks_cleared:
            logger.warning(
                f"Reconciliation cleared {report.orphaned_tasks_cleared} task reference(s) "
                "to deleted milestones"
            )

        edges = await self._milestone_repo.list_dependency_edges()
        report.dangling_dependencies = [(src, dst) for src, dst in edges if dst not in existing]
        for src, dst in report.dangling_dependencies:
            logger.warning(f"Milestone {src} depends on missing milestone {dst}")

        return report
