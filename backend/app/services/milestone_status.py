"""
Milestone status derivation.

Progress is the primary signal and status is a materialized view of it, but
status can also be edited directly. Both entry points go through
``apply_transition`` so the stored ``(status, progress,
actual_completion_date)`` triple is always consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Union

from app.core.exceptions import ValidationError
from app.models.enums import MilestoneStatus
from app.utils.datetime_utils import now_utc

MIN_PROGRESS = 0
MAX_PROGRESS = 100


@dataclass(frozen=True)
class MilestoneState:
    status: MilestoneStatus
    progress: int
    actual_completion_date: Optional[datetime] = None

    def as_fields(self) -> dict:
        return {
            "status": self.status,
            "progress": self.progress,
            "actual_completion_date": self.actual_completion_date,
        }


@dataclass(frozen=True)
class SetProgress:
    progress: int


@dataclass(frozen=True)
class SetStatus:
    status: MilestoneStatus


Transition = Union[SetProgress, SetStatus]

INITIAL_STATE = MilestoneState(status=MilestoneStatus.NOT_STARTED, progress=MIN_PROGRESS)


def derive_status(
    current_status: MilestoneStatus,
    new_progress: int,
    current_completion: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> tuple[MilestoneStatus, Optional[datetime]]:
    """
    Map a new progress value to ``(status, completion timestamp)``.

    - 0 is always ``not-started`` and clears the timestamp.
    - 100 is ``completed``; the timestamp is stamped only when entering
      ``completed`` and left untouched on re-derivation.
    - Anything in between is ``in-progress``; the timestamp is cleared only
      when re-opening a completed milestone.
    """
    if not MIN_PROGRESS <= new_progress <= MAX_PROGRESS:
        raise ValidationError("Progress must be between 0 and 100")

    if new_progress == MIN_PROGRESS:
        return MilestoneStatus.NOT_STARTED, None
    if new_progress == MAX_PROGRESS:
        if current_status == MilestoneStatus.COMPLETED:
            return MilestoneStatus.COMPLETED, current_completion
        return MilestoneStatus.COMPLETED, now or now_utc()
    if current_status == MilestoneStatus.COMPLETED:
        return MilestoneStatus.IN_PROGRESS, None
    return MilestoneStatus.IN_PROGRESS, current_completion


def _set_status(state: MilestoneState, status: MilestoneStatus, now: datetime) -> MilestoneState:
    if status == MilestoneStatus.COMPLETED:
        completion = state.actual_completion_date
        if state.status != MilestoneStatus.COMPLETED:
            completion = now
        return MilestoneState(MilestoneStatus.COMPLETED, MAX_PROGRESS, completion)

    if status == MilestoneStatus.NOT_STARTED:
        return MilestoneState(MilestoneStatus.NOT_STARTED, MIN_PROGRESS, None)

    # in-progress keeps a partial progress value and nudges the endpoints inward
    progress = min(max(state.progress, MIN_PROGRESS + 1), MAX_PROGRESS - 1)
    return MilestoneState(MilestoneStatus.IN_PROGRESS, progress, None)


def apply_transition(
    state: MilestoneState,
    transition: Transition,
    now: Optional[datetime] = None,
) -> MilestoneState:
    """Apply one progress or status edit and return the resulting state."""
    now = now or now_utc()
    if isinstance(transition, SetProgress):
        status, completion = derive_status(
            state.status, transition.progress, state.actual_completion_date, now
        )
        return replace(
            state,
            status=status,
            progress=transition.progress,
            actual_completion_date=completion,
        )
    if isinstance(transition, SetStatus):
        return _set_status(state, MilestoneStatus(transition.status), now)
    raise TypeError(f"Unsupported transition: {transition!r}")
