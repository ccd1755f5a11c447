from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.exceptions import ForbiddenError
from app.interfaces.auth_provider import User
from app.models.milestone import Milestone


class MilestoneOperation(str, Enum):
    READ = "milestone.read"
    CREATE = "milestone.create"
    UPDATE = "milestone.update"
    DELETE = "milestone.delete"
    PROGRESS = "milestone.progress"
    APPROVE = "milestone.approve"


class MilestoneStanding(str, Enum):
    """How the actor relates to a milestone."""

    ADMIN = "admin"
    OWNER = "owner"
    CREATOR = "creator"
    REVIEWER = "reviewer"
    AUTHENTICATED = "authenticated"


ANY_STANDING = set(MilestoneStanding)
MANAGER_STANDINGS = {MilestoneStanding.ADMIN, MilestoneStanding.OWNER, MilestoneStanding.CREATOR}
APPROVER_STANDINGS = {MilestoneStanding.ADMIN, MilestoneStanding.REVIEWER}

MILESTONE_STANDING_MATRIX: dict[MilestoneOperation, set[MilestoneStanding]] = {
    MilestoneOperation.READ: ANY_STANDING,
    MilestoneOperation.CREATE: ANY_STANDING,
    MilestoneOperation.PROGRESS: ANY_STANDING,
    MilestoneOperation.UPDATE: MANAGER_STANDINGS,
    MilestoneOperation.DELETE: MANAGER_STANDINGS,
    MilestoneOperation.APPROVE: APPROVER_STANDINGS,
}

DENIAL_REASONS: dict[MilestoneOperation, str] = {
    MilestoneOperation.UPDATE: "Only the owner, the creator or an admin can update this milestone",
    MilestoneOperation.DELETE: "Only the owner, the creator or an admin can delete this milestone",
    MilestoneOperation.APPROVE: "You are not authorized to approve this milestone",
}


@dataclass(frozen=True)
class AuthorizationVerdict:
    allowed: bool
    reason: Optional[str] = None
    standings: frozenset[MilestoneStanding] = frozenset()


def standings_for(actor: User, milestone: Optional[Milestone] = None) -> set[MilestoneStanding]:
    standings = {MilestoneStanding.AUTHENTICATED}
    if actor.is_admin:
        standings.add(MilestoneStanding.ADMIN)
    if milestone is None:
        return standings
    if actor.id == milestone.owner_id:
        standings.add(MilestoneStanding.OWNER)
    if actor.id == milestone.created_by:
        standings.add(MilestoneStanding.CREATOR)
    if actor.id in milestone.reviewer_ids:
        standings.add(MilestoneStanding.REVIEWER)
    return standings


def authorize(
    operation: MilestoneOperation,
    actor: User,
    milestone: Optional[Milestone] = None,
) -> AuthorizationVerdict:
    standings = standings_for(actor, milestone)
    allowed_standings = MILESTONE_STANDING_MATRIX.get(operation, set())
    if standings & allowed_standings:
        return AuthorizationVerdict(allowed=True, standings=frozenset(standings))
    return AuthorizationVerdict(
        allowed=False,
        reason=DENIAL_REASONS.get(operation, "Operation not permitted"),
        standings=frozenset(standings),
    )


def ensure_authorized(
    operation: MilestoneOperation,
    actor: User,
    milestone: Optional[Milestone] = None,
) -> AuthorizationVerdict:
    verdict = authorize(operation, actor, milestone)
    if not verdict.allowed:
        raise ForbiddenError(verdict.reason or "Operation not permitted")
    return verdict
