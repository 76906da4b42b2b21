"""
Application Lifecycle - the state machine behind an application's status.

    pending ──► under_review ──► approved ──► admitted
       │             │              │
       ├─► approved  ├─► rejected   └─► withdrawn
       ├─► rejected  └─► withdrawn
       └─► withdrawn

rejected, admitted and withdrawn are terminal.

This module only decides and describes transitions; the admissions service
writes them with a compare-and-swap on the expected current status.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from coursehub.core.errors import InvalidTransitionError
from coursehub.schemas.schemas import ActorRole, ApplicationStatus
from coursehub.utils.timestamps import utcnow


S = ApplicationStatus
REVIEWERS = frozenset({ActorRole.institute, ActorRole.admin})
STUDENT = frozenset({ActorRole.student})

INITIAL_STATUS = S.pending
TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({S.rejected, S.admitted, S.withdrawn})

# (from, to) -> roles allowed to request the move
TRANSITIONS: Dict[Tuple[ApplicationStatus, ApplicationStatus], FrozenSet[ActorRole]] = {
    (S.pending, S.under_review): REVIEWERS,
    (S.pending, S.approved): REVIEWERS,
    (S.under_review, S.approved): REVIEWERS,
    (S.pending, S.rejected): REVIEWERS,
    (S.under_review, S.rejected): REVIEWERS,
    (S.approved, S.admitted): STUDENT,
    (S.pending, S.withdrawn): STUDENT,
    (S.under_review, S.withdrawn): STUDENT,
    (S.approved, S.withdrawn): STUDENT,
}


def is_terminal(status) -> bool:
    return ApplicationStatus(status) in TERMINAL_STATUSES


def allowed_targets(status, actor_role=None) -> FrozenSet[ApplicationStatus]:
    """Statuses reachable from `status`, optionally only those `actor_role` may request."""
    current = ApplicationStatus(status)
    return frozenset(
        target for (source, target), roles in TRANSITIONS.items()
        if source == current and (actor_role is None or ActorRole(actor_role) in roles)
    )


def check_transition(current, target, actor_role) -> None:
    """
    Raise InvalidTransitionError unless `actor_role` may move `current` -> `target`.
    """
    try:
        current = ApplicationStatus(current)
        target = ApplicationStatus(target)
        role = ActorRole(actor_role)
    except ValueError as e:
        raise InvalidTransitionError(str(e)) from e

    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Application is {current.value}; no further status changes are allowed"
        )
    roles = TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransitionError(f"Invalid status transition from {current.value} to {target.value}")
    if role not in roles:
        raise InvalidTransitionError(
            f"Role '{role.value}' cannot move an application from {current.value} to {target.value}"
        )


def transition_changes(current, target, actor_role, now: Optional[datetime] = None) -> dict:
    """
    Validate a transition and return the fields to write for it.

    Every transition stamps last_updated; applied_date is never touched.
    Accepting an offer (approved -> admitted) also sets admission_accepted.
    """
    check_transition(current, target, actor_role)
    now = now or utcnow()
    target = ApplicationStatus(target)
    changes = {"status": target.value, "last_updated": now}
    if target == S.admitted:
        changes["admission_accepted"] = True
        changes["admission_accepted_at"] = now
    return changes


def new_application(
    student_id: str,
    institution_id: str,
    course_id: str,
    idempotency_key: Optional[str] = None,
    now: Optional[datetime] = None
) -> dict:
    """Store document for a freshly submitted application."""
    now = now or utcnow()
    doc = {
        "student_id": student_id,
        "institution_id": institution_id,
        "course_id": course_id,
        "status": INITIAL_STATUS.value,
        "admission_accepted": False,
        "admission_accepted_at": None,
        "applied_date": now,
        "last_updated": now,
        "notes": None,
    }
    if idempotency_key:
        doc["idempotency_key"] = idempotency_key
    return doc
