"""
Admission Rules - quota and exclusivity checks over a student's applications.

Both functions are pure: they take the student's applications as an
in-memory list (models or plain store documents) and never touch storage.
The admissions service calls them inside the atomic submission unit.
"""

from typing import Iterable

from coursehub.core.config import get_settings
from coursehub.schemas.schemas import ApplicationLike, ApplicationStatus
from coursehub.utils.documents import enum_value, get_field


# Statuses that hold one of the student's per-institution slots
QUOTA_STATUSES = frozenset({
    ApplicationStatus.pending.value,
    ApplicationStatus.under_review.value,
    ApplicationStatus.approved.value,
})


def _status_value(application: ApplicationLike) -> str:
    status = get_field(application, "status")
    return str(enum_value(status))


def active_application_count(existing_applications: Iterable[ApplicationLike], institution_id: str) -> int:
    """Applications at this institution that still occupy a quota slot."""
    return sum(
        1 for app in existing_applications
        if get_field(app, "institution_id") == institution_id and _status_value(app) in QUOTA_STATUSES
    )


def can_apply(existing_applications: Iterable[ApplicationLike], institution_id: str, limit: int = None) -> bool:
    """
    True while the student holds fewer than `limit` active applications
    at the institution. Rejected and withdrawn applications free their slot.
    """
    if limit is None:
        limit = get_settings().max_active_applications_per_institution
    return active_application_count(existing_applications, institution_id) < limit


def has_active_admission(existing_applications: Iterable[ApplicationLike]) -> bool:
    """True if the student has already accepted an admission offer."""
    return any(get_field(app, "admission_accepted") is True for app in existing_applications)
