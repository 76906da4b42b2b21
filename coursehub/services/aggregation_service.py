"""
Aggregation Service - status counts for dashboards.

The summary is a projection of the applications passed in. It is recomputed
on every request and never written back to the store.
"""

from typing import Dict, Iterable

from coursehub.schemas.schemas import (
    ApplicationLike, ApplicationStatus, InstitutionStatusSummary, StatusSummary
)
from coursehub.utils.documents import enum_value, get_field


STATUS_FIELDS = tuple(s.value for s in ApplicationStatus)


def approval_rate(approved: int, total: int) -> float:
    """approved / total as a ratio; 0.0 for an institution with no applications."""
    if total <= 0:
        return 0.0
    return approved / total


def aggregate(applications: Iterable[ApplicationLike]) -> StatusSummary:
    """
    Count applications by status, overall and per institution.

    Example:
        aggregate([])  ->  total=0, pending=0, approved=0, rejected=0, per_institution=[]
    """
    overall: Dict[str, int] = {status: 0 for status in STATUS_FIELDS}
    per_institution: Dict[str, Dict[str, int]] = {}
    total = 0

    for app in applications:
        institution_id = get_field(app, "institution_id")
        # Not attributable to any institution
        if institution_id is None or institution_id == "":
            continue
        institution_id = str(institution_id)
        status = str(enum_value(get_field(app, "status")))
        bucket = per_institution.setdefault(institution_id, {s: 0 for s in STATUS_FIELDS})
        bucket["total"] = bucket.get("total", 0) + 1
        total += 1
        # Unknown statuses still count toward totals, just not any status column
        if status in overall:
            overall[status] += 1
            bucket[status] += 1

    institutions = []
    for institution_id in sorted(per_institution):
        counts = per_institution[institution_id]
        institutions.append(InstitutionStatusSummary(
            institution_id=institution_id,
            approval_rate=approval_rate(counts[ApplicationStatus.approved.value], counts["total"]),
            **counts
        ))

    return StatusSummary(total=total, per_institution=institutions, **overall)
