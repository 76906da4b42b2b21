from datetime import datetime, timezone

from coursehub.schemas.schemas import Application, ApplicationStatus
from coursehub.services.admission_rules import (
    active_application_count, can_apply, has_active_admission
)


def app(institution_id: str, status: str, accepted: bool = False) -> dict:
    return {"institution_id": institution_id, "status": status, "admission_accepted": accepted}


def test_can_apply_until_two_active_applications() -> None:
    assert can_apply([], "I1") is True
    assert can_apply([app("I1", "pending")], "I1") is True
    assert can_apply([app("I1", "pending"), app("I1", "under_review")], "I1") is False
    assert can_apply([app("I1", "approved"), app("I1", "pending")], "I1") is False


def test_terminal_applications_free_their_slot() -> None:
    existing = [app("I1", "rejected"), app("I1", "withdrawn"), app("I1", "pending")]

    assert active_application_count(existing, "I1") == 1
    assert can_apply(existing, "I1") is True


def test_quota_is_per_institution() -> None:
    existing = [app("I1", "pending"), app("I1", "pending")]

    assert can_apply(existing, "I2") is True


def test_custom_limit() -> None:
    assert can_apply([app("I1", "pending")], "I1", limit=1) is False


def test_models_and_enum_statuses_are_accepted() -> None:
    now = datetime.now(timezone.utc)
    existing = [
        Application(id=str(n), student_id="S", institution_id="I1", course_id=f"C{n}",
                    status=ApplicationStatus.pending, applied_date=now, last_updated=now)
        for n in range(2)
    ]

    assert active_application_count(existing, "I1") == 2
    assert has_active_admission(existing) is False


def test_has_active_admission() -> None:
    assert has_active_admission([]) is False
    assert has_active_admission([app("I1", "approved")]) is False
    assert has_active_admission([app("I1", "rejected"), app("I2", "admitted", accepted=True)]) is True
