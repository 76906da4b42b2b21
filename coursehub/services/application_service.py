"""
Admissions Service - the workflow entry points.

submit_application():
    validate input -> exclusivity pre-check -> open-course checks ->
    evaluate eligibility -> (atomically) exclusivity,
    duplicate, quota and eligibility checks + insert in state "pending"

transition_status():
    lifecycle check -> compare-and-swap on the expected current status

Everything else is catalog CRUD (institutions, courses, publish admissions)
and read-only queries for dashboards. Rule logic lives in the pure modules
(eligibility_service, admission_rules, lifecycle, aggregation_service);
this class only wires them to the store.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from coursehub.core.config import Settings, get_settings
from coursehub.core.errors import (
    AdmissionConflictError, DuplicateApplicationError, EligibilityError,
    InvalidTransitionError, NotFoundError, QuotaExceededError, ValidationError
)
from coursehub.core.logger import get_logger
from coursehub.schemas.schemas import (
    ActorRole, Application, ApplicationFilter, ApplicationLike, ApplicationStatus,
    Course, CourseCreate, EligibilityResult, Institution, InstitutionCreate,
    InstitutionStatus, StatusSummary
)
from coursehub.services import admission_rules, lifecycle
from coursehub.services.aggregation_service import aggregate
from coursehub.services.eligibility_service import evaluate
from coursehub.services.store import AdmissionsStore, get_store
from coursehub.utils.documents import enum_value
from coursehub.utils.timestamps import to_datetime, utcnow

logger = get_logger(__name__)

ADMISSION_ACCEPTED_MESSAGE = "You have already accepted an admission offer. You cannot apply for more courses."


def _require_id(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


def _deadline_passed(deadline: Optional[datetime], now: datetime) -> bool:
    return deadline is not None and to_datetime(deadline) < now


class AdmissionsService:
    """
    Admissions workflow over an AdmissionsStore.

    Usage:
        service = AdmissionsService()
        app = service.submit_application("stu-1", course.id, institution.id, {"final_grade": "72"})
        service.transition_status(app.id, "approved", "institute")
    """

    def __init__(self, store: AdmissionsStore = None, settings: Settings = None):
        self.store = store or get_store()
        self.settings = settings or get_settings()

    # ============================================================
    # CATALOG
    # ============================================================

    def create_institution(self, data: InstitutionCreate) -> Institution:
        code = data.code.strip().upper()
        now = utcnow()
        doc = self.store.create_institution({
            "code": code,
            "name": data.name.strip(),
            "status": enum_value(data.status),
            "admissions_published": False,
            "academic_year": None,
            "application_deadline": None,
            "created_at": now,
            "updated_at": now,
        })
        logger.info("Institution %s (%s) created", doc["id"], code)
        return Institution(**doc)

    def get_institution(self, institution_id: str) -> Institution:
        doc = self.store.get_institution(institution_id)
        if not doc:
            raise NotFoundError("Institution not found")
        return Institution(**doc)

    def list_institutions(self) -> List[Institution]:
        return [Institution(**doc) for doc in self.store.list_institutions()]

    def publish_admissions(self, institution_id: str, academic_year: str, application_deadline: datetime) -> Institution:
        """Open admissions: flag, year and deadline are written in one update."""
        if not academic_year or not str(academic_year).strip():
            raise ValidationError("academic_year is required")
        try:
            deadline = to_datetime(application_deadline)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if deadline is None:
            raise ValidationError("application_deadline is required")

        doc = self.store.update_institution(institution_id, {
            "admissions_published": True,
            "academic_year": str(academic_year).strip(),
            "application_deadline": deadline,
            "updated_at": utcnow(),
        })
        if not doc:
            raise NotFoundError("Institution not found")
        logger.info("Admissions published for %s (%s, deadline %s)", institution_id, academic_year, deadline.isoformat())
        return Institution(**doc)

    def create_course(self, institution_id: str, data: CourseCreate) -> Course:
        self.get_institution(institution_id)
        now = utcnow()
        doc = self.store.create_course({
            "institution_id": institution_id,
            "name": data.name.strip(),
            "code": data.code.strip(),
            "requirements": data.requirements.model_dump(),
            "is_active": data.is_active,
            "application_deadline": to_datetime(data.application_deadline),
            "created_at": now,
            "updated_at": now,
        })
        logger.info("Course %s created under institution %s", doc["id"], institution_id)
        return Course(**doc)

    def get_course(self, course_id: str) -> Course:
        doc = self.store.get_course(course_id)
        if not doc:
            raise NotFoundError("Course not found")
        return Course(**doc)

    def list_courses(self, institution_id: Optional[str] = None) -> List[Course]:
        return [Course(**doc) for doc in self.store.list_courses(institution_id)]

    def check_eligibility(self, course_id: str, qualifications: Mapping) -> EligibilityResult:
        """Preview eligibility for a course without submitting anything."""
        if not isinstance(qualifications, Mapping):
            raise ValidationError("qualifications must be an object")
        return evaluate(self.get_course(course_id).requirements, dict(qualifications))

    # ============================================================
    # SUBMISSION
    # ============================================================

    def _check_open(self, institution: Institution, course: Course, now: datetime) -> None:
        if institution.status != InstitutionStatus.active:
            raise ValidationError("Institution is not accepting applications")
        if self.settings.require_published_admissions and not institution.admissions_published:
            raise ValidationError("Admissions for this institution have not been published")
        if institution.admissions_published and _deadline_passed(institution.application_deadline, now):
            raise ValidationError("The institution's application deadline has passed")
        if not course.is_active:
            raise ValidationError("Course is not accepting applications")
        if _deadline_passed(course.application_deadline, now):
            raise ValidationError("Application deadline has passed")

    def _submission_guard(self, course_id: str, institution_id: str, eligibility: EligibilityResult):
        limit = self.settings.max_active_applications_per_institution

        def guard(existing: List[dict]) -> None:
            # Most specific failure first
            if admission_rules.has_active_admission(existing):
                raise AdmissionConflictError(ADMISSION_ACCEPTED_MESSAGE)
            if any(app.get("course_id") == course_id for app in existing):
                raise DuplicateApplicationError("You have already applied to this course")
            if not admission_rules.can_apply(existing, institution_id, limit):
                raise QuotaExceededError(
                    f"You can only apply to a maximum of {limit} courses per institution. "
                    f"You have reached this limit."
                )
            if not eligibility.eligible:
                raise EligibilityError(
                    "You do not meet the requirements for this course", eligibility.reasons
                )

        return guard

    def submit_application(
        self,
        student_id: str,
        course_id: str,
        institution_id: str,
        qualifications: Mapping,
        idempotency_key: Optional[str] = None
    ) -> Application:
        """
        Submit a course application for a student.

        Raises:
            ValidationError, NotFoundError, AdmissionConflictError,
            DuplicateApplicationError, QuotaExceededError, EligibilityError
        """
        student_id = _require_id(student_id, "student_id")
        course_id = _require_id(course_id, "course_id")
        institution_id = _require_id(institution_id, "institution_id")
        if not isinstance(qualifications, Mapping):
            raise ValidationError("qualifications must be an object")

        if idempotency_key:
            previous = self.store.find_by_idempotency_key(student_id, idempotency_key)
            if previous:
                if previous["course_id"] != course_id:
                    raise ValidationError("Idempotency key was already used for a different course")
                logger.info("Replayed submission %s for student %s", previous["id"], student_id)
                return Application(**previous)

        # Before any catalog lookup; the guard rechecks it atomically with the insert
        if admission_rules.has_active_admission(self.store.find_applications({"student_id": student_id})):
            logger.info("Submission refused for student %s: admission already accepted", student_id)
            raise AdmissionConflictError(ADMISSION_ACCEPTED_MESSAGE)

        institution = self.get_institution(institution_id)
        course = self.get_course(course_id)
        if course.institution_id != institution.id:
            raise ValidationError("Course does not belong to the selected institution")
        now = utcnow()
        self._check_open(institution, course, now)

        eligibility = evaluate(course.requirements, dict(qualifications))
        guard = self._submission_guard(course_id, institution_id, eligibility)
        doc = lifecycle.new_application(student_id, institution_id, course_id, idempotency_key, now)

        try:
            created = self.store.insert_application(doc, guard)
        except DuplicateApplicationError:
            # A concurrent retry with the same key may have won the insert
            if idempotency_key:
                previous = self.store.find_by_idempotency_key(student_id, idempotency_key)
                if previous and previous["course_id"] == course_id:
                    return Application(**previous)
            raise
        except (AdmissionConflictError, QuotaExceededError, EligibilityError) as e:
            logger.info("Submission refused for student %s, course %s: %s", student_id, course_id, e.message)
            raise

        logger.info("Application %s submitted: student=%s course=%s institution=%s",
                    created["id"], student_id, course_id, institution_id)
        return Application(**created)

    # ============================================================
    # LIFECYCLE
    # ============================================================

    def get_application(self, application_id: str, actor_role=None, actor_id: Optional[str] = None) -> Application:
        """Fetch one application. Students only see their own."""
        doc = self.store.get_application(application_id)
        if not doc:
            raise NotFoundError("Application not found")
        if enum_value(actor_role) == ActorRole.student.value and actor_id and doc["student_id"] != actor_id:
            raise NotFoundError("Application not found")
        return Application(**doc)

    def _acceptance_guard(self, application_id: str):
        def guard(existing: List[dict]) -> None:
            if any(app.get("admission_accepted") is True and app["id"] != application_id for app in existing):
                raise AdmissionConflictError("You have already accepted another admission offer")
        return guard

    def transition_status(
        self,
        application_id: str,
        target_status: Union[ApplicationStatus, str],
        actor_role: Union[ActorRole, str],
        actor_id: Optional[str] = None,
        idempotency_key: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Application:
        """
        Move an application to `target_status` on behalf of `actor_role`.

        The write only lands if the stored status is still the one the
        transition was validated against; a reviewer who loses that race
        gets InvalidTransitionError and must reload.
        """
        current = self.get_application(application_id, actor_role, actor_id)
        try:
            target = ApplicationStatus(enum_value(target_status))
        except ValueError as e:
            raise InvalidTransitionError(f"Unknown status '{target_status}'") from e

        # Retried request that already landed
        if idempotency_key and current.last_transition_key == idempotency_key and current.status == target:
            return current

        changes = lifecycle.transition_changes(current.status, target, actor_role)
        if notes is not None:
            changes["notes"] = notes
        if idempotency_key:
            changes["last_transition_key"] = idempotency_key

        guard = self._acceptance_guard(application_id) if target == ApplicationStatus.admitted else None

        updated = self.store.update_application_status(
            application_id, current.status.value, changes, guard
        )
        if updated is None:
            latest = self.store.get_application(application_id)
            if latest is None:
                raise NotFoundError("Application not found")
            if idempotency_key and latest.get("last_transition_key") == idempotency_key \
                    and latest.get("status") == target.value:
                return Application(**latest)
            raise InvalidTransitionError(
                f"Application status changed from {current.status.value} to {latest['status']}; reload and retry"
            )

        logger.info("Application %s: %s -> %s by %s",
                    application_id, current.status.value, target.value, enum_value(actor_role))
        return Application(**updated)

    def withdraw_application(self, application_id: str, student_id: str) -> Application:
        """Student withdraws one of their own applications, freeing its quota slot."""
        return self.transition_status(
            application_id, ApplicationStatus.withdrawn, ActorRole.student, actor_id=student_id
        )

    # ============================================================
    # QUERIES
    # ============================================================

    def list_applications(self, filter: Union[ApplicationFilter, Mapping, None] = None) -> List[Application]:
        """Applications matching every given field (institution_id, student_id, status)."""
        if filter is None:
            filter = ApplicationFilter()
        elif isinstance(filter, Mapping):
            try:
                filter = ApplicationFilter(**filter)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid application filter: {e.errors()[0]['msg']}") from e
        return [Application(**doc) for doc in self.store.find_applications(filter.to_query())]

    def list_admission_offers(self, student_id: str) -> List[Application]:
        """Approved applications the student has not accepted yet."""
        return [
            app for app in self.list_applications(
                ApplicationFilter(student_id=student_id, status=ApplicationStatus.approved)
            )
            if not app.admission_accepted
        ]

    @staticmethod
    def aggregate_status(applications: List[ApplicationLike]) -> StatusSummary:
        return aggregate(applications)

    def status_summary(self, institution_id: Optional[str] = None) -> StatusSummary:
        """Recompute counts from the stored applications (never cached)."""
        return aggregate(self.list_applications(ApplicationFilter(institution_id=institution_id)))


def get_admissions_service() -> AdmissionsService:
    """FastAPI dependency; tests override it with a service over a fresh store."""
    return AdmissionsService()
