"""
Application Routes

POST /applications - Submit a course application (student only)
GET /applications - List applications (students see only their own)
GET /applications/offers - Approved offers not yet accepted (student only)
GET /applications/{application_id} - Get one application
PATCH /applications/{application_id}/status - Review or accept (role-checked transition)
POST /applications/{application_id}/withdraw - Withdraw own application (student only)
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from coursehub.core.auth import get_current_actor, get_current_student
from coursehub.schemas.schemas import (
    ActorRole, Application, ApplicationCreate, ApplicationFilter,
    ApplicationStatus, ApplicationStatusUpdate
)
from coursehub.services.application_service import AdmissionsService, get_admissions_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=Application, status_code=201)
async def submit_application(
    data: ApplicationCreate,
    student: dict = Depends(get_current_student),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """Apply to a course. Max 2 active applications per institution; none after accepting an offer."""
    return service.submit_application(
        student_id=student["user_id"],
        course_id=data.course_id,
        institution_id=data.institution_id,
        qualifications=data.qualifications,
        idempotency_key=data.idempotency_key
    )


@router.get("", response_model=List[Application])
async def list_applications(
    institution_id: Optional[str] = Query(None),
    student_id: Optional[str] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    actor: dict = Depends(get_current_actor),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """List applications filtered by institution, student and status."""
    if actor["role"] == ActorRole.student:
        student_id = actor["user_id"]
    return service.list_applications(
        ApplicationFilter(institution_id=institution_id, student_id=student_id, status=status)
    )


@router.get("/offers", response_model=List[Application])
async def list_admission_offers(
    student: dict = Depends(get_current_student),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """Approved applications waiting for the student's decision."""
    return service.list_admission_offers(student["user_id"])


@router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: str,
    actor: dict = Depends(get_current_actor),
    service: AdmissionsService = Depends(get_admissions_service)
):
    return service.get_application(application_id, actor["role"], actor["user_id"])


@router.patch("/{application_id}/status", response_model=Application)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    actor: dict = Depends(get_current_actor),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """
    Move an application along its lifecycle.
    Institute/admin: under_review, approved, rejected. Student: admitted (accept offer), withdrawn.
    """
    return service.transition_status(
        application_id,
        update.status,
        actor["role"],
        actor_id=actor["user_id"],
        idempotency_key=update.idempotency_key,
        notes=update.notes
    )


@router.post("/{application_id}/withdraw", response_model=Application)
async def withdraw_application(
    application_id: str,
    student: dict = Depends(get_current_student),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """Withdraw an application. Frees one slot of the institution quota."""
    return service.withdraw_application(application_id, student["user_id"])
