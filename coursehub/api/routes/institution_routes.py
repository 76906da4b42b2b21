"""
Institution Routes

POST /institutions - Create institution (admin only)
GET /institutions - List institutions
GET /institutions/{institution_id} - Get institution details
POST /institutions/{institution_id}/publish - Publish admissions (admin only)
POST /institutions/{institution_id}/courses - Add course (institute staff/admin)
GET /institutions/{institution_id}/courses - List the institution's courses
"""

from fastapi import APIRouter, Depends
from typing import List

from coursehub.core.auth import get_current_admin, get_current_reviewer
from coursehub.schemas.schemas import (
    Course, CourseCreate, Institution, InstitutionCreate, PublishAdmissionsRequest
)
from coursehub.services.application_service import AdmissionsService, get_admissions_service

router = APIRouter(prefix="/institutions", tags=["Institutions"])


@router.post("", response_model=Institution, status_code=201)
async def create_institution(
    data: InstitutionCreate,
    admin: dict = Depends(get_current_admin),
    service: AdmissionsService = Depends(get_admissions_service)
):
    return service.create_institution(data)


@router.get("", response_model=List[Institution])
async def list_institutions(service: AdmissionsService = Depends(get_admissions_service)):
    return service.list_institutions()


@router.get("/{institution_id}", response_model=Institution)
async def get_institution(institution_id: str, service: AdmissionsService = Depends(get_admissions_service)):
    return service.get_institution(institution_id)


@router.post("/{institution_id}/publish", response_model=Institution)
async def publish_admissions(
    institution_id: str,
    data: PublishAdmissionsRequest,
    admin: dict = Depends(get_current_admin),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """Open admissions for an academic year. Flag, year and deadline change together."""
    return service.publish_admissions(institution_id, data.academic_year, data.application_deadline)


@router.post("/{institution_id}/courses", response_model=Course, status_code=201)
async def create_course(
    institution_id: str,
    data: CourseCreate,
    reviewer: dict = Depends(get_current_reviewer),
    service: AdmissionsService = Depends(get_admissions_service)
):
    return service.create_course(institution_id, data)


@router.get("/{institution_id}/courses", response_model=List[Course])
async def list_institution_courses(
    institution_id: str,
    service: AdmissionsService = Depends(get_admissions_service)
):
    service.get_institution(institution_id)
    return service.list_courses(institution_id)
