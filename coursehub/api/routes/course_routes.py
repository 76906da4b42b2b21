"""
Course Routes

GET /courses/{course_id} - Get course details
POST /courses/{course_id}/eligibility - Check qualifications against the course requirements
"""

from fastapi import APIRouter, Body, Depends
from typing import Any, Dict

from coursehub.schemas.schemas import Course, EligibilityResult
from coursehub.services.application_service import AdmissionsService, get_admissions_service

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("/{course_id}", response_model=Course)
async def get_course(course_id: str, service: AdmissionsService = Depends(get_admissions_service)):
    return service.get_course(course_id)


@router.post("/{course_id}/eligibility", response_model=EligibilityResult)
async def check_eligibility(
    course_id: str,
    qualifications: Dict[str, Any] = Body(...),
    service: AdmissionsService = Depends(get_admissions_service)
):
    """Preview only; nothing is stored."""
    return service.check_eligibility(course_id, qualifications)
