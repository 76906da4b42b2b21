"""
Stats Routes

GET /stats/applications - Application counts by status, overall and per institution

Counts are recomputed from the applications on every request; dashboards
should refresh through this endpoint rather than keep their own tallies.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from coursehub.core.auth import get_current_reviewer
from coursehub.schemas.schemas import StatusSummary
from coursehub.services.application_service import AdmissionsService, get_admissions_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/applications", response_model=StatusSummary)
async def application_stats(
    institution_id: Optional[str] = Query(None),
    reviewer: dict = Depends(get_current_reviewer),
    service: AdmissionsService = Depends(get_admissions_service)
):
    return service.status_summary(institution_id)
