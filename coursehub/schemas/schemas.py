"""
Pydantic Schemas - Request/Response Validation

All domain and API schemas in one file for simplicity.
"""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict, Union
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class ActorRole(str, Enum):
    student = "student"
    institute = "institute"
    admin = "admin"


class ApplicationStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"
    admitted = "admitted"
    withdrawn = "withdrawn"


class InstitutionStatus(str, Enum):
    active = "active"
    inactive = "inactive"


# ============================================================
# INSTITUTION SCHEMAS
# ============================================================

class InstitutionCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=20)
    name: str = Field(..., min_length=2, max_length=200)
    status: InstitutionStatus = InstitutionStatus.active

class PublishAdmissionsRequest(BaseModel):
    academic_year: str = Field(..., min_length=4, max_length=20)
    application_deadline: datetime

class Institution(BaseModel):
    id: str
    code: str
    name: str
    status: InstitutionStatus = InstitutionStatus.active
    admissions_published: bool = False
    academic_year: Optional[str] = None
    application_deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# COURSE SCHEMAS
# ============================================================

class CourseRequirements(BaseModel):
    minimum_grade: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("minimum_grade", "minimumGrade")
    )
    required_subjects: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("required_subjects", "requiredSubjects")
    )
    portfolio_required: Optional[bool] = Field(
        None, validation_alias=AliasChoices("portfolio_required", "portfolioRequired")
    )

    @field_validator("required_subjects", mode="before")
    @classmethod
    def split_subjects(cls, value: Any) -> Any:
        # Staff screens send "Math, English" as well as ["Math", "English"]
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value

class CourseCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    requirements: CourseRequirements = Field(default_factory=CourseRequirements)
    is_active: bool = True
    application_deadline: Optional[datetime] = None

class Course(BaseModel):
    id: str
    institution_id: str
    name: str
    code: str
    requirements: CourseRequirements = Field(default_factory=CourseRequirements)
    is_active: bool = True
    application_deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    course_id: str
    institution_id: str
    qualifications: Dict[str, Any]
    idempotency_key: Optional[str] = Field(None, max_length=128)

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=128)

class Application(BaseModel):
    id: str
    student_id: str
    institution_id: str
    course_id: str
    status: ApplicationStatus = ApplicationStatus.pending
    admission_accepted: bool = False
    admission_accepted_at: Optional[datetime] = None
    applied_date: datetime
    last_updated: datetime
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None
    last_transition_key: Optional[str] = None

class ApplicationFilter(BaseModel):
    institution_id: Optional[str] = None
    student_id: Optional[str] = None
    status: Optional[ApplicationStatus] = None

    def to_query(self) -> dict:
        query = {k: v for k, v in self.model_dump().items() if v is not None}
        if "status" in query:
            query["status"] = query["status"].value
        return query


# ============================================================
# ELIGIBILITY / AGGREGATION SCHEMAS
# ============================================================

class EligibilityResult(BaseModel):
    eligible: bool
    reasons: List[str] = []

class InstitutionStatusSummary(BaseModel):
    institution_id: str
    total: int = 0
    pending: int = 0
    under_review: int = 0
    approved: int = 0
    rejected: int = 0
    admitted: int = 0
    withdrawn: int = 0
    approval_rate: float = 0.0

class StatusSummary(BaseModel):
    total: int = 0
    pending: int = 0
    under_review: int = 0
    approved: int = 0
    rejected: int = 0
    admitted: int = 0
    withdrawn: int = 0
    per_institution: List[InstitutionStatusSummary] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    error: str
    reasons: Optional[List[str]] = None


# Anything the pure rule functions accept as "an application"
ApplicationLike = Union[Application, Dict[str, Any]]
