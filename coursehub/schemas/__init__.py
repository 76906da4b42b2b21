"""
Schemas module - domain and API schemas.

Difference from services:
- Schemas: data shapes (what is stored, what the API sends/receives)
- Services: the admissions rules operating on them
"""

from coursehub.schemas.schemas import (
    ActorRole,
    ApplicationStatus,
    Application,
    ApplicationFilter,
    Course,
    CourseRequirements,
    EligibilityResult,
    Institution,
    StatusSummary,
)

__all__ = [
    "ActorRole",
    "ApplicationStatus",
    "Application",
    "ApplicationFilter",
    "Course",
    "CourseRequirements",
    "EligibilityResult",
    "Institution",
    "StatusSummary",
]
