"""
Eligibility Service - decides whether a student qualifies for a course.

Rules (each one only runs when the course configures it):
1. minimum_grade      - student's final_grade must parse as a number >= minimum
2. required_subjects  - every required subject must appear in the student's subjects
                        (trimmed, case-insensitive, exact or substring match)
3. portfolio_required - student must carry a non-empty portfolio reference

evaluate() is total: bad input makes the student ineligible, it never raises.
"""

import math
from typing import Any, List, Optional

from coursehub.schemas.schemas import EligibilityResult
from coursehub.utils.documents import get_field


# Records written by the older web screens use camelCase keys
_GRADE_KEYS = ("final_grade", "finalGrade")
_SUBJECT_KEYS = ("subjects",)
_PORTFOLIO_KEYS = ("portfolio", "portfolio_url", "portfolioUrl")
_MINIMUM_GRADE_KEYS = ("minimum_grade", "minimumGrade")
_REQUIRED_SUBJECT_KEYS = ("required_subjects", "requiredSubjects")
_PORTFOLIO_REQUIRED_KEYS = ("portfolio_required", "portfolioRequired")


def _first(record: Any, keys: tuple) -> Any:
    for key in keys:
        value = get_field(record, key)
        if value is not None:
            return value
    return None


def _to_number(value: Any) -> Optional[float]:
    """Parse a grade. None for anything that is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def normalize_subjects(value: Any) -> List[str]:
    """Accept a list or a comma-separated string; return trimmed lowercase names."""
    if not value:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        return []
    return [str(item).strip().lower() for item in items if str(item).strip()]


def _subject_matches(required: str, student_subjects: List[str]) -> bool:
    return any(required == s or required in s for s in student_subjects)


def _has_portfolio(qualifications: Any) -> bool:
    value = _first(qualifications, _PORTFOLIO_KEYS)
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def evaluate(course_requirements: Any, student_qualifications: Any) -> EligibilityResult:
    """
    Check a student's qualification record against a course's requirements.

    Args:
        course_requirements: CourseRequirements model or dict (None = no requirements)
        student_qualifications: dict/model with final_grade, subjects, portfolio

    Returns:
        EligibilityResult with eligible flag and one reason per failed rule
    """
    reasons: List[str] = []

    minimum_grade = _first(course_requirements, _MINIMUM_GRADE_KEYS)
    if minimum_grade is not None:
        required = _to_number(minimum_grade)
        grade = _to_number(_first(student_qualifications, _GRADE_KEYS))
        if required is None:
            reasons.append(f"Course minimum grade '{minimum_grade}' is not a number")
        elif grade is None:
            reasons.append("Final grade is missing or not a number")
        elif grade < required:
            reasons.append(f"Final grade {grade:g} is below the required {required:g}")

    required_subjects = normalize_subjects(_first(course_requirements, _REQUIRED_SUBJECT_KEYS))
    if required_subjects:
        student_subjects = normalize_subjects(_first(student_qualifications, _SUBJECT_KEYS))
        missing = [s for s in required_subjects if not _subject_matches(s, student_subjects)]
        if missing:
            reasons.append(f"Missing required subjects: {', '.join(missing)}")

    if _first(course_requirements, _PORTFOLIO_REQUIRED_KEYS) is True:
        if not _has_portfolio(student_qualifications):
            reasons.append("A portfolio is required for this course")

    return EligibilityResult(eligible=not reasons, reasons=reasons)
