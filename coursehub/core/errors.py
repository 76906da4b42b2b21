"""
Admissions error taxonomy.

Every error raised by the workflow is an AdmissionsError carrying:
- code: stable machine-readable token (sent to clients as "error")
- status_code: HTTP status used by the API exception handler

All of these are terminal for the request that triggered them, except
StoreUnavailableError, which callers may retry with backoff.
"""

from typing import List, Optional


class AdmissionsError(Exception):
    code = "admissions_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.code}


class ValidationError(AdmissionsError):
    """Missing or malformed input."""
    code = "validation_error"
    status_code = 400


class EligibilityError(AdmissionsError):
    """Student does not meet the course requirements."""
    code = "eligibility_error"
    status_code = 422

    def __init__(self, message: str, reasons: Optional[List[str]] = None):
        super().__init__(message)
        self.reasons = list(reasons or [])

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["reasons"] = self.reasons
        return body


class QuotaExceededError(AdmissionsError):
    code = "quota_exceeded"
    status_code = 409


class AdmissionConflictError(AdmissionsError):
    code = "admission_conflict"
    status_code = 409


class DuplicateApplicationError(AdmissionsError):
    code = "duplicate_application"
    status_code = 409


class InvalidTransitionError(AdmissionsError):
    code = "invalid_transition"
    status_code = 409


class NotFoundError(AdmissionsError):
    code = "not_found"
    status_code = 404


class StoreUnavailableError(AdmissionsError):
    """Backing store unreachable or timed out. Safe to retry."""
    code = "store_unavailable"
    status_code = 503
