"""
Admissions Store - the document-store boundary the workflow depends on.

Two back ends implement it:
- InMemoryAdmissionsStore (coursehub.services.memory_store): dev and tests
- MongoAdmissionsStore (coursehub.services.mongo_service): deployments

Documents cross this boundary as plain dicts with a string "id" and
timezone-aware UTC datetimes; back ends normalize whatever timestamp shape
they hold before returning a document.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from coursehub.core.config import get_settings
from coursehub.utils.timestamps import to_datetime


# Called with the student's current applications inside the atomic unit;
# raises an AdmissionsError to abort the write.
Guard = Callable[[List[dict]], None]

TIMESTAMP_FIELDS = (
    "created_at", "updated_at", "application_deadline",
    "applied_date", "last_updated", "admission_accepted_at",
)


def normalize_document(doc: Optional[dict]) -> Optional[dict]:
    """Copy of `doc` with a string "id" and normalized timestamps."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    for field in TIMESTAMP_FIELDS:
        if field in out:
            out[field] = to_datetime(out[field])
    return out


class AdmissionsStore(ABC):
    """create / read / update-by-id / query-by-field, plus the two atomic writes."""

    # ---------------- institutions ----------------

    @abstractmethod
    def create_institution(self, doc: dict) -> dict:
        """Insert; ValidationError if the institution code is already taken."""

    @abstractmethod
    def get_institution(self, institution_id: str) -> Optional[dict]: ...

    @abstractmethod
    def list_institutions(self) -> List[dict]: ...

    @abstractmethod
    def update_institution(self, institution_id: str, changes: dict) -> Optional[dict]:
        """Single-document update; returns the updated document or None if absent."""

    # ---------------- courses ----------------

    @abstractmethod
    def create_course(self, doc: dict) -> dict: ...

    @abstractmethod
    def get_course(self, course_id: str) -> Optional[dict]: ...

    @abstractmethod
    def list_courses(self, institution_id: Optional[str] = None) -> List[dict]: ...

    # ---------------- applications ----------------

    @abstractmethod
    def get_application(self, application_id: str) -> Optional[dict]: ...

    @abstractmethod
    def find_applications(self, query: dict) -> List[dict]:
        """Equality match on every key of `query`, oldest submission first."""

    @abstractmethod
    def find_by_idempotency_key(self, student_id: str, key: str) -> Optional[dict]: ...

    @abstractmethod
    def insert_application(self, doc: dict, guard: Guard) -> dict:
        """
        Atomically: load the student's applications, run `guard` on them,
        insert `doc`. A second document for the same (student_id, course_id)
        raises DuplicateApplicationError.
        """

    @abstractmethod
    def update_application_status(
        self,
        application_id: str,
        expected_status: str,
        changes: dict,
        guard: Optional[Guard] = None
    ) -> Optional[dict]:
        """
        Compare-and-swap: apply `changes` only if the stored status still
        equals `expected_status`. Returns the updated document, or None when
        the status had already moved. With `guard`, the check over the
        student's applications runs in the same atomic unit.
        """

    @abstractmethod
    def ping(self) -> bool: ...


_store: Optional[AdmissionsStore] = None


def get_store() -> AdmissionsStore:
    """Process-wide store for the configured backend."""
    global _store
    if _store is None:
        if get_settings().store_backend == "mongo":
            from coursehub.services.mongo_service import MongoAdmissionsStore
            _store = MongoAdmissionsStore()
        else:
            from coursehub.services.memory_store import InMemoryAdmissionsStore
            _store = InMemoryAdmissionsStore()
    return _store


def set_store(store: Optional[AdmissionsStore]) -> None:
    """Replace (or with None, reset) the process-wide store."""
    global _store
    _store = store
