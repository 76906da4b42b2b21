"""
In-memory admissions store.

Used for local development (STORE_BACKEND=memory) and the test suite.
One lock serializes every write, which makes guarded inserts and
compare-and-swap updates trivially atomic. Lock waits are bounded by
store_timeout_ms and surface as StoreUnavailableError.
"""

import copy
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, List, Optional

from coursehub.core.config import get_settings
from coursehub.core.errors import DuplicateApplicationError, StoreUnavailableError, ValidationError
from coursehub.services.store import AdmissionsStore, Guard, normalize_document


class InMemoryAdmissionsStore(AdmissionsStore):

    def __init__(self, timeout_seconds: float = None):
        self._lock = threading.Lock()
        self._timeout = timeout_seconds if timeout_seconds is not None else get_settings().store_timeout_seconds
        self._institutions: Dict[str, dict] = {}
        self._courses: Dict[str, dict] = {}
        self._applications: Dict[str, dict] = {}

    @contextmanager
    def _locked(self):
        if not self._lock.acquire(timeout=self._timeout):
            raise StoreUnavailableError("Timed out waiting for the admissions store")
        try:
            yield
        finally:
            self._lock.release()

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def _out(doc: Optional[dict]) -> Optional[dict]:
        return normalize_document(copy.deepcopy(doc)) if doc is not None else None

    def _insert(self, table: Dict[str, dict], doc: dict) -> dict:
        stored = copy.deepcopy(doc)
        stored["id"] = self._new_id()
        table[stored["id"]] = stored
        return self._out(stored)

    # ---------------- institutions ----------------

    def create_institution(self, doc: dict) -> dict:
        with self._locked():
            if any(i.get("code") == doc.get("code") for i in self._institutions.values()):
                raise ValidationError(f"Institution code '{doc.get('code')}' already exists")
            return self._insert(self._institutions, doc)

    def get_institution(self, institution_id: str) -> Optional[dict]:
        with self._locked():
            return self._out(self._institutions.get(institution_id))

    def list_institutions(self) -> List[dict]:
        with self._locked():
            return [self._out(d) for d in self._institutions.values()]

    def update_institution(self, institution_id: str, changes: dict) -> Optional[dict]:
        with self._locked():
            doc = self._institutions.get(institution_id)
            if doc is None:
                return None
            doc.update(copy.deepcopy(changes))
            return self._out(doc)

    # ---------------- courses ----------------

    def create_course(self, doc: dict) -> dict:
        with self._locked():
            return self._insert(self._courses, doc)

    def get_course(self, course_id: str) -> Optional[dict]:
        with self._locked():
            return self._out(self._courses.get(course_id))

    def list_courses(self, institution_id: Optional[str] = None) -> List[dict]:
        with self._locked():
            return [
                self._out(d) for d in self._courses.values()
                if institution_id is None or d.get("institution_id") == institution_id
            ]

    # ---------------- applications ----------------

    def _student_applications(self, student_id: str) -> List[dict]:
        return [self._out(d) for d in self._applications.values() if d.get("student_id") == student_id]

    def get_application(self, application_id: str) -> Optional[dict]:
        with self._locked():
            return self._out(self._applications.get(application_id))

    def find_applications(self, query: dict) -> List[dict]:
        with self._locked():
            matches = [
                self._out(d) for d in self._applications.values()
                if all(d.get(k) == v for k, v in query.items())
            ]
        return sorted(matches, key=lambda d: d["applied_date"])

    def find_by_idempotency_key(self, student_id: str, key: str) -> Optional[dict]:
        with self._locked():
            for doc in self._applications.values():
                if doc.get("student_id") == student_id and doc.get("idempotency_key") == key:
                    return self._out(doc)
        return None

    def insert_application(self, doc: dict, guard: Guard) -> dict:
        with self._locked():
            guard(self._student_applications(doc["student_id"]))
            for existing in self._applications.values():
                if existing.get("student_id") != doc["student_id"]:
                    continue
                if existing.get("course_id") == doc["course_id"]:
                    raise DuplicateApplicationError("You have already applied to this course")
                key = doc.get("idempotency_key")
                if key and existing.get("idempotency_key") == key:
                    raise DuplicateApplicationError("Idempotency key already used for another application")
            return self._insert(self._applications, doc)

    def update_application_status(
        self,
        application_id: str,
        expected_status: str,
        changes: dict,
        guard: Optional[Guard] = None
    ) -> Optional[dict]:
        with self._locked():
            doc = self._applications.get(application_id)
            if doc is None or doc.get("status") != expected_status:
                return None
            if guard is not None:
                guard(self._student_applications(doc["student_id"]))
            doc.update(copy.deepcopy(changes))
            return self._out(doc)

    def ping(self) -> bool:
        return True
