"""
MongoDB Service - admissions documents in MongoDB.

Collections in this database:
1. institutions        - universities/colleges and their admission window
2. courses             - offerings with eligibility requirements
3. applications        - student course applications
4. application_guards  - per-student version counter used to serialize
                         submissions/acceptances of one student

Guard documents:
- Two submissions for the same student read the same application list and
  insert different documents, so they never touch the same document.
  Under snapshot isolation both would commit (write skew).
- Bumping the student's guard document first makes the two transactions
  write-conflict; the driver aborts one and with_transaction() retries it,
  and the retry sees the committed application.
"""

from contextlib import contextmanager
from typing import Optional, List
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import (
    ConnectionFailure, DuplicateKeyError, ExecutionTimeout, WTimeoutError
)
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from coursehub.core.errors import DuplicateApplicationError, StoreUnavailableError, ValidationError
from coursehub.core.logger import get_logger
from coursehub.db.mongodb import get_collection, get_mongo_client, test_mongo_connection, COLLECTIONS
from coursehub.services.store import AdmissionsStore, Guard, normalize_document
from coursehub.utils.timestamps import utcnow

logger = get_logger(__name__)


# ============================================================
# HELPERS
# ============================================================

def to_object_id(doc_id: str) -> Optional[ObjectId]:
    """Parse a document id; None for ids that cannot exist."""
    # ObjectId(None) generates a fresh id
    if not isinstance(doc_id, str):
        return None
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


@contextmanager
def driver_errors():
    """Translate driver failures into admissions errors."""
    try:
        yield
    except DuplicateKeyError as e:
        raise DuplicateApplicationError("You have already applied to this course") from e
    except (ConnectionFailure, ExecutionTimeout, WTimeoutError) as e:
        logger.error("MongoDB unavailable: %s", e)
        raise StoreUnavailableError("Admissions store is unavailable, try again shortly") from e


# ============================================================
# INSTITUTIONS / COURSES COLLECTIONS
# ============================================================

class CatalogService:
    """
    Handles institution and course documents.
    Both are small, admin-managed collections with plain CRUD.
    """

    def __init__(self):
        self.institutions: Collection = get_collection(COLLECTIONS["institutions"])
        self.courses: Collection = get_collection(COLLECTIONS["courses"])

    def insert(self, collection: Collection, doc: dict) -> dict:
        with driver_errors():
            try:
                result = collection.insert_one(dict(doc))
            except DuplicateKeyError as e:
                raise ValidationError(f"{collection.name}: code '{doc.get('code')}' already exists") from e
            return normalize_document(collection.find_one({"_id": result.inserted_id}))

    def get_by_id(self, collection: Collection, doc_id: str) -> Optional[dict]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        with driver_errors():
            return normalize_document(collection.find_one({"_id": oid}))

    def update(self, collection: Collection, doc_id: str, changes: dict) -> Optional[dict]:
        """Single-document $set; returns the document after the update."""
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        with driver_errors():
            doc = collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER
            )
        return normalize_document(doc)

    def find(self, collection: Collection, query: dict) -> List[dict]:
        with driver_errors():
            cursor = collection.find(query).sort("created_at", ASCENDING)
            return [normalize_document(doc) for doc in cursor]


# ============================================================
# APPLICATIONS COLLECTION
# ============================================================

class ApplicationDocumentService:
    """
    Handles application documents.
    Inserts and acceptances run in transactions guarded per student;
    plain status transitions are single-document compare-and-swap updates.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["applications"])
        self.guards: Collection = get_collection(COLLECTIONS["application_guards"])

    def get_by_id(self, application_id: str) -> Optional[dict]:
        oid = to_object_id(application_id)
        if oid is None:
            return None
        with driver_errors():
            return normalize_document(self.collection.find_one({"_id": oid}))

    def find(self, query: dict) -> List[dict]:
        with driver_errors():
            cursor = self.collection.find(query).sort("applied_date", ASCENDING)
            return [normalize_document(doc) for doc in cursor]

    def get_by_idempotency_key(self, student_id: str, key: str) -> Optional[dict]:
        with driver_errors():
            doc = self.collection.find_one({"student_id": student_id, "idempotency_key": key})
        return normalize_document(doc)

    def _bump_guard(self, student_id: str, session) -> None:
        self.guards.update_one(
            {"_id": student_id},
            {"$inc": {"version": 1}, "$set": {"updated_at": utcnow()}},
            upsert=True,
            session=session
        )

    def _student_applications(self, student_id: str, session) -> List[dict]:
        return [
            normalize_document(doc)
            for doc in self.collection.find({"student_id": student_id}, session=session)
        ]

    def _run_transaction(self, callback):
        client = get_mongo_client()
        with driver_errors():
            with client.start_session() as session:
                return session.with_transaction(
                    callback,
                    read_concern=ReadConcern("snapshot"),
                    write_concern=WriteConcern("majority")
                )

    def insert_guarded(self, doc: dict, guard: Guard) -> dict:
        """
        Insert an application after re-validating the student's invariants
        inside the same transaction.
        """
        student_id = doc["student_id"]

        def _callback(session):
            self._bump_guard(student_id, session)
            guard(self._student_applications(student_id, session))
            return self.collection.insert_one(dict(doc), session=session).inserted_id

        inserted_id = self._run_transaction(_callback)
        return self.get_by_id(str(inserted_id))

    def compare_and_set(
        self,
        application_id: str,
        expected_status: str,
        changes: dict,
        guard: Optional[Guard] = None
    ) -> Optional[dict]:
        """Apply `changes` only while status == expected_status."""
        oid = to_object_id(application_id)
        if oid is None:
            return None
        query = {"_id": oid, "status": expected_status}

        if guard is None:
            with driver_errors():
                doc = self.collection.find_one_and_update(
                    query, {"$set": changes}, return_document=ReturnDocument.AFTER
                )
            return normalize_document(doc)

        current = self.get_by_id(application_id)
        if current is None:
            return None
        student_id = current["student_id"]

        def _callback(session):
            self._bump_guard(student_id, session)
            guard(self._student_applications(student_id, session))
            return self.collection.find_one_and_update(
                query, {"$set": changes}, return_document=ReturnDocument.AFTER, session=session
            )

        return normalize_document(self._run_transaction(_callback))


# ============================================================
# STORE FACADE
# ============================================================

class MongoAdmissionsStore(AdmissionsStore):
    """AdmissionsStore backed by the MongoDB services above."""

    def __init__(self):
        self.catalog = CatalogService()
        self.applications = ApplicationDocumentService()

    def create_institution(self, doc: dict) -> dict:
        return self.catalog.insert(self.catalog.institutions, doc)

    def get_institution(self, institution_id: str) -> Optional[dict]:
        return self.catalog.get_by_id(self.catalog.institutions, institution_id)

    def list_institutions(self) -> List[dict]:
        return self.catalog.find(self.catalog.institutions, {})

    def update_institution(self, institution_id: str, changes: dict) -> Optional[dict]:
        return self.catalog.update(self.catalog.institutions, institution_id, changes)

    def create_course(self, doc: dict) -> dict:
        return self.catalog.insert(self.catalog.courses, doc)

    def get_course(self, course_id: str) -> Optional[dict]:
        return self.catalog.get_by_id(self.catalog.courses, course_id)

    def list_courses(self, institution_id: Optional[str] = None) -> List[dict]:
        query = {"institution_id": institution_id} if institution_id else {}
        return self.catalog.find(self.catalog.courses, query)

    def get_application(self, application_id: str) -> Optional[dict]:
        return self.applications.get_by_id(application_id)

    def find_applications(self, query: dict) -> List[dict]:
        return self.applications.find(query)

    def find_by_idempotency_key(self, student_id: str, key: str) -> Optional[dict]:
        return self.applications.get_by_idempotency_key(student_id, key)

    def insert_application(self, doc: dict, guard: Guard) -> dict:
        return self.applications.insert_guarded(doc, guard)

    def update_application_status(
        self,
        application_id: str,
        expected_status: str,
        changes: dict,
        guard: Optional[Guard] = None
    ) -> Optional[dict]:
        return self.applications.compare_and_set(application_id, expected_status, changes, guard)

    def ping(self) -> bool:
        return test_mongo_connection()
