"""
MongoDB Connection Utility

MongoDB stores the admissions documents:
- institutions: universities/colleges and their published admission window
- courses: offerings with eligibility requirements
- applications: one document per (student, course) submission
- application_guards: one tiny document per student, bumped inside every
  submission/acceptance transaction so concurrent ones for the same student
  conflict and get retried instead of both passing a stale quota check

Transactions need a replica set (a single-node replica set is enough).
"""
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from coursehub.core.config import get_settings
from coursehub.core.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        timeout = settings.store_timeout_ms
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=timeout,
            connectTimeoutMS=timeout,
            socketTimeoutMS=timeout,
            tz_aware=True
        )
    return _client


def get_mongo_db() -> Database:
    """Get the admissions database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "institutions": "institutions",
    "courses": "courses",
    "applications": "applications",
    "application_guards": "application_guards"
}


def init_mongo_indexes():
    """
    Create indexes. Call this once during app startup.
    The unique indexes back the duplicate-application and idempotency rules.
    """
    db = get_mongo_db()

    db[COLLECTIONS["institutions"]].create_index("code", unique=True)
    db[COLLECTIONS["courses"]].create_index("institution_id")

    applications = db[COLLECTIONS["applications"]]
    # One application per student per course
    applications.create_index(
        [("student_id", ASCENDING), ("course_id", ASCENDING)],
        unique=True
    )
    # Retried submissions carry the same key; only keyed documents are indexed
    applications.create_index(
        [("student_id", ASCENDING), ("idempotency_key", ASCENDING)],
        unique=True,
        partialFilterExpression={"idempotency_key": {"$type": "string"}}
    )
    applications.create_index([("institution_id", ASCENDING), ("status", ASCENDING)])

    logger.info("MongoDB indexes created successfully")
