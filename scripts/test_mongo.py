#!/usr/bin/env python3
"""
MongoDB Test Script

Walks the admissions workflow against a live MongoDB (replica set required
for transactions) and checks the rules hold with the real store.
Run: STORE_BACKEND=mongo python scripts/test_mongo.py
"""
import sys
sys.path.insert(0, '.')

from coursehub.core.errors import AdmissionConflictError, QuotaExceededError
from coursehub.db.mongodb import COLLECTIONS, get_mongo_db, init_mongo_indexes, test_mongo_connection
from coursehub.schemas.schemas import CourseCreate, CourseRequirements, InstitutionCreate
from coursehub.services.application_service import AdmissionsService
from coursehub.services.mongo_service import MongoAdmissionsStore

STUDENT_ID = "script-student"
CODES = ("SCRIPT-A", "SCRIPT-B")


def check_catalog(service):
    """Create two institutions and their courses."""
    print("\n[1] Creating catalog...")

    first = service.create_institution(InstitutionCreate(code=CODES[0], name="Script University A"))
    second = service.create_institution(InstitutionCreate(code=CODES[1], name="Script University B"))
    courses = [
        service.create_course(first.id, CourseCreate(
            name=f"Course A{n}", code=f"A{n}",
            requirements=CourseRequirements(minimum_grade=50)
        ))
        for n in range(3)
    ]
    courses.append(service.create_course(second.id, CourseCreate(name="Course B0", code="B0")))
    print(f"    ✅ Institutions: {first.id}, {second.id}")
    print(f"    ✅ Courses: {len(courses)}")
    return courses


def check_quota(service, courses):
    """Two applications per institution, the third is refused."""
    print("\n[2] Testing quota...")

    qualifications = {"final_grade": "72"}
    first = service.submit_application(STUDENT_ID, courses[0].id, courses[0].institution_id, qualifications)
    service.submit_application(STUDENT_ID, courses[1].id, courses[1].institution_id, qualifications)
    print("    ✅ Two applications submitted")

    try:
        service.submit_application(STUDENT_ID, courses[2].id, courses[2].institution_id, qualifications)
        print("    ❌ Third application was accepted")
    except QuotaExceededError as e:
        print(f"    ✅ Third application refused: {e.message}")
    return first


def check_admission(service, application, courses):
    """Approve, accept, then try to apply elsewhere."""
    print("\n[3] Testing admission exclusivity...")

    service.transition_status(application.id, "approved", "institute")
    admitted = service.transition_status(application.id, "admitted", "student", actor_id=STUDENT_ID)
    print(f"    ✅ Admission accepted: {admitted.admission_accepted}")

    try:
        service.submit_application(STUDENT_ID, courses[3].id, courses[3].institution_id, {})
        print("    ❌ Application after admission was accepted")
    except AdmissionConflictError as e:
        print(f"    ✅ Refused after admission: {e.message}")

    summary = service.status_summary()
    print(f"    ✅ Summary: total={summary.total} pending={summary.pending} admitted={summary.admitted}")


def cleanup_test_data():
    """Remove script data from collections."""
    print("\n[4] Cleaning up test data...")

    db = get_mongo_db()
    institution_ids = [
        str(doc["_id"]) for doc in db[COLLECTIONS["institutions"]].find({"code": {"$in": list(CODES)}})
    ]
    db[COLLECTIONS["applications"]].delete_many({"student_id": STUDENT_ID})
    db[COLLECTIONS["application_guards"]].delete_many({"_id": STUDENT_ID})
    db[COLLECTIONS["courses"]].delete_many({"institution_id": {"$in": institution_ids}})
    db[COLLECTIONS["institutions"]].delete_many({"code": {"$in": list(CODES)}})

    print("    ✅ Test data cleaned up")


def main():
    print("=" * 60)
    print("MONGODB ADMISSIONS TEST")
    print("=" * 60)

    if not test_mongo_connection():
        print("❌ MongoDB connection failed!")
        return

    print("✅ MongoDB connected!")
    init_mongo_indexes()
    cleanup_test_data()

    service = AdmissionsService(store=MongoAdmissionsStore())
    try:
        courses = check_catalog(service)
        application = check_quota(service, courses)
        check_admission(service, application, courses)

        print("\n" + "=" * 60)
        print("✅ ALL MONGODB CHECKS PASSED!")
        print("=" * 60)
    finally:
        cleanup_test_data()


if __name__ == "__main__":
    main()
