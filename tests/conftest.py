import pytest
from fastapi.testclient import TestClient

from coursehub.core.auth import create_access_token
from coursehub.main import app
from coursehub.schemas.schemas import CourseCreate, CourseRequirements, InstitutionCreate
from coursehub.services.application_service import AdmissionsService, get_admissions_service
from coursehub.services.memory_store import InMemoryAdmissionsStore


@pytest.fixture
def store() -> InMemoryAdmissionsStore:
    return InMemoryAdmissionsStore(timeout_seconds=2)


@pytest.fixture
def service(store) -> AdmissionsService:
    return AdmissionsService(store=store)


def make_institution(service: AdmissionsService, code: str, name: str = None):
    return service.create_institution(InstitutionCreate(code=code, name=name or f"{code} University"))


def make_course(service: AdmissionsService, institution_id: str, code: str, **kwargs):
    requirements = kwargs.pop("requirements", {})
    return service.create_course(
        institution_id,
        CourseCreate(
            name=kwargs.pop("name", f"Course {code}"),
            code=code,
            requirements=CourseRequirements(**requirements),
            **kwargs
        )
    )


@pytest.fixture
def catalog(service) -> dict:
    """Two institutions: I1 with courses C1-C3, I2 with C4."""
    i1 = make_institution(service, "LUCT")
    i2 = make_institution(service, "NUL")
    return {
        "I1": i1,
        "I2": i2,
        "C1": make_course(service, i1.id, "C1"),
        "C2": make_course(service, i1.id, "C2"),
        "C3": make_course(service, i1.id, "C3"),
        "C4": make_course(service, i2.id, "C4"),
    }


@pytest.fixture
def client(service):
    app.dependency_overrides[get_admissions_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: str, role: str) -> dict:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}
