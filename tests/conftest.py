"""Pytest configuration and fixtures."""

import os
from datetime import timedelta

import pytest

# Set test environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from httpx import ASGITransport, AsyncClient  # noqa: E402

from helpers import as_current, make_user  # noqa: E402
from placement_portal.core.storage import Database, utc_now  # noqa: E402
from placement_portal.models.enums import Role  # noqa: E402
from placement_portal.models.internship import Internship  # noqa: E402
from placement_portal.schemas.application import (  # noqa: E402
    ApplicationCreate,
    MentorDecisionRequest,
)
from placement_portal.services.application_service import ApplicationService  # noqa: E402
from placement_portal.services.certificate_service import (  # noqa: E402
    DatabaseCertificateService,
)


@pytest.fixture
async def database():
    """Fresh in-memory store per test."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.init_models()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
async def client(database):
    """HTTP client bound to an app that shares the test store."""
    from placement_portal.main import create_app

    app = create_app(database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def student(session):
    return await make_user(
        session, "student.cse", Role.STUDENT, "Computer Science", ["Python", "SQL"]
    )


@pytest.fixture
async def other_student(session):
    return await make_user(session, "student.ece", Role.STUDENT, "Electronics")


@pytest.fixture
async def mentor(session):
    return await make_user(session, "mentor.cse", Role.MENTOR, "Computer Science")


@pytest.fixture
async def other_mentor(session):
    return await make_user(session, "mentor.ece", Role.MENTOR, "Electronics")


@pytest.fixture
async def employer(session):
    return await make_user(session, "employer.techcorp", Role.EMPLOYER)


@pytest.fixture
async def other_employer(session):
    return await make_user(session, "employer.othercorp", Role.EMPLOYER)


@pytest.fixture
async def staff(session):
    return await make_user(session, "staff.placement", Role.STAFF)


@pytest.fixture
async def internship(session, employer):
    """Active posting open to Computer Science students."""
    posting = Internship(
        title="Backend Engineering Intern",
        description="Build APIs with Python and FastAPI",
        company_name="TechCorp",
        required_skills=["Python", "FastAPI", "SQL"],
        eligible_departments=["Computer Science"],
        stipend_min=20000,
        stipend_max=30000,
        is_placement=False,
        location="Bangalore",
        duration_weeks=12,
        application_deadline=utc_now() + timedelta(days=30),
        posted_by=employer.id,
        is_active=True,
    )
    session.add(posting)
    await session.commit()
    return posting


@pytest.fixture
def application_service(session):
    return ApplicationService(session, DatabaseCertificateService(session))


@pytest.fixture
async def approved_application(application_service, student, mentor, internship):
    """An application the student's mentor has approved (version 2)."""
    application = await application_service.submit(
        as_current(student), ApplicationCreate(internship_id=internship.id)
    )
    return await application_service.mentor_decision(
        as_current(mentor),
        application.id,
        MentorDecisionRequest(expected_version=application.version, decision="APPROVED"),
    )
