'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE (in-memory SQLite) before any app code is imported.
2. A fresh database per test, created from the ORM metadata.
3. An httpx AsyncClient bound to the app, with the meeting provider mocked.
4. Service instances pre-injected with the test db session.
5. Seeded users, a subject and a class.
'''
import os

# Must run before the settings object is created on import.
os.environ["TEST_MODE"] = "True"
os.environ["DATABASE_URL_TEST"] = "sqlite+aiosqlite://"
os.environ.setdefault("DATABASE_URL_PROD", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

# --- Application Imports ---
from class_scheduler.main import app
from class_scheduler.common.config import settings
from class_scheduler.database import engine as db_engine
from class_scheduler.database import models as db_models
from class_scheduler.services.security import JWTHandler
from class_scheduler.services.user_service import UserService
from class_scheduler.services.subject_service import SubjectService
from class_scheduler.services.class_service import ClassService
from class_scheduler.services.notification_service import NotificationService
from class_scheduler.services.appointment_service import AppointmentService
from class_scheduler.services.meeting_service import MeetingService

from tests import factories
from tests.constants import TEST_MEET_LINK


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio'.
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


# --- 1. Database ---

@pytest.fixture(scope="function")
async def database() -> AsyncGenerator[None, None]:
    """
    Creates the engine (what the app's lifespan would do) and a fresh
    schema. The in-memory database disappears with the engine.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your environment."

    db_engine.create_db_engine_and_session_factory()
    async with db_engine.engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)

    yield

    await db_engine.dispose_db_engine()


@pytest.fixture(scope="function")
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for seeding data and for service-level tests.
    Services only flush; the test decides when to commit.
    """
    session = db_engine.AsyncSessionLocal()
    factories.test_db_session = session
    try:
        yield session
    finally:
        factories.test_db_session = None
        await session.rollback()
        await session.close()


# --- 2. Meeting Provider Mock ---

@pytest.fixture(scope="function")
def mock_meeting_service() -> MeetingService:
    """Provides a mock MeetingService that always returns TEST_MEET_LINK."""
    mock_service = MagicMock(spec=MeetingService)
    mock_service.create_meeting = AsyncMock(return_value=TEST_MEET_LINK)
    return mock_service


# --- 3. API Client ---

@pytest.fixture(scope="function")
async def client(database, mock_meeting_service: MeetingService) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    AsyncClient talking to the app in-process. Requests go through the
    real get_db_session, so every request commits or rolls back on its own.
    """
    app.dependency_overrides[MeetingService] = lambda: mock_meeting_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[db_models.Users], dict[str, str]]:
    """Builds a bearer Authorization header for a user."""
    def _headers(user: db_models.Users) -> dict[str, str]:
        token = JWTHandler.create_access_token(subject=user.username)
        return {"Authorization": f"Bearer {token}"}
    return _headers


# --- 4. Service Fixtures ---

@pytest.fixture(scope="function")
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db=db_session)

@pytest.fixture(scope="function")
def subject_service(db_session: AsyncSession) -> SubjectService:
    return SubjectService(db=db_session)

@pytest.fixture(scope="function")
def class_service(db_session: AsyncSession, user_service: UserService) -> ClassService:
    return ClassService(db=db_session, user_service=user_service)

@pytest.fixture(scope="function")
def notification_service(db_session: AsyncSession) -> NotificationService:
    return NotificationService(db=db_session)

@pytest.fixture(scope="function")
def appointment_service(
    db_session: AsyncSession,
    class_service: ClassService,
    notification_service: NotificationService,
    mock_meeting_service: MeetingService
) -> AppointmentService:
    return AppointmentService(
        db=db_session,
        class_service=class_service,
        notification_service=notification_service,
        meeting_service=mock_meeting_service
    )


# --- 5. Data Fixtures ---

@pytest.fixture(scope="function")
async def test_admin(db_session: AsyncSession) -> db_models.Users:
    admin = factories.AdminFactory.create(name="Ada Admin")
    await db_session.commit()
    return admin

@pytest.fixture(scope="function")
async def test_teacher(db_session: AsyncSession) -> db_models.Users:
    teacher = factories.TeacherFactory.create(name="Tom Teacher")
    await db_session.commit()
    return teacher

@pytest.fixture(scope="function")
async def test_unrelated_teacher(db_session: AsyncSession) -> db_models.Users:
    teacher = factories.TeacherFactory.create(name="Uma Unrelated")
    await db_session.commit()
    return teacher

@pytest.fixture(scope="function")
async def test_student(db_session: AsyncSession) -> db_models.Users:
    student = factories.StudentFactory.create(name="Sam Student")
    await db_session.commit()
    return student

@pytest.fixture(scope="function")
async def test_second_student(db_session: AsyncSession) -> db_models.Users:
    student = factories.StudentFactory.create(name="Sara Student")
    await db_session.commit()
    return student

@pytest.fixture(scope="function")
async def test_subject(db_session: AsyncSession) -> db_models.Subjects:
    subject = factories.SubjectFactory.create(name="Algebra")
    await db_session.commit()
    return subject

@pytest.fixture(scope="function")
async def test_class(
    db_session: AsyncSession,
    test_subject: db_models.Subjects,
    test_teacher: db_models.Users,
    test_student: db_models.Users,
    test_second_student: db_models.Users
) -> db_models.Classes:
    """
    Algebra class taught by test_teacher to both test students,
    MON 10:00 (60 min) and WED 14:00 (90 min), 2024-01-01 to 2024-01-14.
    """
    class_orm = factories.ClassFactory.create(subject=test_subject, teacher=test_teacher)
    factories.ClassStudentFactory.create(class_=class_orm, student=test_student)
    factories.ClassStudentFactory.create(class_=class_orm, student=test_second_student)
    await db_session.commit()
    return class_orm

@pytest.fixture(scope="function")
async def test_unrelated_class(
    db_session: AsyncSession,
    test_subject: db_models.Subjects,
    test_unrelated_teacher: db_models.Users
) -> db_models.Classes:
    """A class of another teacher with an empty roster."""
    class_orm = factories.ClassFactory.create(subject=test_subject, teacher=test_unrelated_teacher)
    await db_session.commit()
    return class_orm
