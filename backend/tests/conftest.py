# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets a fresh in-memory SQLite schema. Settings are pinned
through environment variables BEFORE any swimdesk import so the module
level engine never points at a real database.
"""

import os

# CRITICAL: Set test configuration BEFORE any swimdesk imports!
os.environ["SWIMDESK_ENVIRONMENT"] = "test"
os.environ["SWIMDESK_DATABASE_URL"] = "sqlite://"
os.environ["SWIMDESK_CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SWIMDESK_JWT_SECRET_KEY"] = "test-secret-key-for-swimdesk-tests"

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from swimdesk import models  # noqa: F401
from swimdesk.api.dependencies.database import get_db
from swimdesk.auth import create_access_token
from swimdesk.core.enums import RoleName
from swimdesk.core.ulid_helper import generate_ulid
from swimdesk.database import Base
from swimdesk.main import fastapi_app as app
from swimdesk.models.class_session import ClassSession
from swimdesk.services.cancellation_service import CancellationService
from swimdesk.services.enrollment_service import EnrollmentService

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(test_engine, "connect")
def _enable_sqlite_fk(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db():
    """Create a fresh schema and session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session):
    """Create a test client bound to the test session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - lifespan would touch the module engine
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Identities
# ============================================================================


@pytest.fixture
def business_id() -> str:
    return generate_ulid()


@pytest.fixture
def other_business_id() -> str:
    return generate_ulid()


@pytest.fixture
def client_id() -> str:
    return generate_ulid()


@pytest.fixture
def other_client_id() -> str:
    return generate_ulid()


@pytest.fixture
def staff_id() -> str:
    return generate_ulid()


def auth_headers_for(user_id: str, role: RoleName, business_id: str) -> dict:
    token = create_access_token(user_id, role, business_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client_headers(client_id: str, business_id: str) -> dict:
    return auth_headers_for(client_id, RoleName.CLIENT, business_id)


@pytest.fixture
def other_client_headers(other_client_id: str, business_id: str) -> dict:
    return auth_headers_for(other_client_id, RoleName.CLIENT, business_id)


@pytest.fixture
def admin_headers(staff_id: str, business_id: str) -> dict:
    return auth_headers_for(staff_id, RoleName.ADMIN, business_id)


@pytest.fixture
def instructor_headers(business_id: str) -> dict:
    return auth_headers_for(generate_ulid(), RoleName.INSTRUCTOR, business_id)


# ============================================================================
# Factories
# ============================================================================


def _create_class_session(
    db: Session,
    business_id: str,
    *,
    starts_in: timedelta = timedelta(days=3),
    duration_minutes: int = 45,
    capacity: int = 4,
    class_title: str = "Level 2 Freestyle",
    is_active: bool = True,
    instructor_id: Optional[str] = None,
) -> ClassSession:
    starts_at = (datetime.now(timezone.utc) + starts_in).replace(microsecond=0)
    session = ClassSession(
        id=generate_ulid(),
        business_id=business_id,
        class_id=generate_ulid(),
        instructor_id=instructor_id or generate_ulid(),
        class_title=class_title,
        starts_at=starts_at,
        ends_at=starts_at + timedelta(minutes=duration_minutes),
        capacity=capacity,
        is_active=is_active,
    )
    db.add(session)
    db.commit()
    return session


@pytest.fixture
def make_session(db: Session, business_id: str):
    """Factory for committed class sessions; defaults to the test business."""

    def _make(**kwargs: Any) -> ClassSession:
        owner = kwargs.pop("business_id", business_id)
        return _create_class_session(db, owner, **kwargs)

    return _make


@pytest.fixture
def enroll(db: Session):
    def _enroll(session: ClassSession, client_id: str, **kwargs: Any):
        return EnrollmentService(db).enroll(session.id, client_id, business_id=session.business_id, **kwargs)

    return _enroll


@pytest.fixture
def cancel(db: Session):
    """Cancel through the cancellation recorder, as the API does."""

    def _cancel(session: ClassSession, client_id: str, **kwargs: Any):
        return CancellationService(db).record_cancellation(
            session.id, client_id, business_id=session.business_id, **kwargs
        )

    return _cancel


@pytest.fixture
def class_session(make_session) -> ClassSession:
    return make_session()


@pytest.fixture
def catch_up_session(make_session, enroll, cancel, other_client_id: str) -> ClassSession:
    """A future session whose seat was freed by another client's cancellation."""
    session = make_session(starts_in=timedelta(days=5), class_title="Level 3 Backstroke")
    enroll(session, other_client_id)
    cancel(session, other_client_id)
    return session


@pytest.fixture
def auth_headers():
    """Factory for bearer headers of arbitrary principals."""
    return auth_headers_for
