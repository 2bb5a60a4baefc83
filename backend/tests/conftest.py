"""Pytest fixtures for the archive access backend.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite engine (fresh schema per test)
- Test users for every role (ADMIN, ARCHIVIST, RESEARCHER)
- Records with and without an attached file
- Access requests driven into a given status
- Authenticated test clients with JWT tokens

Usage:
    def test_staff_endpoint(archivist_client, researcher_request):
        response = archivist_client.get("/api/v1/requests")
        assert response.status_code == 200
"""

import os
import shutil
import tempfile
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
if "UPLOAD_DIR" not in os.environ:
    os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="archive-uploads-")
    _TEMP_UPLOAD_DIR = os.environ["UPLOAD_DIR"]
else:
    _TEMP_UPLOAD_DIR = None
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Generator, Optional
from uuid import uuid4

from archive_access.access_requests.lifecycle import AccessRequestLifecycle
from archive_access.access_requests.status import AccessRequestStatus
from archive_access.auth.jwt import create_access_token
from archive_access.auth.password import hash_password
from archive_access.config import get_settings
from archive_access.database import get_db as database_get_db
from archive_access.models import AccessRequest, Base, Record, User


# Single shared in-memory database; StaticPool keeps one connection so the
# schema survives across sessions and TestClient worker threads.
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


def _create_user(db_session: Session, email: str, role: str, full_name: str, password: str) -> User:
    user = User(
        email=email,
        full_name=full_name,
        role=role,
        password_hash=hash_password(password),
        status="ACTIVE"
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def admin_user(db_session: Session) -> User:
    """Create an ADMIN user for testing."""
    return _create_user(db_session, "admin@archive.org", "ADMIN", "Admin User", "AdminP@ss123")


@pytest.fixture(scope="function")
def archivist_user(db_session: Session) -> User:
    """Create an ARCHIVIST user for testing."""
    return _create_user(db_session, "archivist@archive.org", "ARCHIVIST", "Archivist User", "ArchivistP@ss123")


@pytest.fixture(scope="function")
def researcher_user(db_session: Session) -> User:
    """Create a RESEARCHER user for testing."""
    user = _create_user(db_session, "researcher@archive.org", "RESEARCHER", "Researcher User", "ResearcherP@ss123")
    user.occupation = "Historian"
    user.workplace = "State University"
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def other_researcher(db_session: Session) -> User:
    """A second researcher, for ownership checks."""
    return _create_user(db_session, "other@archive.org", "RESEARCHER", "Other Researcher", "OtherP@ss123")


@pytest.fixture(scope="function")
def record_without_file(db_session: Session) -> Record:
    """A catalogued record with no digitized file."""
    record = Record(ref_code="F-1/OP-1/D-7", title="Parish register, 1821-1830")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture(scope="function")
def record_with_file(db_session: Session) -> Generator[Record, None, None]:
    """A record whose file exists under UPLOAD_DIR."""
    upload_dir = Path(get_settings().UPLOAD_DIR)
    relative_path = f"records/{uuid4()}.pdf"
    file_path = upload_dir / relative_path
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(b"%PDF-1.4 scanned register")

    record = Record(
        ref_code="F-1/OP-1/D-8",
        title="Parish register, 1831-1840",
        access_level="RESTRICTED",
        file_path=relative_path,
        file_name="register_1831.pdf",
        file_size=file_path.stat().st_size,
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)

    yield record

    file_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def make_request(db_session: Session, archivist_user: User) -> Callable[..., AccessRequest]:
    """Factory that creates a request and walks it to the wanted status.

    Transitions go through the lifecycle engine with the archivist as the
    acting principal, so decision stamps look like real ones.
    """
    paths = {
        AccessRequestStatus.NEW: [],
        AccessRequestStatus.IN_PROGRESS: [AccessRequestStatus.IN_PROGRESS],
        AccessRequestStatus.APPROVED: [AccessRequestStatus.APPROVED],
        AccessRequestStatus.REJECTED: [AccessRequestStatus.REJECTED],
        AccessRequestStatus.COMPLETED: [AccessRequestStatus.APPROVED, AccessRequestStatus.COMPLETED],
    }

    def _make(
        record: Record,
        user: User,
        status: AccessRequestStatus = AccessRequestStatus.NEW,
        request_type: str = "VIEW",
        rejection_reason: Optional[str] = "Record is under conservation",
    ) -> AccessRequest:
        lifecycle = AccessRequestLifecycle(db_session)
        request = lifecycle.create(record.id, user.id, request_type)
        for step in paths[status]:
            lifecycle.transition(
                request.id,
                step,
                rejection_reason if step == AccessRequestStatus.REJECTED else None,
                archivist_user.id,
            )
        db_session.commit()
        db_session.refresh(request)
        return request

    return _make


def _override_db(db_session: Session):
    from archive_access.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db
    return app


def _authenticated_client(db_session: Session, user: User) -> TestClient:
    app = _override_db(db_session)

    token = create_access_token(
        user_id=user.id,
        role=user.role,
        email=user.email
    )

    client = TestClient(app)
    client.headers = {
        "Authorization": f"Bearer {token}"
    }
    return client


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create an unauthenticated test client.

    Useful for testing public endpoints and the login flow.
    """
    app = _override_db(db_session)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def admin_client(db_session: Session, admin_user: User) -> Generator[TestClient, None, None]:
    """Create a test client authenticated as the ADMIN user."""
    yield _authenticated_client(db_session, admin_user)
    _override_db(db_session).dependency_overrides.clear()


@pytest.fixture(scope="function")
def archivist_client(db_session: Session, archivist_user: User) -> Generator[TestClient, None, None]:
    """Create a test client authenticated as the ARCHIVIST user."""
    yield _authenticated_client(db_session, archivist_user)
    _override_db(db_session).dependency_overrides.clear()


@pytest.fixture(scope="function")
def researcher_client(db_session: Session, researcher_user: User) -> Generator[TestClient, None, None]:
    """Create a test client authenticated as the RESEARCHER user."""
    yield _authenticated_client(db_session, researcher_user)
    _override_db(db_session).dependency_overrides.clear()


@pytest.fixture(scope="function")
def other_researcher_client(db_session: Session, other_researcher: User) -> Generator[TestClient, None, None]:
    """Create a test client authenticated as the second researcher."""
    yield _authenticated_client(db_session, other_researcher)
    _override_db(db_session).dependency_overrides.clear()


@pytest.fixture(scope="session", autouse=True)
def cleanup_upload_dir():
    """Remove the temporary upload directory created for this run."""
    yield
    if _TEMP_UPLOAD_DIR:
        shutil.rmtree(_TEMP_UPLOAD_DIR, ignore_errors=True)
