"""Pytest configuration and fixtures."""

import os

# Must be set before qyra.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-more-than-32-characters")

from datetime import datetime, timedelta, timezone
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from qyra.core.rbac import UserRole
from qyra.core.security import create_access_token, get_password_hash
from qyra.db.base import Base
from qyra.db.session import get_db
from qyra.main import app
from qyra.models import QueueEntry, QueueStatus, CustomerType, User

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiting during tests to avoid flaky failures
    from qyra.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


def _make_user(db: Session, email: str, role: UserRole, password: str = "pass123") -> User:
    user = User(
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        name=email.split("@")[0].title(),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return _make_user(db_session, "admin@test.com", UserRole.ADMIN)


@pytest.fixture
def staff_user(db_session: Session) -> User:
    return _make_user(db_session, "staff@test.com", UserRole.STAFF)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


@pytest.fixture
def staff_headers(staff_user: User) -> dict:
    return _headers(staff_user)


BASE_TIME = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_entry(db_session: Session):
    """Insert a queue entry directly, with full control over its fields."""
    counter = {"n": 0}

    def _make(
        name: str = "Guest",
        customer_type: CustomerType = CustomerType.WALK_IN,
        priority_level: Optional[int] = None,
        status: QueueStatus = QueueStatus.WAITING,
        created_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
        token_number: Optional[str] = None,
    ) -> QueueEntry:
        counter["n"] += 1
        entry = QueueEntry(
            name=name,
            customer_type=customer_type,
            priority_level=priority_level or customer_type.initial_priority,
            status=status,
            token_number=token_number or f"QY-T{counter['n']:03d}",
            created_at=created_at or BASE_TIME + timedelta(minutes=counter["n"]),
            completed_at=completed_at,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _make
