"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- A controllable clock for status computation
- Sample data factories (events, students)
- Signed bearer tokens for admin and student callers
- FastAPI test client
"""

import os
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['CAMPUS_EVENTS_DB_URL'] = 'sqlite:///:memory:'
os.environ['JWT_SECRET_KEY'] = 'test-secret-key-for-campus-events-0123456789'
os.environ['CAMPUS_EVENTS_TIMEZONE'] = 'UTC'

from backend.src.models import Base, Event, EventParticipant
from backend.src.services.registration_guard import StudentIdentity


# Fixed "now" used by every test that does not move the clock
FIXED_NOW = datetime(2026, 3, 1, 10, 0, 0)


class FrozenClock:
    """Callable clock returning a settable instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    # This must be set for each connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Utility Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def clock():
    """Frozen clock set to FIXED_NOW."""
    return FrozenClock()


@pytest.fixture
def event_service(test_db_session, clock):
    """EventService bound to the test session and frozen clock."""
    from backend.src.services.event_service import EventService
    return EventService(test_db_session, clock=clock)


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def make_student():
    """Factory for StudentIdentity values: make_student(1) -> S001."""
    def _create(n=1):
        return StudentIdentity(
            student_id=f"S{n:03d}",
            name=f"Student {n}",
            email=f"student{n}@college.edu",
        )
    return _create


@pytest.fixture
def sample_event(test_db_session):
    """
    Factory for creating Event models in the database.

    ``days_ahead`` is relative to FIXED_NOW; ``participants`` is a count of
    pre-registered students S001..S00n.
    """
    def _create(
        title='Tech Talk',
        days_ahead=10,
        location='Main Auditorium',
        max_participants=100,
        registration_deadline=None,
        status='upcoming',
        participants=0,
        description=None,
        time='10:00 AM',
    ):
        event = Event(
            title=title,
            description=description,
            location=location,
            event_date=(FIXED_NOW + timedelta(days=days_ahead)).date(),
            time=time,
            max_participants=max_participants,
            registration_deadline=registration_deadline,
            status=status,
        )
        for n in range(1, participants + 1):
            event.participants.append(EventParticipant(
                student_id=f"S{n:03d}",
                name=f"Student {n}",
                email=f"student{n}@college.edu",
            ))
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


# ============================================================================
# Auth Fixtures
# ============================================================================

@pytest.fixture
def admin_headers():
    """Authorization header for an administrator."""
    from backend.src.middleware.auth import create_access_token
    token = create_access_token(subject='admin-1', role='admin')
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student_headers():
    """Factory for student Authorization headers: student_headers(2) -> S002."""
    from backend.src.middleware.auth import create_access_token

    def _create(n=1):
        token = create_access_token(
            subject=f'stu-{n}',
            role='student',
            student_id=f"S{n:03d}",
            name=f"Student {n}",
            email=f"student{n}@college.edu",
        )
        return {'Authorization': f'Bearer {token}'}
    return _create


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session, clock):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.api.analytics import get_analytics_service
    from backend.src.api.events import get_event_service
    from backend.src.db.database import get_db
    from backend.src.services.analytics_service import AnalyticsService
    from backend.src.services.event_service import EventService

    # Override dependencies
    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    def get_test_event_service():
        return EventService(test_db_session, clock=clock)

    def get_test_analytics_service():
        return AnalyticsService(test_db_session, clock=clock)

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_event_service] = get_test_event_service
    app.dependency_overrides[get_analytics_service] = get_test_analytics_service

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
