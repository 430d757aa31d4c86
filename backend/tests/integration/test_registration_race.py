"""
Integration tests for concurrent registration.

Two sessions on a shared SQLite file play the two sides of a
read-check-write race on the same event. The optimistic version check
must force the slower writer to re-read and re-run the guard.
"""

import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backend.src.models import Base, Event, EventParticipant
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import AlreadyRegisteredError, EventFullError
from backend.src.services.registration_guard import StudentIdentity


def student(n):
    return StudentIdentity(f"S{n:03d}", f"Student {n}", f"student{n}@college.edu")


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine so sessions use separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(file_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=file_engine)


@pytest.fixture
def one_seat_event(session_factory, clock):
    """Upcoming event with a single seat."""
    with session_factory() as session:
        event = EventService(session, clock=clock).create(
            title="Robotics Demo",
            event_date=clock().date().replace(day=20),
            location="Lab Block",
            max_participants=1,
        )
        return event.guid


class TestRegistrationRace:
    """Read-check-write races on one event."""

    def test_stale_reader_is_retried_into_event_full(self, session_factory, clock, one_seat_event):
        """
        Session A reads the event while it is empty; session B fills the
        last seat; A's commit must fail the version check, retry, and be
        rejected as full.
        """
        session_a = session_factory()
        session_b = session_factory()
        try:
            service_a = EventService(session_a, clock=clock)
            service_b = EventService(session_b, clock=clock)

            # A loads the event while the seat is free
            stale = service_a.get_by_guid(one_seat_event)
            assert stale.participant_count == 0
            version_seen = stale.version_id

            # B wins the race
            service_b.register(one_seat_event, student(2))

            with pytest.raises(EventFullError):
                service_a.register(one_seat_event, student(1))

            session_a.expire_all()
            event = service_a.get_by_guid(one_seat_event)
            assert [p.student_id for p in event.participants] == ["S002"]
            assert event.version_id == version_seen + 1
        finally:
            session_a.close()
            session_b.close()

    def test_stale_duplicate_is_retried_into_already_registered(
        self, session_factory, clock, one_seat_event
    ):
        """The same student registering through two stale sessions lands once."""
        session_a = session_factory()
        session_b = session_factory()
        try:
            service_a = EventService(session_a, clock=clock)
            service_b = EventService(session_b, clock=clock)
            service_a.update(one_seat_event, max_participants=5)

            service_a.get_by_guid(one_seat_event)
            service_b.register(one_seat_event, student(1))

            with pytest.raises(AlreadyRegisteredError):
                service_a.register(one_seat_event, student(1))

            with session_factory() as check:
                assert check.query(EventParticipant).count() == 1
        finally:
            session_a.close()
            session_b.close()

    def test_threads_never_overfill(self, session_factory, clock, one_seat_event):
        """Many threads racing for a small event never exceed its capacity."""
        with session_factory() as session:
            EventService(session, clock=clock).update(one_seat_event, max_participants=3)

        outcomes = []
        lock = threading.Lock()

        def attempt(n):
            session = session_factory()
            try:
                EventService(session, clock=clock).register(one_seat_event, student(n))
                result = "ok"
            except EventFullError:
                result = "full"
            except Exception as e:
                result = type(e).__name__
            finally:
                session.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=(n,)) for n in range(1, 11)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        with session_factory() as session:
            event = session.query(Event).one()
            assert event.participant_count <= event.max_participants

        assert outcomes.count("ok") == event.participant_count
        assert outcomes.count("ok") <= 3
