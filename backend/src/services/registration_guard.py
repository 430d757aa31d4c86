"""
Registration guard.

Ordered checks deciding whether a student may join an event. The first
failing check wins, so the error a student sees is the most specific one:

    completed -> cancelled -> ongoing -> full -> already registered

Fullness is checked before duplicates, so a full event answers EventFull
even to a student who is already on its list.

Callers must refresh the event status against "now" before calling in.
"""

from dataclasses import dataclass

from backend.src.models import EventParticipant
from backend.src.models.event import EventStatus
from backend.src.services.exceptions import (
    AlreadyRegisteredError,
    EventCancelledError,
    EventEndedError,
    EventFullError,
    EventOngoingError,
)


@dataclass(frozen=True)
class StudentIdentity:
    """Authenticated student as seen by the registration guard."""

    student_id: str
    name: str
    email: str


_STATUS_ERRORS = (
    (EventStatus.COMPLETED.value, EventEndedError),
    (EventStatus.CANCELLED.value, EventCancelledError),
    (EventStatus.ONGOING.value, EventOngoingError),
)


def check_registration(event, student: StudentIdentity) -> None:
    """
    Run the ordered registration checks.

    Raises:
        EventEndedError, EventCancelledError, EventOngoingError,
        EventFullError, AlreadyRegisteredError
    """
    guid = getattr(event, "guid", None)

    for status, error in _STATUS_ERRORS:
        if event.status == status:
            raise error(event_guid=guid)

    if event.participant_count >= event.max_participants:
        raise EventFullError(event_guid=guid)

    if event.has_participant(student.student_id):
        raise AlreadyRegisteredError(event_guid=guid)


def try_register(event, student: StudentIdentity) -> EventParticipant:
    """
    Check and append a participant snapshot to the event.

    Returns:
        The appended EventParticipant (not yet flushed)

    Raises:
        RegistrationError subclass when a check fails; the event is untouched
    """
    check_registration(event, student)

    participant = EventParticipant(
        student_id=student.student_id,
        name=student.name,
        email=student.email,
    )
    event.participants.append(participant)
    return participant
