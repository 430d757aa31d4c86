"""
EventParticipant model for event registrations.

A participant is a snapshot of a student's identity taken at registration
time and owned by exactly one event. Later profile changes do not alter it.

Design Rationale:
- Unique (event_id, student_id) backs the duplicate-registration check at
  the database level
- Insertion order (id) is registration order
- CASCADE on event delete; no identity outside the event (no GUID)
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from backend.src.models import Base


class EventParticipant(Base):
    """
    Participant snapshot stored inside an event.

    Attributes:
        id: Primary key (registration order)
        event_id: FK to events (CASCADE on delete)
        student_id: Student's natural key, used for deduplication
        name: Student name at registration time
        email: Student email at registration time
        registered_at: When the registration was committed

    Constraints:
        - Unique (event_id, student_id): a student registers once per event
    """

    __tablename__ = "event_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)

    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    student_id = Column(String(20), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)

    registered_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="participants")

    __table_args__ = (
        UniqueConstraint(
            "event_id",
            "student_id",
            name="uq_event_participant_student"
        ),
    )

    def to_dict(self) -> dict:
        """Snapshot as a plain dictionary."""
        return {
            "student_id": self.student_id,
            "name": self.name,
            "email": self.email,
            "registered_at": self.registered_at,
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<EventParticipant("
            f"event_id={self.event_id}, "
            f"student_id={self.student_id}"
            f")>"
        )
