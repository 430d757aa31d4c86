"""
Event model for campus events.

Events are scheduled activities students can register for. Each event owns
its participant list (EventParticipant rows) and is hard-deleted together
with it.

Design Rationale:
- Status is derived from event_date on read; the stored column only carries
  the sticky "cancelled" override and the last status committed by a write
- version_id enables optimistic locking: every write checks that no other
  writer committed since the event was read
- Participants are denormalized snapshots, not references to students
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, CheckConstraint
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


DEFAULT_MAX_PARTICIPANTS = 100


class EventStatus(enum.Enum):
    """Event lifecycle status."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base, GuidMixin):
    """
    Campus event model.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (evt_xxx, inherited from GuidMixin)

        Core Fields:
            title: Event title
            description: Event description
            location: Where the event takes place
            event_date: Calendar date of the event
            time: Display-only time string (e.g. "10:00 AM")

        Registration Fields:
            max_participants: Capacity (>= 1)
            registration_deadline: Last day registration is advertised as open

        Status:
            status: Last committed status; "cancelled" is sticky

        Concurrency:
            version_id: Optimistic locking counter

        Timestamps:
            created_at: Creation timestamp
            updated_at: Last write timestamp

    Relationships:
        participants: Ordered EventParticipant rows (CASCADE on delete)
    """

    __tablename__ = "events"

    GUID_PREFIX = "evt"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core fields
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(200), nullable=False)
    event_date = Column(Date, nullable=False, index=True)
    time = Column(String(20), nullable=True)

    # Registration
    max_participants = Column(Integer, default=DEFAULT_MAX_PARTICIPANTS, nullable=False)
    registration_deadline = Column(Date, nullable=True)

    status = Column(String(20), default=EventStatus.UPCOMING.value, nullable=False)

    created_by = Column(String(64), nullable=True)

    version_id = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    participants = relationship(
        "EventParticipant",
        back_populates="event",
        order_by="EventParticipant.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("max_participants >= 1", name="ck_events_max_participants_positive"),
        CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed', 'cancelled')",
            name="ck_events_status_valid",
        ),
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_cancelled(self) -> bool:
        """Check if the event carries the cancelled override."""
        return self.status == EventStatus.CANCELLED.value

    @property
    def participant_count(self) -> int:
        """Number of registered participants."""
        return len(self.participants)

    @property
    def spots_left(self) -> int:
        """Remaining capacity, never negative."""
        return max(self.max_participants - self.participant_count, 0)

    def has_participant(self, student_id: str) -> bool:
        """Check if a student is already in the participant list."""
        return any(p.student_id == student_id for p in self.participants)

    def touch(self) -> None:
        """Mark the row as written so the optimistic version check applies."""
        self.updated_at = datetime.utcnow()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Event("
            f"id={self.id}, "
            f"title='{self.title}', "
            f"date={self.event_date}, "
            f"status={self.status}"
            f")>"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return f"{self.title} - {self.event_date}"
