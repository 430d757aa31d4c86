"""
Event service for managing campus events.

Provides business logic for listing, retrieving, creating, updating,
cancelling and deleting events, and for registering students and removing
participants.

Design:
- Status is computed on every read and persisted only by write paths
- Every write runs read -> check -> write against a fresh copy of the event
  and commits under the event's optimistic version check; a concurrent
  writer forces a rollback and a full retry, so capacity and duplicate
  checks are always evaluated against committed state
- Hard delete; participant rows cascade with their event
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import Event, EventParticipant
from backend.src.models.event import EventStatus
from backend.src.services.event_status import (
    compute_status,
    current_time,
    is_registration_open,
    refresh_status,
)
from backend.src.services.exceptions import (
    AlreadyRegisteredError,
    NotFoundError,
    RegistrationError,
    StoreError,
    ValidationError,
)
from backend.src.services.registration_guard import StudentIdentity, try_register
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")

MAX_PARTICIPANTS_LIMIT = 10000

# Fields an admin may change through update()
UPDATABLE_FIELDS = {
    "title",
    "description",
    "event_date",
    "time",
    "location",
    "max_participants",
    "registration_deadline",
}
REQUIRED_FIELDS = ("title", "event_date", "location", "max_participants")


class EventService:
    """
    Service for managing campus events and their participants.

    Usage:
        >>> service = EventService(db_session)
        >>> event = service.create(
        ...     title="Hackathon",
        ...     event_date=date(2026, 11, 2),
        ...     location="Main Hall",
        ... )
        >>> service.register(event.guid, StudentIdentity("S1", "Asha", "asha@college.edu"))
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Callable[[], datetime]] = None,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
            clock: Returns "now" in the event timezone (defaults to wall clock)
            settings: Application settings (defaults to cached settings)
        """
        self.db = db
        self.clock = clock or current_time
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_guid(self, guid: str) -> Event:
        """
        Get an event by GUID.

        Raises:
            NotFoundError: If the GUID is malformed or no such event exists
        """
        try:
            uuid_value = Event.parse_guid(guid)
        except ValueError:
            raise NotFoundError("Event", guid)

        event = self.db.query(Event).filter(Event.uuid == uuid_value).first()
        if not event:
            raise NotFoundError("Event", guid)
        return event

    def list(self, status: Optional[str] = None) -> List[Event]:
        """
        List all events ordered by date (earliest first).

        Args:
            status: Optional filter on the computed status

        Returns:
            List of Event instances
        """
        events = (
            self.db.query(Event)
            .order_by(Event.event_date.asc(), Event.id.asc())
            .all()
        )

        if status:
            now = self.clock()
            events = [e for e in events if compute_status(e, now).value == status]

        return events

    def list_registrations(self, student_id: str) -> List[Event]:
        """List events the student is registered for, ordered by date."""
        return (
            self.db.query(Event)
            .join(EventParticipant, EventParticipant.event_id == Event.id)
            .filter(EventParticipant.student_id == student_id)
            .order_by(Event.event_date.asc(), Event.id.asc())
            .all()
        )

    def list_participants(self, guid: str) -> List[EventParticipant]:
        """
        List an event's participants in registration order.

        Raises:
            NotFoundError: If event not found
        """
        return list(self.get_by_guid(guid).participants)

    def build_event_response(self, event: Event, now: Optional[datetime] = None) -> dict:
        """
        Build a response dictionary for an event.

        The status is computed against ``now``; the stored value is never
        shown as-is.
        """
        now = now or self.clock()
        return {
            "guid": event.guid,
            "title": event.title,
            "description": event.description,
            "location": event.location,
            "event_date": event.event_date,
            "time": event.time,
            "max_participants": event.max_participants,
            "registration_deadline": event.registration_deadline,
            "status": compute_status(event, now).value,
            "participant_count": event.participant_count,
            "spots_left": event.spots_left,
            "registration_open": is_registration_open(event, now),
            "created_at": event.created_at,
            "updated_at": event.updated_at,
        }

    def build_event_detail_response(self, event: Event, now: Optional[datetime] = None) -> dict:
        """Build an event response including the participant list."""
        response = self.build_event_response(event, now)
        response["participants"] = [p.to_dict() for p in event.participants]
        return response

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------

    def create(
        self,
        title: str,
        event_date: date,
        location: str,
        description: Optional[str] = None,
        time: Optional[str] = None,
        max_participants: Optional[int] = None,
        registration_deadline: Optional[date] = None,
        status: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Event:
        """
        Create a new event.

        Args:
            title: Event title
            event_date: Date of the event (today or later)
            location: Venue
            description: Optional description
            time: Optional display time
            max_participants: Capacity (default from settings)
            registration_deadline: Optional deadline, strictly before event_date
            status: Optional initial status; "cancelled" creates a cancelled event
            created_by: Optional admin identifier

        Returns:
            Created Event instance

        Raises:
            ValidationError: If the date is in the past, the deadline is not
                before the event date, or the capacity is out of range
        """
        now = self.clock()

        if event_date < now.date():
            raise ValidationError("Event date cannot be in the past", field="event_date")

        if max_participants is None:
            max_participants = self.settings.default_max_participants
        self._validate_capacity(max_participants, participant_count=0)
        self._validate_deadline(registration_deadline, event_date)

        event = Event(
            title=title,
            description=description,
            location=location,
            event_date=event_date,
            time=time,
            max_participants=max_participants,
            registration_deadline=registration_deadline,
            status=status or EventStatus.UPCOMING.value,
            created_by=created_by,
        )
        refresh_status(event, now)

        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        logger.info(
            f"Created event: {event.guid} - {title}",
            extra={"event_guid": event.guid, "status": event.status},
        )
        return event

    def update(self, guid: str, **updates: Any) -> Event:
        """
        Partially update an event.

        Only the fields in UPDATABLE_FIELDS may be changed. A date change
        recomputes the status unless the event is cancelled.

        Raises:
            NotFoundError: If event not found
            ValidationError: On unknown fields, a capacity below the current
                participant count, or a deadline not before the event date
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        for field in REQUIRED_FIELDS:
            if field in updates and updates[field] is None:
                raise ValidationError(f"{field} cannot be empty", field=field)

        def apply(event: Event, now: datetime) -> None:
            max_participants = updates.get("max_participants", event.max_participants)
            self._validate_capacity(max_participants, event.participant_count)

            event_date = updates.get("event_date", event.event_date)
            deadline = updates.get("registration_deadline", event.registration_deadline)
            if "registration_deadline" in updates or "event_date" in updates:
                self._validate_deadline(deadline, event_date)

            for field, value in updates.items():
                setattr(event, field, value)

            if "event_date" in updates:
                refresh_status(event, now)

        event, _ = self._write(guid, apply, action="update")
        logger.info(
            f"Updated event: {guid}",
            extra={"event_guid": guid, "fields": sorted(updates)},
        )
        return event

    def cancel(self, guid: str) -> Event:
        """
        Cancel an event. The cancelled status is sticky.

        Raises:
            NotFoundError: If event not found
        """
        def apply(event: Event, now: datetime) -> None:
            event.status = EventStatus.CANCELLED.value

        event, _ = self._write(guid, apply, action="cancel")
        logger.info(f"Cancelled event: {guid}", extra={"event_guid": guid})
        return event

    def delete(self, guid: str) -> None:
        """
        Hard delete an event and all of its participants.

        Raises:
            NotFoundError: If event not found
        """
        def apply(event: Event, now: datetime) -> int:
            count = event.participant_count
            self.db.delete(event)
            return count

        _, removed = self._write(guid, apply, action="delete", touch=False)
        logger.info(
            f"Deleted event: {guid}",
            extra={"event_guid": guid, "participants_removed": removed},
        )

    def remove_participant(self, guid: str, student_id: str) -> Event:
        """
        Remove one participant from an event.

        Capacity and status are not changed.

        Raises:
            NotFoundError: If event or participant not found
        """
        def apply(event: Event, now: datetime) -> None:
            participant = next(
                (p for p in event.participants if p.student_id == student_id),
                None,
            )
            if participant is None:
                raise NotFoundError("Participant", student_id)
            event.participants.remove(participant)

        event, _ = self._write(guid, apply, action="remove_participant")
        logger.info(
            f"Removed participant {student_id} from event {guid}",
            extra={"event_guid": guid, "student_id": student_id},
        )
        return event

    def remove_all_participants(self, guid: str) -> Event:
        """
        Remove every participant from an event.

        Raises:
            NotFoundError: If event not found
        """
        def apply(event: Event, now: datetime) -> int:
            count = event.participant_count
            event.participants.clear()
            return count

        event, removed = self._write(guid, apply, action="remove_all_participants")
        logger.info(
            f"Removed all participants from event {guid}",
            extra={"event_guid": guid, "participants_removed": removed},
        )
        return event

    # ------------------------------------------------------------------
    # Student writes
    # ------------------------------------------------------------------

    def register(self, guid: str, student: StudentIdentity) -> Tuple[Event, EventParticipant]:
        """
        Register a student for an event.

        The status is refreshed against "now" before the guard runs and is
        persisted together with the new participant in one write.

        Returns:
            Tuple of (event, new participant)

        Raises:
            NotFoundError: If event not found
            RegistrationError: EventEnded, EventCancelled, EventOngoing,
                EventFull or AlreadyRegistered
            StoreError: If conflicting writes persisted through every retry
        """
        def apply(event: Event, now: datetime) -> EventParticipant:
            return try_register(event, student)

        try:
            event, participant = self._write(guid, apply, action="register")
        except RegistrationError as e:
            logger.info(
                f"Registration rejected for {student.student_id} on {guid}: {e.kind}",
                extra={"event_guid": guid, "student_id": student.student_id, "kind": e.kind},
            )
            raise
        except IntegrityError:
            # Unique (event_id, student_id) caught a duplicate the version check missed
            logger.warning(
                f"Duplicate registration blocked by constraint: {student.student_id} on {guid}",
                extra={"event_guid": guid, "student_id": student.student_id},
            )
            raise AlreadyRegisteredError(event_guid=guid)

        logger.info(
            f"Registered {student.student_id} for event {guid}",
            extra={
                "event_guid": guid,
                "student_id": student.student_id,
                "participant_count": event.participant_count,
            },
        )
        return event, participant

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _write(
        self,
        guid: str,
        mutate: Callable[[Event, datetime], Any],
        action: str,
        touch: bool = True,
    ) -> Tuple[Optional[Event], Any]:
        """
        Run a read-check-write sequence on one event.

        Loads a fresh copy, refreshes its status, applies ``mutate`` and
        commits under the optimistic version check. A StaleDataError means
        another writer committed first: roll back and start over. Any other
        error rolls back and propagates.

        Returns:
            Tuple of (refreshed event or None when deleted, mutate result)

        Raises:
            StoreError: If every attempt lost the race
        """
        attempts = self.settings.max_write_retries

        for attempt in range(1, attempts + 1):
            event = self.get_by_guid(guid)
            now = self.clock()

            try:
                refresh_status(event, now)
                result = mutate(event, now)
                if touch:
                    event.touch()
                self.db.commit()
            except StaleDataError:
                self.db.rollback()
                logger.warning(
                    f"Concurrent write on event {guid} during {action} "
                    f"(attempt {attempt}/{attempts})",
                    extra={"event_guid": guid, "action": action, "attempt": attempt},
                )
                continue
            except Exception:
                self.db.rollback()
                raise

            if not touch:
                return None, result

            self.db.refresh(event)
            return event, result

        logger.error(
            f"Giving up on {action} for event {guid} after {attempts} conflicting writes",
            extra={"event_guid": guid, "action": action},
        )
        raise StoreError(f"Event {guid} is being modified concurrently. Please retry.")

    @staticmethod
    def _validate_capacity(max_participants: int, participant_count: int) -> None:
        if max_participants < 1 or max_participants > MAX_PARTICIPANTS_LIMIT:
            raise ValidationError(
                f"Max participants must be between 1 and {MAX_PARTICIPANTS_LIMIT}",
                field="max_participants",
            )
        if max_participants < participant_count:
            raise ValidationError(
                f"Max participants ({max_participants}) cannot be lower than the "
                f"number of registered participants ({participant_count})",
                field="max_participants",
            )

    @staticmethod
    def _validate_deadline(deadline: Optional[date], event_date: date) -> None:
        if deadline is not None and deadline >= event_date:
            raise ValidationError(
                "Registration deadline must be before event date",
                field="registration_deadline",
            )
