"""
Analytics service for the admin dashboard.

Read-only aggregations over events and their participants. Statuses are
always computed against "now"; nothing is written back.
"""

import calendar
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from backend.src.models import Event, EventParticipant
from backend.src.models.event import EventStatus
from backend.src.services.event_status import (
    compute_status,
    current_time,
    is_registration_open,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


def _rate(count: int, capacity: int) -> float:
    """Percentage of capacity used, rounded to one decimal."""
    if capacity <= 0:
        return 0.0
    return round(count / capacity * 100, 1)


class AnalyticsService:
    """
    Aggregate statistics for administrators.

    Usage:
        >>> service = AnalyticsService(db_session)
        >>> stats = service.get_dashboard_stats()
        >>> stats["events_by_status"]["upcoming"]
        3
    """

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or current_time

    def get_dashboard_stats(self) -> Dict:
        """
        Totals and per-status counts.

        Returns:
            Dictionary with total_events, total_registrations,
            active_students and events_by_status
        """
        now = self.clock()
        events = self.db.query(Event).all()

        by_status = {status.value: 0 for status in EventStatus}
        for event in events:
            by_status[compute_status(event, now).value] += 1

        total_registrations = self.db.query(EventParticipant).count()
        active_students = (
            self.db.query(EventParticipant.student_id).distinct().count()
        )

        logger.debug(
            "Computed dashboard stats",
            extra={"total_events": len(events), "total_registrations": total_registrations},
        )

        return {
            "total_events": len(events),
            "total_registrations": total_registrations,
            "active_students": active_students,
            "events_by_status": by_status,
        }

    def get_popular_events(self, limit: int = 5) -> List[Dict]:
        """Events with the most participants first."""
        now = self.clock()
        events = self.db.query(Event).order_by(Event.event_date.asc(), Event.id.asc()).all()
        events.sort(key=lambda e: e.participant_count, reverse=True)

        return [
            {
                "guid": event.guid,
                "title": event.title,
                "event_date": event.event_date,
                "location": event.location,
                "status": compute_status(event, now).value,
                "max_participants": event.max_participants,
                "participant_count": event.participant_count,
                "registration_rate": _rate(event.participant_count, event.max_participants),
            }
            for event in events[:limit]
        ]

    def get_upcoming_events_stats(self) -> List[Dict]:
        """Upcoming events, soonest first, with their registration state."""
        now = self.clock()
        events = self.db.query(Event).order_by(Event.event_date.asc(), Event.id.asc()).all()

        stats = []
        for event in events:
            if compute_status(event, now) is not EventStatus.UPCOMING:
                continue
            stats.append({
                "guid": event.guid,
                "title": event.title,
                "event_date": event.event_date,
                "time": event.time,
                "location": event.location,
                "registration_deadline": event.registration_deadline,
                "registration_open": is_registration_open(event, now),
                "participant_count": event.participant_count,
                "max_participants": event.max_participants,
                "spots_left": event.spots_left,
                "fill_rate": _rate(event.participant_count, event.max_participants),
                "status": EventStatus.UPCOMING.value,
            })
        return stats

    def get_recent_registrations(self, limit: int = 10) -> List[Dict]:
        """Most recent registrations across all events, newest first."""
        rows = (
            self.db.query(EventParticipant, Event)
            .join(Event, EventParticipant.event_id == Event.id)
            .order_by(EventParticipant.registered_at.desc(), EventParticipant.id.desc())
            .limit(limit)
            .all()
        )

        return [
            {
                "event_guid": event.guid,
                "event_title": event.title,
                "event_date": event.event_date,
                "student_id": participant.student_id,
                "student_name": participant.name,
                "student_email": participant.email,
                "registered_at": participant.registered_at,
            }
            for participant, event in rows
        ]

    def get_student_engagement(self) -> Dict:
        """
        Registration activity of students.

        Only students with at least one registration are known here; the
        full student roster lives with the identity provider.

        Returns:
            Dictionary with active_students, total_registrations and
            average_registrations_per_student
        """
        total_registrations = self.db.query(EventParticipant).count()
        active_students = (
            self.db.query(EventParticipant.student_id).distinct().count()
        )
        average = (
            round(total_registrations / active_students, 1) if active_students else 0.0
        )

        return {
            "active_students": active_students,
            "total_registrations": total_registrations,
            "average_registrations_per_student": average,
        }

    def get_monthly_stats(self, year: Optional[int] = None) -> Dict:
        """
        Events created and registrations made per calendar month.

        Args:
            year: Calendar year (default: current year)

        Returns:
            Dictionary with year and twelve monthly_data buckets, January first
        """
        year = year or self.clock().year
        start = datetime(year, 1, 1)
        end = datetime(year + 1, 1, 1)

        events = [0] * 12
        for (created_at,) in (
            self.db.query(Event.created_at)
            .filter(Event.created_at >= start, Event.created_at < end)
            .all()
        ):
            events[created_at.month - 1] += 1

        registrations = [0] * 12
        for (registered_at,) in (
            self.db.query(EventParticipant.registered_at)
            .filter(EventParticipant.registered_at >= start, EventParticipant.registered_at < end)
            .all()
        ):
            registrations[registered_at.month - 1] += 1

        return {
            "year": year,
            "monthly_data": [
                {
                    "month": calendar.month_name[n],
                    "month_number": n,
                    "events": events[n - 1],
                    "registrations": registrations[n - 1],
                }
                for n in range(1, 13)
            ],
        }
