"""
Pydantic schemas for admin analytics responses.
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_serializer

from backend.src.schemas.event import EventStatus


class DashboardStatsResponse(BaseModel):
    """Totals and per-status counts for the admin dashboard."""

    total_events: int
    total_registrations: int
    active_students: int = Field(..., description="Distinct students with at least one registration")
    events_by_status: Dict[EventStatus, int]


class PopularEvent(BaseModel):
    """Event ranked by number of participants."""

    guid: str
    title: str
    event_date: date
    location: str
    status: EventStatus
    max_participants: int
    participant_count: int
    registration_rate: float = Field(..., description="Percent of capacity filled")


class PopularEventsResponse(BaseModel):
    count: int
    events: List[PopularEvent]


class UpcomingEventStats(BaseModel):
    """Registration state of an upcoming event."""

    guid: str
    title: str
    event_date: date
    time: Optional[str]
    location: str
    registration_deadline: Optional[date]
    registration_open: bool
    participant_count: int
    max_participants: int
    spots_left: int
    fill_rate: float = Field(..., description="Percent of capacity filled")
    status: EventStatus


class UpcomingEventsResponse(BaseModel):
    count: int
    events: List[UpcomingEventStats]


class RecentRegistration(BaseModel):
    """One registration with its event."""

    event_guid: str
    event_title: str
    event_date: date
    student_id: str
    student_name: str
    student_email: str
    registered_at: datetime

    @field_serializer("registered_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None


class RecentRegistrationsResponse(BaseModel):
    count: int
    registrations: List[RecentRegistration]


class StudentEngagementResponse(BaseModel):
    """Registration activity of students who registered at least once."""

    active_students: int = Field(..., description="Distinct students with at least one registration")
    total_registrations: int
    average_registrations_per_student: float


class MonthlyStat(BaseModel):
    month: str = Field(..., description="Month name (January..December)")
    month_number: int = Field(..., ge=1, le=12)
    events: int = Field(..., description="Events created in the month")
    registrations: int = Field(..., description="Registrations made in the month")


class MonthlyStatsResponse(BaseModel):
    """Per-month activity for one calendar year."""

    year: int
    monthly_data: List[MonthlyStat]

    model_config = {
        "json_schema_extra": {
            "example": {
                "year": 2026,
                "monthly_data": [
                    {"month": "January", "month_number": 1, "events": 3, "registrations": 41},
                ],
            }
        }
    }
