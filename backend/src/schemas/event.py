"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation and partial update requests
- Event API responses (list and detail)
- Registration and participant responses

Design:
- Status in responses is always the computed status at request time
- GUIDs are exposed via guid property, never internal IDs
- Date-in-the-past checks need the event clock and live in EventService
"""

import enum
import re
from datetime import datetime, date
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, field_serializer, model_validator


# Accepts "10:00", "9:30 AM", "09:30pm"
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]\s?(AM|PM|am|pm)?$")


# ============================================================================
# Enums
# ============================================================================


class EventStatus(str, enum.Enum):
    """Event status enumeration."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ============================================================================
# Shared validators
# ============================================================================


def _clean_text(v: Optional[str], field: str, min_length: int) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < min_length:
        raise ValueError(f"{field} must be at least {min_length} characters")
    return v


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not TIME_PATTERN.match(v):
        raise ValueError("Time must be in HH:MM or HH:MM AM/PM format")
    return v


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating a new event.

    Required:
        title: Event title (3-200 characters)
        event_date: Date of the event (today or later)
        location: Venue (3-200 characters)

    Optional:
        description: Up to 1000 characters
        time: Display time (HH:MM, optionally AM/PM)
        max_participants: Capacity, 1-10000 (default: 100)
        registration_deadline: Must be before event_date
        status: Initial status; only "cancelled" survives recomputation
    """

    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_date: date = Field(..., description="Date of the event")
    time: Optional[str] = Field(default=None, max_length=20)
    location: str = Field(..., max_length=200)
    max_participants: Optional[int] = Field(default=None, ge=1, le=10000)
    registration_deadline: Optional[date] = Field(default=None)
    status: Optional[EventStatus] = Field(default=None)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Trim and enforce minimum length."""
        return _clean_text(v, "Title", 3)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        """Trim and enforce minimum length."""
        return _clean_text(v, "Location", 3)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)

    @model_validator(mode="after")
    def validate_deadline_before_date(self) -> "EventCreate":
        """Registration deadline must fall before the event date."""
        if self.registration_deadline and self.registration_deadline >= self.event_date:
            raise ValueError("Registration deadline must be before event date")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Annual Tech Fest",
                "description": "Talks, demos and a hackathon.",
                "event_date": "2026-11-20",
                "time": "10:00 AM",
                "location": "Main Auditorium",
                "max_participants": 150,
                "registration_deadline": "2026-11-15",
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for updating an existing event.

    All fields are optional - only provided fields will be updated.
    Cross-field checks against stored values (capacity vs participant
    count, deadline vs date) are done by EventService.
    """

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_date: Optional[date] = Field(default=None)
    time: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=200)
    max_participants: Optional[int] = Field(default=None, ge=1, le=10000)
    registration_deadline: Optional[date] = Field(default=None)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v, "Title", 3)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v, "Location", 3)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "location": "Open Air Theatre",
                "max_participants": 200,
            }
        }
    }


# ============================================================================
# Response Schemas
# ============================================================================


class ParticipantResponse(BaseModel):
    """Participant snapshot as shown to administrators."""

    student_id: str
    name: str
    email: str
    registered_at: datetime

    @field_serializer("registered_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {"from_attributes": True}


class EventResponse(BaseModel):
    """
    Schema for event API responses (list view).

    Includes core event fields and computed registration state.
    Use EventDetailResponse for the participant list.
    """

    guid: str = Field(..., description="Event GUID (evt_xxx)")

    title: str
    description: Optional[str]
    location: str
    event_date: date
    time: Optional[str]

    max_participants: int
    registration_deadline: Optional[date]

    # Computed at request time
    status: EventStatus
    participant_count: int
    spots_left: int
    registration_open: bool

    # Timestamps
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "guid": "evt_01hgw2bbg00000000000000001",
                "title": "Annual Tech Fest",
                "description": "Talks, demos and a hackathon.",
                "location": "Main Auditorium",
                "event_date": "2026-11-20",
                "time": "10:00 AM",
                "max_participants": 150,
                "registration_deadline": "2026-11-15",
                "status": "upcoming",
                "participant_count": 42,
                "spots_left": 108,
                "registration_open": True,
                "created_at": "2026-10-01T09:00:00Z",
                "updated_at": "2026-10-12T14:30:00Z",
            }
        },
    }


class EventDetailResponse(EventResponse):
    """Event response including the participant list (admin view)."""

    participants: List[ParticipantResponse] = Field(default_factory=list)


class EventListResponse(BaseModel):
    """List of events with a count."""

    count: int
    events: List[EventResponse]


class RegistrationResponse(BaseModel):
    """Response for a successful registration."""

    message: str = "Successfully registered for event"
    event: EventResponse
    participant: ParticipantResponse


class MessageResponse(BaseModel):
    """Plain message response for deletions and removals."""

    message: str


class RegistrationErrorResponse(BaseModel):
    """Body returned when the registration guard rejects a request."""

    error: str = Field(..., description="Rejection kind, e.g. EventFull")
    message: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "EventFull",
                "message": "Event is full. Registration closed.",
            }
        }
    }
