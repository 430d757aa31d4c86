"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.event import (
    EventStatus,
    EventCreate,
    EventUpdate,
    ParticipantResponse,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
    RegistrationResponse,
    RegistrationErrorResponse,
    MessageResponse,
)
from backend.src.schemas.analytics import (
    DashboardStatsResponse,
    PopularEvent,
    PopularEventsResponse,
    UpcomingEventStats,
    UpcomingEventsResponse,
    RecentRegistration,
    RecentRegistrationsResponse,
    StudentEngagementResponse,
    MonthlyStat,
    MonthlyStatsResponse,
)

__all__ = [
    "EventStatus",
    "EventCreate",
    "EventUpdate",
    "ParticipantResponse",
    "EventResponse",
    "EventDetailResponse",
    "EventListResponse",
    "RegistrationResponse",
    "RegistrationErrorResponse",
    "MessageResponse",
    "DashboardStatsResponse",
    "PopularEvent",
    "PopularEventsResponse",
    "UpcomingEventStats",
    "UpcomingEventsResponse",
    "RecentRegistration",
    "RecentRegistrationsResponse",
    "StudentEngagementResponse",
    "MonthlyStat",
    "MonthlyStatsResponse",
]
