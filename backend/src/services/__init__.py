"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ValidationError,
    StoreError,
    RegistrationError,
    EventEndedError,
    EventCancelledError,
    EventOngoingError,
    EventFullError,
    AlreadyRegisteredError,
)
from backend.src.services.registration_guard import StudentIdentity
from backend.src.services.event_service import EventService
from backend.src.services.analytics_service import AnalyticsService

__all__ = [
    "EventService",
    "AnalyticsService",
    "StudentIdentity",
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "StoreError",
    "RegistrationError",
    "EventEndedError",
    "EventCancelledError",
    "EventOngoingError",
    "EventFullError",
    "AlreadyRegisteredError",
]
