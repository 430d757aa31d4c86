"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class StoreError(ServiceError):
    """Raised when an event could not be persisted (e.g. write conflicts persisted)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RegistrationError(ServiceError):
    """
    Base class for registration rejections.

    Each subclass carries a stable ``kind`` string that is returned to the
    client next to the human-readable message.
    """

    kind = "RegistrationRejected"
    default_message = "Registration rejected."

    def __init__(self, event_guid: Optional[str] = None, message: Optional[str] = None):
        self.event_guid = event_guid
        self.message = message or self.default_message
        super().__init__(self.message)


class EventEndedError(RegistrationError):
    """Raised when registering for a completed event."""

    kind = "EventEnded"
    default_message = "Cannot register. This event has already ended."


class EventCancelledError(RegistrationError):
    """Raised when registering for a cancelled event."""

    kind = "EventCancelled"
    default_message = "Cannot register. This event has been cancelled."


class EventOngoingError(RegistrationError):
    """Raised when registering for an event that is taking place today."""

    kind = "EventOngoing"
    default_message = "Cannot register. This event is currently ongoing."


class EventFullError(RegistrationError):
    """Raised when the event has no spots left."""

    kind = "EventFull"
    default_message = "Event is full. Registration closed."


class AlreadyRegisteredError(RegistrationError):
    """Raised when the student is already in the participant list."""

    kind = "AlreadyRegistered"
    default_message = "You are already registered for this event."
