"""
SQLAlchemy models for the campus events backend.

This module provides the declarative base class and imports all models
so they are registered with SQLAlchemy's metadata (required for
``Base.metadata.create_all`` and Alembic autogenerate).
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()


from backend.src.models.event import Event, EventStatus
from backend.src.models.event_participant import EventParticipant

__all__ = [
    "Base",
    "Event",
    "EventStatus",
    "EventParticipant",
]
