"""
Database connection and session management.

This module provides the SQLAlchemy engine and session factory for the
campus events backend. SQLite is used for local development and tests,
PostgreSQL for deployments.
"""

import os
import sqlite3
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session


# Look for .env in backend directory (parent of src)
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.environ.get(
    "CAMPUS_EVENTS_DB_URL",
    "sqlite:///./campus_events.db"
)


if DATABASE_URL.startswith("sqlite"):
    # SQLite doesn't support pool_size, max_overflow, or pool_recycle
    from sqlalchemy.pool import StaticPool
    engine = create_engine(
        DATABASE_URL,
        connect_args={'check_same_thread': False},
        poolclass=StaticPool if ":memory:" in DATABASE_URL else None,
        echo=False,
        future=True
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=10,
        pool_pre_ping=True,    # Verify connections before checkout
        pool_recycle=3600,
        echo=False,
        future=True
    )


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI routes to get a database session.

    Yields:
        Session: SQLAlchemy database session

    Usage:
        @router.get("/events")
        async def list_events(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign keys on SQLite so participant rows cascade with their event."""
    if not isinstance(dbapi_conn, sqlite3.Connection):
        return
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db():
    """
    Initialize database tables.

    Used at startup for SQLite and by tests. PostgreSQL deployments use
    the Alembic migrations instead.
    """
    from backend.src.models import Base
    Base.metadata.create_all(bind=engine)


def dispose_engine():
    """Dispose of the engine and close all connections."""
    engine.dispose()
