"""
FastAPI application entry point for the campus events backend.

This module initializes the FastAPI application with:
- Database table creation at startup
- CORS middleware for the single-page frontend
- Exception handlers for consistent error responses
- Logging configuration

Environment Variables:
    CAMPUS_EVENTS_DB_URL: Database connection URL (default: local SQLite file)
    JWT_SECRET_KEY: Secret used to verify bearer tokens
    CAMPUS_EVENTS_ENV: Environment (production/development, default: development)
    CAMPUS_EVENTS_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
"""

from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.src.config.settings import get_settings
from backend.src.db.database import init_db, dispose_engine
from backend.src.services.exceptions import RegistrationError
from backend.src.utils.logging_config import init_logging, get_logger


APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Warn about missing auth configuration, create tables
    - Shutdown: Dispose of the connection pool

    Args:
        app: FastAPI application instance

    Yields:
        Control to the application
    """
    # Startup
    logger = get_logger("api")
    logger.info("Starting campus events backend application")

    settings = get_settings()
    if not settings.jwt_configured:
        logger.warning(
            "JWT_SECRET_KEY is not set; all authenticated endpoints will answer 401"
        )

    init_db()
    logger.info(
        "Campus events backend started successfully",
        extra={"timezone": settings.event_timezone},
    )

    yield

    # Shutdown
    logger.info("Shutting down campus events backend application")
    dispose_engine()


# Initialize logging before creating app
init_logging()

# Create FastAPI application
app = FastAPI(
    title="Campus Events API",
    description="Backend API for campus event management. "
                "Administrators publish events; students browse them and register "
                "until an event fills up, starts, ends or is cancelled.",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Configure CORS middleware for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers


@app.exception_handler(RegistrationError)
async def registration_exception_handler(
    request: Request, exc: RegistrationError
) -> JSONResponse:
    """
    Handle registration guard rejections.

    Returns:
        400 response with the rejection kind and message
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": exc.kind,
            "message": exc.message,
        }
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Args:
        request: HTTP request
        exc: Pydantic ValidationError

    Returns:
        JSON response with validation error details
    """
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "message": "Request validation failed",
            "details": exc.errors(include_url=False, include_context=False),
        }
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Args:
        request: HTTP request
        exc: SQLAlchemy exception

    Returns:
        JSON response with database error message
    """
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Database Error",
            "message": "An error occurred while accessing the database. "
                      "Please try again later.",
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    Args:
        request: HTTP request
        exc: Unhandled exception

    Returns:
        JSON response with generic error message
    """
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later.",
        }
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "campus-events-backend",
        "version": APP_VERSION,
    }


# API routers
from backend.src.api import analytics, events, students

app.include_router(events.router, prefix="/api")
app.include_router(students.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")


# Root endpoint


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint with API information.

    Returns:
        API metadata and documentation links
    """
    return {
        "message": "Campus Events API",
        "version": APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }
