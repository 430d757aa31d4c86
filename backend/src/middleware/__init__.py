"""
Middleware components for the campus events backend.

This module provides:
- AuthContext: Dataclass representing the authenticated caller
- get_auth_context: FastAPI dependency decoding the Bearer token
- require_admin: FastAPI dependency for requiring administrator privileges
- require_student: FastAPI dependency for requiring a student identity
"""

from backend.src.middleware.auth import (
    AuthContext,
    get_auth_context,
    require_admin,
    require_student,
)

__all__ = [
    "AuthContext",
    "get_auth_context",
    "require_admin",
    "require_student",
]
