"""
Authentication dependencies for API routes.

Provides:
- get_auth_context: Decode the Bearer JWT into an AuthContext
- require_admin: Require an administrator token
- require_student: Require a student token and return its StudentIdentity
- create_access_token: Issue a signed token (used by tooling and tests)

Tokens are signed with JWT_SECRET_KEY (python-jose). The decoded claims are
trusted as-is; issuing tokens is the job of an external identity provider.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import jwt, JWTError

from backend.src.config.settings import get_settings
from backend.src.services.registration_guard import StudentIdentity
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

ROLE_ADMIN = "admin"
ROLE_STUDENT = "student"
ROLES = (ROLE_ADMIN, ROLE_STUDENT)

DEFAULT_TOKEN_TTL = timedelta(hours=12)

# Same shape as EventParticipant.student_id (String(20))
STUDENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9]{3,20}$")


@dataclass
class AuthContext:
    """
    Authenticated caller for a request.

    Attributes:
        subject: Token subject (admin or student account identifier)
        role: "admin" or "student"
        student_id: Student natural key (student tokens only)
        name: Display name (student tokens only)
        email: Email address (student tokens only)
    """

    subject: str
    role: str
    student_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_student(self) -> StudentIdentity:
        """Identity triple handed to the registration guard."""
        return StudentIdentity(
            student_id=self.student_id,
            name=self.name,
            email=self.email,
        )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def create_access_token(
    subject: str,
    role: str,
    student_id: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    expires_in: timedelta = DEFAULT_TOKEN_TTL,
) -> str:
    """
    Sign a token carrying the given identity claims.

    Raises:
        ValueError: If the role is unknown or JWT_SECRET_KEY is not configured
    """
    settings = get_settings()
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    if not settings.jwt_configured:
        raise ValueError("JWT_SECRET_KEY is not configured")

    now = datetime.utcnow()
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + expires_in,
    }
    if role == ROLE_STUDENT:
        payload.update({"student_id": student_id, "name": name, "email": email})

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> AuthContext:
    """
    Validate a Bearer token and build the caller context.

    Raises:
        HTTPException 401: If the token is invalid, expired or incomplete
    """
    settings = get_settings()
    if not settings.jwt_configured:
        logger.error("Token received but JWT_SECRET_KEY is not configured")
        raise _unauthorized("Authentication is not configured")

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning(f"Token validation failed: JWT error - {e}")
        raise _unauthorized("Invalid or expired token")

    role = payload.get("role")
    subject = payload.get("sub")
    if role not in ROLES or not subject:
        logger.warning("Token validation failed: missing role or subject")
        raise _unauthorized("Invalid token claims")

    context = AuthContext(subject=subject, role=role)
    if role == ROLE_STUDENT:
        context.student_id = payload.get("student_id")
        context.name = payload.get("name")
        context.email = payload.get("email")
        if not (context.student_id and context.name and context.email):
            logger.warning(f"Token validation failed: incomplete student claims for {subject}")
            raise _unauthorized("Invalid token claims")
        if not isinstance(context.student_id, str) or not STUDENT_ID_PATTERN.match(context.student_id):
            logger.warning(f"Token validation failed: malformed student_id for {subject}")
            raise _unauthorized("Invalid token claims")

    return context


async def get_auth_context(request: Request) -> AuthContext:
    """
    FastAPI dependency extracting the caller from the Authorization header.

    Raises:
        HTTPException 401: If no valid Bearer token is present
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return decode_token(auth_header[7:])

    raise _unauthorized("Authentication required")


def require_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """
    Dependency that requires administrator privileges.

    Raises:
        HTTPException 403: If the caller is not an administrator

    Example:
        @router.delete("/events/{guid}")
        async def delete_event(admin: AuthContext = Depends(require_admin)):
            ...
    """
    if not ctx.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required"
        )
    return ctx


def require_student(ctx: AuthContext = Depends(get_auth_context)) -> StudentIdentity:
    """
    Dependency that requires a student token.

    Returns:
        StudentIdentity built from the token claims

    Raises:
        HTTPException 403: If the caller is not a student
    """
    if ctx.role != ROLE_STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student account required"
        )
    return ctx.to_student()


__all__ = [
    "AuthContext",
    "create_access_token",
    "decode_token",
    "get_auth_context",
    "require_admin",
    "require_student",
]
