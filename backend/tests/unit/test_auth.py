"""
Unit tests for bearer token authentication.

Tests token issuing and decoding, role checks and failure modes.
"""

import pytest
from datetime import datetime, timedelta

from fastapi import HTTPException
from jose import jwt

from backend.src.config.settings import get_settings
from backend.src.middleware.auth import (
    AuthContext,
    create_access_token,
    decode_token,
    require_admin,
    require_student,
)
from backend.src.services.registration_guard import StudentIdentity


class TestTokens:
    """Tests for create_access_token / decode_token."""

    def test_admin_round_trip(self):
        ctx = decode_token(create_access_token(subject="admin-1", role="admin"))
        assert ctx.subject == "admin-1"
        assert ctx.is_admin is True
        assert ctx.student_id is None

    def test_student_claims(self):
        token = create_access_token(
            subject="stu-7",
            role="student",
            student_id="S007",
            name="Ravi Kumar",
            email="ravi@college.edu",
        )
        ctx = decode_token(token)

        assert ctx.role == "student"
        assert ctx.to_student() == StudentIdentity("S007", "Ravi Kumar", "ravi@college.edu")

    def test_unknown_role_cannot_be_issued(self):
        with pytest.raises(ValueError):
            create_access_token(subject="x", role="superuser")

    def test_expired_token(self):
        token = create_access_token(
            subject="admin-1", role="admin", expires_in=timedelta(seconds=-5)
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "admin-1", "role": "admin"},
            "another-secret-key-that-is-long-enough-123",
            algorithm="HS256",
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    def test_student_token_missing_claims(self):
        settings = get_settings()
        token = jwt.encode(
            {
                "sub": "stu-1",
                "role": "student",
                "student_id": "S001",
                "exp": datetime.utcnow() + timedelta(minutes=5),
            },
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize("student_id", [
        "S1",
        "S" * 21,
        "S-001",
        "S 001",
    ])
    def test_student_token_malformed_student_id(self, student_id):
        token = create_access_token(
            subject="stu-1",
            role="student",
            student_id=student_id,
            name="Asha Rao",
            email="asha@college.edu",
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)
        assert exc_info.value.status_code == 401

    def test_student_token_longest_student_id(self):
        token = create_access_token(
            subject="stu-1",
            role="student",
            student_id="A1" * 10,
            name="Asha Rao",
            email="asha@college.edu",
        )
        assert decode_token(token).student_id == "A1" * 10

    def test_missing_role(self):
        settings = get_settings()
        token = jwt.encode({"sub": "someone"}, settings.jwt_secret_key, algorithm="HS256")
        with pytest.raises(HTTPException):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not.a.jwt")
        assert exc_info.value.status_code == 401


class TestRoleDependencies:
    """Tests for require_admin / require_student."""

    def test_require_admin_accepts_admin(self):
        ctx = AuthContext(subject="admin-1", role="admin")
        assert require_admin(ctx) is ctx

    def test_require_admin_rejects_student(self):
        ctx = AuthContext(subject="stu-1", role="student", student_id="S001",
                          name="A", email="a@x.edu")
        with pytest.raises(HTTPException) as exc_info:
            require_admin(ctx)
        assert exc_info.value.status_code == 403

    def test_require_student_returns_identity(self):
        ctx = AuthContext(subject="stu-1", role="student", student_id="S001",
                          name="A", email="a@x.edu")
        assert require_student(ctx) == StudentIdentity("S001", "A", "a@x.edu")

    def test_require_student_rejects_admin(self):
        with pytest.raises(HTTPException) as exc_info:
            require_student(AuthContext(subject="admin-1", role="admin"))
        assert exc_info.value.status_code == 403
