"""
Application settings configuration for the campus events backend.

Centralized settings loaded from environment variables (and a local .env).
"""

from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        JWT_SECRET_KEY: Secret used to verify bearer tokens (>= 32 chars when set)
        JWT_ALGORITHM: Token signature algorithm (default: HS256)
        CAMPUS_EVENTS_TIMEZONE: IANA timezone whose calendar decides event days (default: UTC)
        CAMPUS_EVENTS_DEFAULT_MAX_PARTICIPANTS: Capacity used when none is given (default: 100)
        CAMPUS_EVENTS_MAX_WRITE_RETRIES: Attempts for a conflicting event write (default: 3)
        CAMPUS_EVENTS_CORS_ORIGINS: Comma-separated allowed origins for the SPA
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_secret_key: str = Field(
        default="",
        validation_alias="JWT_SECRET_KEY",
        description="Secret key for verifying JWT bearer tokens. Must be at least 32 bytes."
    )

    jwt_algorithm: str = Field(
        default="HS256",
        validation_alias="JWT_ALGORITHM",
    )

    event_timezone: str = Field(
        default="UTC",
        validation_alias="CAMPUS_EVENTS_TIMEZONE",
        description="Timezone used to compute event day boundaries"
    )

    default_max_participants: int = Field(
        default=100,
        validation_alias="CAMPUS_EVENTS_DEFAULT_MAX_PARTICIPANTS",
        ge=1,
        le=10000,
    )

    max_write_retries: int = Field(
        default=3,
        validation_alias="CAMPUS_EVENTS_MAX_WRITE_RETRIES",
        ge=1,
        le=20,
    )

    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        validation_alias="CAMPUS_EVENTS_CORS_ORIGINS",
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Validate that JWT secret key is sufficiently long."""
        if v and len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("event_timezone")
    @classmethod
    def validate_event_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def jwt_configured(self) -> bool:
        """Check if JWT verification is configured."""
        return bool(self.jwt_secret_key)

    @property
    def tz(self) -> ZoneInfo:
        """ZoneInfo for the configured event timezone."""
        return ZoneInfo(self.event_timezone)

    @property
    def cors_origins_list(self) -> List[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
