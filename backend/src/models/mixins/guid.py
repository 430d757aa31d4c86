"""
GUID mixin for SQLAlchemy models.

Provides UUID-based Global Unique Identifiers for user-facing entities.
Uses UUIDv7 (time-ordered) with Crockford's Base32 encoding for URL-safe,
opaque identifiers.

GUID Format: {prefix}_{base32_uuid}
Example:
    - evt_01hgw2bbg00000000000000000 (Event)
"""

import re
import uuid as uuid_module
from typing import ClassVar

import base32_crockford
from sqlalchemy import Column, TypeDecorator, LargeBinary
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7


# 26 Crockford Base32 characters (excludes I, L, O, U)
_ENCODED_PATTERN = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$", re.IGNORECASE)


class UUIDType(TypeDecorator):
    """
    Platform-independent UUID type.

    Uses PostgreSQL's native UUID type when available,
    otherwise stores as 16-byte LargeBinary for SQLite.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == 'postgresql':
            return value if isinstance(value, uuid_module.UUID) else uuid_module.UUID(bytes=value)
        if isinstance(value, uuid_module.UUID):
            return value.bytes
        if isinstance(value, bytes):
            return value
        return uuid_module.UUID(str(value)).bytes

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        if isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Mixin providing GUID support for entities.

    Adds:
    - uuid: UUIDv7 column, generated on insert
    - guid: Property returning the prefixed Base32 string
    - parse_guid: Class method decoding a GUID back to its UUID

    Usage:
        class Event(Base, GuidMixin):
            GUID_PREFIX = "evt"
    """

    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid(self) -> str:
        """Full GUID with prefix, or None before the row is flushed."""
        if self.uuid is None:
            return None

        uuid_bytes = self.uuid if isinstance(self.uuid, bytes) else self.uuid.bytes
        encoded = base32_crockford.encode(int.from_bytes(uuid_bytes, "big")).zfill(26)
        return f"{self.GUID_PREFIX}_{encoded.lower()}"

    @classmethod
    def parse_guid(cls, guid: str) -> uuid_module.UUID:
        """
        Parse a GUID string to a UUID object.

        Raises:
            ValueError: If the GUID is malformed or carries another entity's prefix
        """
        if not guid:
            raise ValueError("GUID cannot be empty")

        expected_prefix = f"{cls.GUID_PREFIX}_"
        if not guid.lower().startswith(expected_prefix):
            raise ValueError(
                f"Invalid prefix for {cls.__name__}. "
                f"Expected '{cls.GUID_PREFIX}', got '{guid.split('_')[0]}'"
            )

        encoded_part = guid[len(expected_prefix):]
        if not _ENCODED_PATTERN.match(encoded_part):
            raise ValueError(f"Invalid GUID encoding: {guid}")

        try:
            uuid_int = base32_crockford.decode(encoded_part.upper())
            return uuid_module.UUID(bytes=uuid_int.to_bytes(16, "big"))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid GUID encoding: {e}")
