"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- AliasRecord: Maps a short code to its target URL, owner and expiry
- ApiKey: Hashed, revocable credentials for third-party API callers

Design Decisions:
- UNIQUE index on short_code: the authoritative arbiter between concurrent
  allocations of the same code
- Index on owner_id: listing and quota counting are scoped per owner
- Index on expires_at: sweeps delete by expiry range
- All timestamps are stored and read back as aware UTC (UTCDateTime)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field, Column


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the store."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always hands back aware UTC values.

    SQLite has no timezone support and returns naive datetimes; values are
    stored in UTC and tagged as UTC again on the way out.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return ensure_utc(value).astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


class AliasRecord(SQLModel, table=True):
    """
    A short code and the URL it resolves to.

    Fields:
    - id: Auto-incrementing primary key (used by delete-by-id)
    - short_code: Unique code, generated or custom (1-20 characters)
    - target_url: The absolute URL the code redirects to
    - owner_id: Opaque scoping key (anonymous client id or api_<key id>)
    - created_at: Creation timestamp
    - expires_at: Expiry timestamp, NULL when retention is disabled
    """
    __tablename__ = "alias_records"

    id: Optional[int] = Field(default=None, primary_key=True)
    short_code: str = Field(
        sa_column=Column(String(20), nullable=False, unique=True, index=True),
        max_length=20
    )
    target_url: str = Field(sa_column=Column(Text, nullable=False))
    owner_id: str = Field(
        sa_column=Column(String(64), nullable=False, index=True),
        max_length=64
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime(), nullable=False, index=True)
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(UTCDateTime(), nullable=True, index=True)
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """A record is live until expires_at; records without one never expire."""
        if self.expires_at is None:
            return False
        now = now or utc_now()
        return now >= ensure_utc(self.expires_at)


class ApiKey(SQLModel, table=True):
    """
    Credential for third-party callers of POST /shorten.

    Only the SHA-256 digest of the key is stored. Records created with a key
    are owned by 'api_<id>', so each key gets its own listing and quota.
    """
    __tablename__ = "api_keys"

    id: Optional[int] = Field(default=None, primary_key=True)
    key_hash: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True),
        max_length=64
    )
    label: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime(), nullable=False)
    )
    revoked_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(UTCDateTime(), nullable=True)
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None
