"""
Redirect Service

This service resolves a short code back to its target URL.
Separated from allocation so the read path stays small and lock-free.

Expired aliases are indistinguishable from absent ones: both raise
AliasNotFoundError. An expired record found during resolution is deleted
on the spot, best-effort.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import AliasNotFoundError, DatabaseError
from shortener.db.models import AliasRecord, ensure_utc, utc_now
from shortener.services.expiration_service import ExpirationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """Where a live short code points, and until when."""
    target_url: str
    expires_at: Optional[datetime]


class RedirectService:
    """
    Service for resolving short codes.

    Safe to call concurrently and repeatedly: reads are idempotent, and the
    delete of an expired record tolerates another resolver having removed
    it first.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the redirect service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session
        self.expiration_service = ExpirationService(session)

    async def resolve(self, short_code: str) -> ResolvedTarget:
        """
        Resolve a short code to its target.

        Args:
            short_code: The short code to look up

        Returns:
            ResolvedTarget with the target URL and expiry

        Raises:
            AliasNotFoundError: If the code is absent or expired
            DatabaseError: If the store cannot be read
        """
        statement = select(AliasRecord).where(AliasRecord.short_code == short_code)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up '{short_code}'", original_error=e)

        record = result.scalar_one_or_none()
        if record is None:
            raise AliasNotFoundError(short_code)

        now = utc_now()
        if record.is_expired(now):
            logger.info(f"Short code '{short_code}' expired, discarding")
            await self.expiration_service.discard_expired(record.id, now=now)
            raise AliasNotFoundError(short_code)

        return ResolvedTarget(
            target_url=record.target_url,
            expires_at=ensure_utc(record.expires_at)
        )
