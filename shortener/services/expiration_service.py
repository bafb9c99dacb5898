"""
Expiration Service

Deletes aliases whose expires_at has passed.

Used three ways:
- lazily, by resolution, for the single record it just found expired
- eagerly, before listing or counting an owner's aliases
- periodically, by the background sweeper, across all owners

Every delete is guarded by "expires_at <= now", so a sweep racing with a
resolution (or with a fresh allocation reusing the code) can only remove
rows that are already dead.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import DatabaseError
from shortener.db.models import AliasRecord, utc_now

logger = logging.getLogger(__name__)


class ExpirationService:
    """Removes expired aliases from the store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _expired_clause(self, now: datetime):
        return (
            AliasRecord.expires_at.is_not(None)
            & (AliasRecord.expires_at <= now)
        )

    async def discard_expired(self, record_id: int, now: Optional[datetime] = None) -> bool:
        """
        Best-effort delete of one expired record.

        A failure is logged and swallowed: the caller already treats the
        record as gone, and a later sweep will retry the delete.

        Args:
            record_id: Primary key of the expired record
            now: Reference time (defaults to the current UTC time)

        Returns:
            True if a row was deleted, False otherwise
        """
        now = now or utc_now()
        # Matched in SQL only; instances already loaded in the session are left as they are
        statement = delete(AliasRecord).where(
            AliasRecord.id == record_id,
            self._expired_clause(now)
        ).execution_options(synchronize_session=False)
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Failed to delete expired alias {record_id}: {e}")
            return False

        return result.rowcount > 0

    async def sweep_owner(self, owner_id: str, now: Optional[datetime] = None) -> int:
        """
        Delete all expired aliases of one owner.

        Args:
            owner_id: The owner whose aliases are swept
            now: Reference time (defaults to the current UTC time)

        Returns:
            Number of deleted aliases

        Raises:
            DatabaseError: If the delete fails
        """
        now = now or utc_now()
        statement = delete(AliasRecord).where(
            AliasRecord.owner_id == owner_id,
            self._expired_clause(now)
        ).execution_options(synchronize_session=False)
        deleted = await self._run_sweep(statement)
        if deleted:
            logger.debug(f"Swept {deleted} expired aliases of one owner")
        return deleted

    async def sweep_all(self, now: Optional[datetime] = None) -> int:
        """
        Delete every expired alias in the store.

        Returns:
            Number of deleted aliases

        Raises:
            DatabaseError: If the delete fails
        """
        now = now or utc_now()
        statement = (
            delete(AliasRecord)
            .where(self._expired_clause(now))
            .execution_options(synchronize_session=False)
        )
        deleted = await self._run_sweep(statement)
        logger.info(f"Expiration sweep removed {deleted} aliases")
        return deleted

    async def _run_sweep(self, statement) -> int:
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError("Failed to delete expired aliases", original_error=e)

        return result.rowcount
