"""
Owner Links Service

First-party management of an owner's aliases: listing, quota view and
delete-by-id. The owner id is an opaque scoping key chosen by the client;
whoever presents it can list and delete its aliases.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import AliasNotFoundError, DatabaseError
from shortener.core.setting import settings
from shortener.db.models import AliasRecord, utc_now
from shortener.services.code_generator import ALPHABET
from shortener.services.expiration_service import ExpirationService
from shortener.services.policy import AliasPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaView:
    """How much of an owner's quota is in use."""
    count: int
    limit: int
    has_custom_code: bool

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)


def live_clause(now: datetime):
    """SQL condition matching aliases that have not expired at `now`."""
    return or_(AliasRecord.expires_at.is_(None), AliasRecord.expires_at > now)


class OwnerLinksService:
    """
    Reads and deletes the aliases of a single owner.

    Expired aliases are never returned. In eager mode they are also
    deleted before the owner's aliases are read.
    """

    def __init__(self, session: AsyncSession, policy: Optional[AliasPolicy] = None):
        self.session = session
        self.policy = policy or AliasPolicy.from_settings(settings)
        self.expiration_service = ExpirationService(session)

    async def list_links(self, owner_id: str) -> list[AliasRecord]:
        """
        List an owner's live aliases, newest first, capped at the quota limit.

        Args:
            owner_id: The owner to list

        Returns:
            List of AliasRecord objects

        Raises:
            DatabaseError: If the store cannot be read
        """
        now = utc_now()
        if self.policy.eager_expiration:
            await self.expiration_service.sweep_owner(owner_id, now=now)

        statement = (
            select(AliasRecord)
            .where(AliasRecord.owner_id == owner_id, live_clause(now))
            .order_by(AliasRecord.created_at.desc(), AliasRecord.id.desc())
            .limit(self.policy.max_links_per_owner)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list aliases of owner {owner_id}", original_error=e)

        return list(result.scalars().all())

    async def count_live_links(self, owner_id: str, now: Optional[datetime] = None) -> int:
        """
        Count an owner's aliases that have not expired.

        Raises:
            DatabaseError: If the store cannot be read
        """
        now = now or utc_now()
        statement = (
            select(func.count(AliasRecord.id))
            .where(AliasRecord.owner_id == owner_id, live_clause(now))
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count aliases of owner {owner_id}", original_error=e)

        return result.scalar() or 0

    def is_custom_code(self, short_code: str) -> bool:
        """
        Whether a code could not have been produced by the generator.

        With the default fixed length of 6 this is simply "length != 6".
        """
        if not self.policy.min_code_length <= len(short_code) <= self.policy.max_code_length:
            return True
        return any(ch not in ALPHABET for ch in short_code)

    def quota_for(self, links: list[AliasRecord]) -> QuotaView:
        """Quota view derived from an already fetched listing."""
        return QuotaView(
            count=len(links),
            limit=self.policy.max_links_per_owner,
            has_custom_code=any(self.is_custom_code(link.short_code) for link in links),
        )

    async def quota(self, owner_id: str) -> QuotaView:
        links = await self.list_links(owner_id)
        return self.quota_for(links)

    async def delete_link(self, owner_id: str, link_id: int) -> None:
        """
        Delete one of the owner's aliases by id.

        Args:
            owner_id: The owner the alias must belong to
            link_id: Primary key of the alias

        Raises:
            AliasNotFoundError: If no alias with this id belongs to the owner
            DatabaseError: If the delete fails
        """
        statement = delete(AliasRecord).where(
            AliasRecord.id == link_id,
            AliasRecord.owner_id == owner_id
        ).execution_options(synchronize_session=False)
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to delete alias {link_id}", original_error=e)

        if result.rowcount == 0:
            raise AliasNotFoundError(str(link_id))

        logger.info(f"Alias {link_id} deleted")
