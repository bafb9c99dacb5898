"""
Allocation Service

This service handles the core business logic for creating aliases:
- Validating the target URL
- Choosing the code: a requested custom code wins, otherwise a random one
- Enforcing the per-owner quota
- Stamping the expiry
- Inserting atomically against the UNIQUE constraint on short_code

Design Decisions:
- The availability check for a custom code is only a fast path for a
  friendly error. Two requests can both pass it; the insert is what decides,
  and the loser gets CodeTakenError.
- Custom codes are never retried: the client asked for that exact code.
- Generated codes are regenerated on collision, up to
  policy.generation_attempts inserts.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import (
    CodeTakenError,
    DatabaseError,
    InvalidURLError,
    QuotaExceededError,
    ShortenerException,
)
from shortener.core.setting import settings
from shortener.core.validators import is_valid_url, validate_custom_code
from shortener.db.models import AliasRecord, utc_now
from shortener.services.code_generator import generate_short_code
from shortener.services.expiration_service import ExpirationService
from shortener.services.owner_links_service import OwnerLinksService
from shortener.services.policy import AliasPolicy

logger = logging.getLogger(__name__)


class AllocationService:
    """
    Creates aliases.

    Holds no locks and no shared state: all coordination between concurrent
    requests happens through the store's UNIQUE constraint.
    """

    def __init__(self, session: AsyncSession, policy: Optional[AliasPolicy] = None):
        """
        Initialize the allocation service.

        Args:
            session: Database session
            policy: Allocation rules (defaults to the configured settings)
        """
        self.session = session
        self.policy = policy or AliasPolicy.from_settings(settings)
        self.expiration_service = ExpirationService(session)
        self.owner_links = OwnerLinksService(session, policy=self.policy)

    async def get_alias(self, short_code: str) -> Optional[AliasRecord]:
        """Fetch the stored record for a code, expired or not."""
        statement = select(AliasRecord).where(AliasRecord.short_code == short_code)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def allocate(
        self,
        target_url: str,
        requested_code: Optional[str],
        owner_id: str
    ) -> AliasRecord:
        """
        Create an alias for target_url owned by owner_id.

        Args:
            target_url: Absolute http(s) URL to shorten
            requested_code: Preferred custom code, or None/blank for a random one
            owner_id: Opaque scoping key of the caller

        Returns:
            The persisted AliasRecord

        Raises:
            InvalidURLError: If target_url is not a well-formed absolute URL
            InvalidCodeError: If the custom code has a bad alphabet or length
            CodeTakenError: If the code belongs to a live alias
            QuotaExceededError: If the owner already holds the maximum
            DatabaseError: If the store fails
        """
        if not is_valid_url(target_url):
            raise InvalidURLError(
                target_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid host"
            )

        custom_code = (requested_code or "").strip() or None

        try:
            if custom_code:
                validate_custom_code(
                    custom_code,
                    min_length=self.policy.custom_min_length,
                    max_length=self.policy.custom_max_length,
                    allow_separators=self.policy.allow_separators
                )
                await self._check_code_available(custom_code)

            await self._enforce_quota(owner_id)

            if custom_code:
                return await self._insert(custom_code, target_url, owner_id)
            return await self._insert_generated(target_url, owner_id)

        except ShortenerException:
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to create short URL: {e}", original_error=e)

    async def _check_code_available(self, short_code: str) -> None:
        """
        Advisory uniqueness check for a custom code.

        An expired record still holding the code is deleted so the code can
        be claimed again.
        """
        existing = await self.get_alias(short_code)
        if existing is None:
            return

        if existing.is_expired():
            logger.info(f"Reclaiming expired short code '{short_code}'")
            await self.expiration_service.discard_expired(existing.id)
            return

        raise CodeTakenError(short_code)

    async def _enforce_quota(self, owner_id: str) -> None:
        now = utc_now()
        if self.policy.eager_expiration:
            await self.expiration_service.sweep_owner(owner_id, now=now)

        live = await self.owner_links.count_live_links(owner_id, now=now)
        if live >= self.policy.max_links_per_owner:
            logger.info(f"Owner at quota ({live}/{self.policy.max_links_per_owner}), allocation refused")
            raise QuotaExceededError(owner_id, self.policy.max_links_per_owner)

    async def _insert_generated(self, target_url: str, owner_id: str) -> AliasRecord:
        attempts = self.policy.generation_attempts
        for attempt in range(1, attempts + 1):
            short_code = generate_short_code(
                self.policy.min_code_length,
                self.policy.max_code_length
            )
            try:
                return await self._insert(short_code, target_url, owner_id)
            except CodeTakenError:
                if attempt == attempts:
                    raise
                logger.warning(
                    f"Generated code '{short_code}' collided "
                    f"(attempt {attempt}/{attempts}), regenerating"
                )

        # generation_attempts >= 1, so the loop either returned or raised
        raise DatabaseError("No short code generation attempts configured")

    async def _insert(self, short_code: str, target_url: str, owner_id: str) -> AliasRecord:
        """
        Insert the record; the UNIQUE constraint is the authoritative check.

        Raises:
            CodeTakenError: If another request already claimed short_code
        """
        created_at = utc_now()
        expires_at = None
        if self.policy.retention is not None:
            expires_at = created_at + self.policy.retention

        record = AliasRecord(
            short_code=short_code,
            target_url=target_url,
            owner_id=owner_id,
            created_at=created_at,
            expires_at=expires_at
        )

        try:
            self.session.add(record)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info(f"Insert of short code '{short_code}' lost to an existing alias")
            raise CodeTakenError(short_code) from e

        logger.info(f"Alias '{short_code}' created")
        return record
