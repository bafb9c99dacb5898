"""
API Key Service

Credentials for third-party callers of the public shorten API.

Keys are random url-safe tokens handed out once; the store only keeps their
SHA-256 digest. A key can be revoked, after which it no longer verifies.
Aliases created with a key are owned by 'api_<key id>'.
"""

import hashlib
import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import DatabaseError, UnauthorizedError
from shortener.db.models import ApiKey, utc_now

logger = logging.getLogger(__name__)

API_KEY_BYTES = 32


def hash_api_key(raw_key: str) -> str:
    """SHA-256 hex digest of a raw API key."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


class ApiKeyService:
    """Issues, verifies and revokes API keys."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def owner_id_for(api_key: ApiKey) -> str:
        """Owner id under which aliases created with this key are stored."""
        return f"api_{api_key.id}"

    async def issue(self, label: Optional[str] = None) -> tuple[ApiKey, str]:
        """
        Create a new API key.

        Args:
            label: Optional human-readable name for the key

        Returns:
            Tuple of (stored ApiKey, raw key). The raw key is not recoverable later.

        Raises:
            DatabaseError: If the key cannot be stored
        """
        raw_key = secrets.token_urlsafe(API_KEY_BYTES)
        api_key = ApiKey(key_hash=hash_api_key(raw_key), label=label)

        try:
            self.session.add(api_key)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError("Failed to store API key", original_error=e)

        logger.info(f"API key {api_key.id} issued ({label or 'unlabelled'})")
        return api_key, raw_key

    async def verify(self, raw_key: Optional[str]) -> ApiKey:
        """
        Look up a presented API key.

        Args:
            raw_key: Value of the X-API-Key header

        Returns:
            The matching, non-revoked ApiKey

        Raises:
            UnauthorizedError: If the key is missing, unknown or revoked
        """
        if not raw_key:
            raise UnauthorizedError("API key required. Add x-api-key header.")

        statement = select(ApiKey).where(ApiKey.key_hash == hash_api_key(raw_key))
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to verify API key", original_error=e)

        api_key = result.scalar_one_or_none()
        if api_key is None or api_key.is_revoked:
            logger.warning("Rejected unknown or revoked API key")
            raise UnauthorizedError("Invalid API key")

        return api_key

    async def revoke(self, key_id: int) -> bool:
        """
        Revoke an API key.

        Returns:
            True if the key existed and is now revoked, False if it does not exist
        """
        api_key = await self.session.get(ApiKey, key_id)
        if api_key is None:
            return False

        if not api_key.is_revoked:
            api_key.revoked_at = utc_now()
            await self.session.commit()
            logger.info(f"API key {key_id} revoked")

        return True
