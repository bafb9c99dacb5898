"""Tests for API key issuing, verification and revocation."""

import pytest

from shortener.core.exceptions import UnauthorizedError
from shortener.services.api_key_service import ApiKeyService, hash_api_key


class TestApiKeyService:
    """Test ApiKeyService."""

    @pytest.mark.asyncio
    async def test_issue_and_verify(self, session):
        service = ApiKeyService(session)

        api_key, raw_key = await service.issue(label="partner")
        verified = await service.verify(raw_key)

        assert verified.id == api_key.id
        assert verified.label == "partner"
        assert service.owner_id_for(verified) == f"api_{api_key.id}"

    @pytest.mark.asyncio
    async def test_only_digest_is_stored(self, session):
        api_key, raw_key = await ApiKeyService(session).issue()

        assert api_key.key_hash == hash_api_key(raw_key)
        assert api_key.key_hash != raw_key
        assert len(api_key.key_hash) == 64

    @pytest.mark.asyncio
    async def test_keys_are_distinct(self, session):
        service = ApiKeyService(session)

        _, first = await service.issue()
        _, second = await service.issue()

        assert first != second

    @pytest.mark.asyncio
    async def test_missing_key(self, session):
        with pytest.raises(UnauthorizedError) as exc_info:
            await ApiKeyService(session).verify(None)

        assert "API key required" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_key(self, session):
        with pytest.raises(UnauthorizedError) as exc_info:
            await ApiKeyService(session).verify("not-a-real-key")

        assert str(exc_info.value) == "Invalid API key"

    @pytest.mark.asyncio
    async def test_revoked_key(self, session):
        service = ApiKeyService(session)
        api_key, raw_key = await service.issue()

        assert await service.revoke(api_key.id) is True

        with pytest.raises(UnauthorizedError):
            await service.verify(raw_key)

    @pytest.mark.asyncio
    async def test_revoke_missing_key(self, session):
        assert await ApiKeyService(session).revoke(12345) is False
