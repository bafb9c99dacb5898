"""Tests for RedirectService: resolution and lazy expiration."""

from datetime import timedelta

import pytest
from sqlalchemy import Delete
from sqlalchemy.exc import OperationalError

from shortener.core.exceptions import AliasNotFoundError
from shortener.db.models import AliasRecord, utc_now
from shortener.services.redirect_service import RedirectService


class TestResolve:
    """Test RedirectService.resolve()."""

    @pytest.mark.asyncio
    async def test_unknown_code(self, session):
        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("nope42")

    @pytest.mark.asyncio
    async def test_live_code(self, session, make_alias):
        expires_at = utc_now() + timedelta(days=3)
        await make_alias("abc123", target_url="https://example.com/a", expires_at=expires_at)

        target = await RedirectService(session).resolve("abc123")

        assert target.target_url == "https://example.com/a"
        assert target.expires_at == expires_at

    @pytest.mark.asyncio
    async def test_code_without_expiry(self, session, make_alias):
        await make_alias("forever", expires_at=None)

        target = await RedirectService(session).resolve("forever")

        assert target.expires_at is None

    @pytest.mark.asyncio
    async def test_codes_are_case_sensitive(self, session, make_alias):
        await make_alias("AbC123")

        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("abc123")

    @pytest.mark.asyncio
    async def test_resolution_is_repeatable(self, session, make_alias):
        await make_alias("abc123", target_url="https://example.com/a")
        service = RedirectService(session)

        first = await service.resolve("abc123")
        second = await service.resolve("abc123")

        assert first == second


class TestLazyExpiration:
    """Expired aliases look absent and are deleted on sight."""

    @pytest.mark.asyncio
    async def test_expired_code_not_found(self, session, make_alias, count_aliases):
        await make_alias("old123", expired=True)

        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("old123")

        assert await count_aliases(short_code="old123") == 0

    @pytest.mark.asyncio
    async def test_expired_twice(self, session, make_alias):
        """The second resolver finds nothing to delete and still gets NotFound."""
        await make_alias("old123", expired=True)
        service = RedirectService(session)

        for _ in range(2):
            with pytest.raises(AliasNotFoundError):
                await service.resolve("old123")

    @pytest.mark.asyncio
    async def test_expiry_boundary(self, session, make_alias):
        """An alias is dead from expires_at on."""
        await make_alias("edge12", expires_at=utc_now() - timedelta(microseconds=1))

        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("edge12")

    @pytest.mark.asyncio
    async def test_expired_code_loaded_earlier_in_session(self, session, make_alias, count_aliases):
        """The same session already holds the record when the delete runs."""
        record = await make_alias("old123", expired=True)
        await session.get(AliasRecord, record.id)

        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("old123")

        assert await count_aliases(short_code="old123") == 0

    @pytest.mark.asyncio
    async def test_failed_delete_still_not_found(self, session, make_alias, count_aliases, monkeypatch):
        """A delete that fails is logged and left for a later sweep."""
        await make_alias("old123", expired=True)
        execute = session.execute

        async def execute_without_deletes(statement, *args, **kwargs):
            if isinstance(statement, Delete):
                raise OperationalError("DELETE FROM alias_records", {}, Exception("database is locked"))
            return await execute(statement, *args, **kwargs)

        monkeypatch.setattr(session, "execute", execute_without_deletes)

        with pytest.raises(AliasNotFoundError):
            await RedirectService(session).resolve("old123")

        assert await count_aliases(short_code="old123") == 1
