"""
Pytest configuration and fixtures.

Every test gets a fresh file-backed SQLite database (file-backed so that
several sessions can hit it concurrently, like request handlers do).
"""

from datetime import datetime, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from shortener.api.deps import get_policy
from shortener.db.models import AliasRecord, utc_now
from shortener.db.session import get_session
from shortener.db.sqlite_adapter import SQLiteAdapter
from shortener.main import app
from shortener.services.policy import AliasPolicy


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Engine bound to a throwaway SQLite file with all tables created."""
    engine = SQLiteAdapter().create_engine(f"sqlite+aiosqlite:///{tmp_path / 'shortener.db'}")
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def policy() -> AliasPolicy:
    """Default rules: 6-char codes, 11 links per owner, 30-day lazy expiry."""
    return AliasPolicy()


@pytest.fixture
def make_alias(session_maker):
    """Insert an alias directly, bypassing allocation rules."""

    async def _make_alias(
        short_code: str,
        target_url: str = "https://example.com/",
        owner_id: str = "u1",
        created_at: Optional[datetime] = None,
        expires_at: Optional[datetime] = None,
        expired: bool = False,
    ) -> AliasRecord:
        created_at = created_at or utc_now()
        if expired:
            created_at = utc_now() - timedelta(days=31)
            expires_at = utc_now() - timedelta(days=1)

        record = AliasRecord(
            short_code=short_code,
            target_url=target_url,
            owner_id=owner_id,
            created_at=created_at,
            expires_at=expires_at,
        )
        async with session_maker() as session:
            session.add(record)
            await session.commit()
        return record

    return _make_alias


@pytest.fixture
def count_aliases(session_maker):
    """Count physically stored aliases, expired ones included."""
    from sqlalchemy import func, select

    async def _count_aliases(**filters) -> int:
        statement = select(func.count(AliasRecord.id))
        for field, value in filters.items():
            statement = statement.where(getattr(AliasRecord, field) == value)
        async with session_maker() as session:
            result = await session.execute(statement)
            return result.scalar() or 0

    return _count_aliases


@pytest_asyncio.fixture
async def client(session_maker, policy) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app, wired to the test database and policy."""

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_policy] = lambda: policy

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
