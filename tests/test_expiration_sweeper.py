"""Tests for the periodic expiration sweeper and the cleanup script."""

import asyncio

import pytest

from shortener.core import sweeper_manager
from shortener.core.setting import ExpirationStrategy, settings
from shortener.scripts import cleanup_tasks
from shortener.services import background_tasks
from shortener.services.expiration_service import ExpirationService


@pytest.fixture
def fake_sweeper(monkeypatch):
    """Replace the sweep loop with one that only records that it started."""
    started = []

    async def run_expiration_sweeper(interval_seconds):
        started.append(interval_seconds)
        await asyncio.Event().wait()

    monkeypatch.setattr(sweeper_manager, "run_expiration_sweeper", run_expiration_sweeper)
    monkeypatch.setattr(sweeper_manager, "_sweeper_task", None)
    return started


@pytest.fixture
def use_test_database(monkeypatch, session_maker, engine):
    """Point the module-level session factories at the test database."""
    monkeypatch.setattr(background_tasks, "async_session_maker", session_maker)
    monkeypatch.setattr(cleanup_tasks, "async_session_maker", session_maker)
    monkeypatch.setattr(cleanup_tasks, "engine", engine)


class TestSweeperManager:
    """Test start_sweeper() / stop_sweeper()."""

    @pytest.mark.asyncio
    async def test_not_started_in_lazy_mode(self, fake_sweeper, monkeypatch):
        monkeypatch.setattr(settings, "EXPIRATION_STRATEGY", ExpirationStrategy.lazy)

        await sweeper_manager.start_sweeper()

        assert sweeper_manager._sweeper_task is None

    @pytest.mark.asyncio
    async def test_not_started_with_zero_interval(self, fake_sweeper, monkeypatch):
        monkeypatch.setattr(settings, "EXPIRATION_STRATEGY", ExpirationStrategy.eager)
        monkeypatch.setattr(settings, "SWEEP_INTERVAL_SECONDS", 0)

        await sweeper_manager.start_sweeper()

        assert sweeper_manager._sweeper_task is None

    @pytest.mark.asyncio
    async def test_started_and_stopped_in_eager_mode(self, fake_sweeper, monkeypatch):
        monkeypatch.setattr(settings, "EXPIRATION_STRATEGY", ExpirationStrategy.eager)
        monkeypatch.setattr(settings, "SWEEP_INTERVAL_SECONDS", 60)

        await sweeper_manager.start_sweeper()
        task = sweeper_manager._sweeper_task
        await asyncio.sleep(0)

        assert task is not None
        assert fake_sweeper == [60]

        await sweeper_manager.stop_sweeper()

        assert task.cancelled()
        assert sweeper_manager._sweeper_task is None

    @pytest.mark.asyncio
    async def test_started_once(self, fake_sweeper, monkeypatch):
        monkeypatch.setattr(settings, "EXPIRATION_STRATEGY", ExpirationStrategy.eager)
        monkeypatch.setattr(settings, "SWEEP_INTERVAL_SECONDS", 60)

        await sweeper_manager.start_sweeper()
        first = sweeper_manager._sweeper_task
        await sweeper_manager.start_sweeper()

        assert sweeper_manager._sweeper_task is first
        await sweeper_manager.stop_sweeper()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, fake_sweeper):
        await sweeper_manager.stop_sweeper()

        assert sweeper_manager._sweeper_task is None


class TestBackgroundSweep:
    """Test the sweep loop and a single background pass."""

    @pytest.mark.asyncio
    async def test_background_pass_removes_expired(self, use_test_database, make_alias, count_aliases):
        await make_alias("live12")
        await make_alias("dead12", expired=True)

        assert await background_tasks.sweep_expired_background() == 1
        assert await count_aliases() == 1

    @pytest.mark.asyncio
    async def test_background_pass_failure_is_contained(self, use_test_database, monkeypatch):
        async def failing_sweep(self, now=None):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(ExpirationService, "sweep_all", failing_sweep)

        assert await background_tasks.sweep_expired_background() == 0

    @pytest.mark.asyncio
    async def test_loop_keeps_sweeping(self, monkeypatch):
        passes = []
        done = asyncio.Event()

        async def sweep():
            passes.append(1)
            if len(passes) == 3:
                done.set()
            return 0

        monkeypatch.setattr(background_tasks, "sweep_expired_background", sweep)

        task = asyncio.create_task(background_tasks.run_expiration_sweeper(0))
        await asyncio.wait_for(done.wait(), timeout=5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(passes) >= 3


class TestCleanupScript:
    """Test scripts/cleanup_tasks.py."""

    @pytest.mark.asyncio
    async def test_run_cleanup(self, use_test_database, make_alias, count_aliases):
        await make_alias("live12", owner_id="u1")
        await make_alias("dead12", owner_id="u1", expired=True)
        await make_alias("dead34", owner_id="u2", expired=True)

        assert await cleanup_tasks.run_cleanup() == 2
        assert await count_aliases() == 1

    @pytest.mark.asyncio
    async def test_run_cleanup_nothing_expired(self, use_test_database, make_alias):
        await make_alias("live12")

        assert await cleanup_tasks.run_cleanup() == 0
