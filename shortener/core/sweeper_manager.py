"""
Expiration Sweeper Manager

This module owns the periodic expiration sweep task of the application instance.

Design:
- Started on application startup, only with EXPIRATION_STRATEGY=eager
  and a positive SWEEP_INTERVAL_SECONDS
- One task per instance; concurrent sweeps from several instances are
  harmless because each delete only matches already expired rows
- Cancelled on shutdown
"""

import asyncio
import logging
from typing import Optional

from shortener.core.setting import settings, ExpirationStrategy
from shortener.services.background_tasks import run_expiration_sweeper

logger = logging.getLogger(__name__)

# Global sweeper task (created on startup)
_sweeper_task: Optional[asyncio.Task] = None


async def start_sweeper() -> None:
    """Start the periodic expiration sweep if the configuration asks for one."""
    global _sweeper_task

    if _sweeper_task is not None:
        logger.warning("Expiration sweeper already running")
        return

    if settings.EXPIRATION_STRATEGY != ExpirationStrategy.eager:
        logger.info("Lazy expiration configured, periodic sweeper not started")
        return

    if settings.SWEEP_INTERVAL_SECONDS <= 0:
        logger.info("SWEEP_INTERVAL_SECONDS is 0, periodic sweeper disabled")
        return

    _sweeper_task = asyncio.create_task(
        run_expiration_sweeper(settings.SWEEP_INTERVAL_SECONDS)
    )


async def stop_sweeper() -> None:
    """Cancel the sweeper task and wait for it to finish."""
    global _sweeper_task

    if _sweeper_task is None:
        return

    logger.info("Stopping expiration sweeper")
    _sweeper_task.cancel()
    try:
        await _sweeper_task
    except asyncio.CancelledError:
        pass
    _sweeper_task = None
