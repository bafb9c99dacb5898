"""
Background Task Helpers

Provides helper functions for background work that create their own database sessions.
Background tasks cannot use a request's session as it's closed after the endpoint returns.
"""

import asyncio
import logging

from shortener.db.session import async_session_maker
from shortener.services.expiration_service import ExpirationService

logger = logging.getLogger(__name__)


async def sweep_expired_background() -> int:
    """
    Run one expiration sweep across all owners.

    Returns:
        Number of deleted aliases (0 if the sweep failed)
    """
    try:
        async with async_session_maker() as session:
            return await ExpirationService(session).sweep_all()
    except Exception as e:
        logger.error(f"Expiration sweep failed: {str(e)}", exc_info=True)
        return 0


async def run_expiration_sweeper(interval_seconds: float) -> None:
    """
    Sweep expired aliases every interval_seconds until cancelled.

    A failed pass is logged and the loop keeps going.

    Args:
        interval_seconds: Pause between sweeps
    """
    logger.info(f"Expiration sweeper started (every {interval_seconds}s)")
    while True:
        await sweep_expired_background()
        await asyncio.sleep(interval_seconds)
