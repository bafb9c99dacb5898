"""
Cleanup tasks for the URL shortener.

Removes every expired alias in one pass. Can be scheduled (cron, k8s CronJob)
instead of, or in addition to, the in-process sweeper of eager mode.

Usage:
    python -m shortener.scripts.cleanup_tasks
"""

import asyncio
import logging

from shortener.core.logging_config import setup_logging
from shortener.core.setting import settings
from shortener.db.session import async_session_maker, engine
from shortener.services.expiration_service import ExpirationService

logger = logging.getLogger(__name__)


async def run_cleanup() -> int:
    """Run all cleanup tasks and return the number of removed aliases."""
    try:
        async with async_session_maker() as session:
            return await ExpirationService(session).sweep_all()
    finally:
        await engine.dispose()


def main() -> int:
    setup_logging(settings.LOG_LEVEL)
    removed = asyncio.run(run_cleanup())
    logger.info(f"Cleaned up {removed} expired aliases")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
