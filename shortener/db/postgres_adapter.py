"""
PostgreSQL Database Adapter

Production backend for multi-instance deployments. Uses the asyncpg driver
(postgresql+asyncpg://...) and SQLAlchemy's default queue pool.
"""

from typing import Any, Optional

from sqlalchemy.pool import Pool

from shortener.db.interface import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter implementation."""

    def __init__(self, pool_size: int = 10, max_overflow: int = 20):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def get_pool_class(self) -> Optional[type[Pool]]:
        # Default AsyncAdaptedQueuePool
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        """
        Get PostgreSQL-specific engine configuration.

        pool_pre_ping checks each connection out with a ping first.
        """
        return {
            "echo": False,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
        }
