"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- Single writer at a time (file locking); a second writer waits on the
  busy timeout and then sees the committed row, so the UNIQUE constraint
  on short_code still arbitrates concurrent inserts
"""

from typing import Any

from sqlalchemy.pool import NullPool

from shortener.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Uses NullPool: a file-based database doesn't benefit from pooling,
    and each session gets its own connection.
    """

    # Seconds a writer waits for the file lock before failing
    BUSY_TIMEOUT = 15

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        - check_same_thread=False: Required for async SQLite operations
        - timeout: busy timeout for concurrent writers
        """
        return {
            "check_same_thread": False,
            "timeout": self.BUSY_TIMEOUT,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }
