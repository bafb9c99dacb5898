"""Selects the database adapter matching a connection string."""

from shortener.db.interface import DatabaseAdapter
from shortener.db.postgres_adapter import PostgreSQLAdapter
from shortener.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./shortener.db

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the URL names an unsupported backend
    """
    scheme = database_url.split(":", 1)[0].lower()
    dialect = scheme.split("+", 1)[0]

    if dialect == "sqlite":
        return SQLiteAdapter()
    if dialect in ("postgresql", "postgres"):
        return PostgreSQLAdapter()

    raise ValueError(f"Unsupported database backend: '{scheme}'")
