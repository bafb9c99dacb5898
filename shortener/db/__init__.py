"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: backend-specific engine configuration
- Session management: Database session creation and management

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Register it in get_database_adapter() in adapter_factory.py
"""

from shortener.db.interface import DatabaseAdapter
from shortener.db.session import get_session, async_session_maker, engine

__all__ = [
    "DatabaseAdapter",
    "get_session",
    "async_session_maker",
    "engine",
]
