"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the async MySQL adapter.

Usage:
    from tabsync.adapters import DatabaseClient, AsyncMySQLAdapter
"""

from tabsync.adapters.base import DatabaseClient
from tabsync.adapters.mysql import AsyncMySQLAdapter

__all__ = [
    "DatabaseClient",
    "AsyncMySQLAdapter",
]
