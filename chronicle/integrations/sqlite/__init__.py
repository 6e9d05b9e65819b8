"""SQLite integration for the chronicle event store.

Usage:
    >>> from chronicle.integrations.sqlite import SQLiteConfiguration
    >>>
    >>> config = SQLiteConfiguration(path="events.db")
    >>> await config.on_startup()
    >>> store = config.event_store()
"""

from .config import SQLiteConfiguration
from .database import SQLiteDatabase, SQLitePreparedStatement

__all__ = [
    "SQLiteConfiguration",
    "SQLiteDatabase",
    "SQLitePreparedStatement",
]
