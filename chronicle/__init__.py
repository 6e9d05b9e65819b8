"""Chronicle - append-only event store with scoped optimistic concurrency.

This module provides the public API: the event and query model, the
abstract store and its append scopes, post-commit notification, and the
SQL-backed store implementation.
"""

from .domain import (
    ChronicleError,
    ConcurrencyError,
    ConfigurationError,
    DatabaseError,
    Event,
    EventFilter,
    EventQuery,
    EventRecord,
    QueryResult,
    UsageError,
    create_filter,
    create_query,
    is_subset,
)
from .events import (
    AppendScope,
    ConflictRetryPolicy,
    EventStore,
    EventStreamNotifier,
    EventSubscription,
    InMemoryEventStreamNotifier,
    Scoped,
    Unscoped,
    scoped,
    unscoped,
)
from .integrations.sql import Database, SQLEventStore

__all__ = [
    # Records and selection
    "Event",
    "EventRecord",
    "EventFilter",
    "EventQuery",
    "QueryResult",
    "create_filter",
    "create_query",
    "is_subset",
    # Store
    "EventStore",
    "SQLEventStore",
    "Database",
    "AppendScope",
    "Scoped",
    "Unscoped",
    "scoped",
    "unscoped",
    "ConflictRetryPolicy",
    # Notification
    "EventStreamNotifier",
    "EventSubscription",
    "InMemoryEventStreamNotifier",
    # Errors
    "ChronicleError",
    "ConfigurationError",
    "UsageError",
    "ConcurrencyError",
    "DatabaseError",
]
