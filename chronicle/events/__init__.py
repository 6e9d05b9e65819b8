"""Event store infrastructure.

This package provides:
- EventStore: Abstract append-only log with scoped optimistic concurrency
- Append scopes: Unscoped / Scoped preconditions for ``append``
- EventStreamNotifier: Post-commit delivery to subscribers
- ConflictRetryPolicy: Opt-in caller-side retry of conflicting appends
"""

from .notifier import (
    EventStreamNotifier,
    EventSubscription,
    HandleEvents,
    InMemoryEventStreamNotifier,
)
from .retry import ConflictRetryPolicy
from .scope import (
    UNSCOPED,
    AppendScope,
    FilterCriteria,
    Scoped,
    Unscoped,
    normalize_append_scope,
    scoped,
    to_event_query,
    unscoped,
)
from .store import EventStore

__all__ = [
    "EventStore",
    # Scopes
    "AppendScope",
    "FilterCriteria",
    "Scoped",
    "Unscoped",
    "UNSCOPED",
    "scoped",
    "unscoped",
    "normalize_append_scope",
    "to_event_query",
    # Notification
    "EventStreamNotifier",
    "EventSubscription",
    "HandleEvents",
    "InMemoryEventStreamNotifier",
    # Retry
    "ConflictRetryPolicy",
]
