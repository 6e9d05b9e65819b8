"""Domain primitives of the event store.

- Event / EventRecord: facts before and after persistence
- EventFilter / EventQuery / QueryResult: selection of a scope of the log
- is_subset and friends: precise in-memory matching
- Exceptions for configuration, usage, concurrency and backend failures
"""

from .event import Event, EventRecord, deserialize_payload, serialize_payload
from .exceptions import (
    ChronicleError,
    ConcurrencyError,
    ConfigurationError,
    DatabaseError,
    StatementPhase,
    UsageError,
)
from .predicates import (
    filter_events_by_query,
    is_subset,
    matches_event_type,
    matches_filter,
    matches_predicates,
    matches_query,
)
from .query import EventFilter, EventQuery, QueryResult, create_filter, create_query

__all__ = [
    # Records
    "Event",
    "EventRecord",
    "serialize_payload",
    "deserialize_payload",
    # Selection
    "EventFilter",
    "EventQuery",
    "QueryResult",
    "create_filter",
    "create_query",
    # Matching
    "is_subset",
    "matches_event_type",
    "matches_predicates",
    "matches_filter",
    "matches_query",
    "filter_events_by_query",
    # Errors
    "ChronicleError",
    "ConfigurationError",
    "UsageError",
    "ConcurrencyError",
    "DatabaseError",
    "StatementPhase",
]
