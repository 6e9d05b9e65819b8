"""Relational backend integration for the event store.

Any engine implementing the `Database` contract (prepared statements plus
plain statement execution with immediate transactions) can back
`SQLEventStore`.

Usage:
    >>> from chronicle.integrations.sql import SQLEventStore
    >>> from chronicle.integrations.sqlite import SQLiteConfiguration
    >>>
    >>> config = SQLiteConfiguration(path="events.db")
    >>> store = SQLEventStore(config.database)
    >>> await store.initialize_schema()
"""

from .database import Database, DatabaseResult, ExecResult, PreparedStatement
from .event_store import SQLEventStore
from .schema import (
    CREATE_EVENT_TYPE_INDEX,
    CREATE_EVENTS_TABLE,
    CREATE_OCCURRED_AT_INDEX,
    SCHEMA_STATEMENTS,
)
from .sql import SqlQuery, build_context_query_sql, collect_event_types
from .transform import EventRow, deserialize_event, extract_max_sequence_number, map_rows_to_events

__all__ = [
    "SQLEventStore",
    # Backend contract
    "Database",
    "DatabaseResult",
    "ExecResult",
    "PreparedStatement",
    # Query building
    "SqlQuery",
    "build_context_query_sql",
    "collect_event_types",
    # Row mapping
    "EventRow",
    "deserialize_event",
    "map_rows_to_events",
    "extract_max_sequence_number",
    # Schema
    "CREATE_EVENTS_TABLE",
    "CREATE_EVENT_TYPE_INDEX",
    "CREATE_OCCURRED_AT_INDEX",
    "SCHEMA_STATEMENTS",
]
