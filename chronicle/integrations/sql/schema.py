"""DDL for the append-only events table.

The two secondary indexes are optimizations only.
"""

CREATE_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS events (
    sequence_number INTEGER PRIMARY KEY AUTOINCREMENT,
    occurred_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    event_type TEXT NOT NULL,
    payload TEXT NOT NULL
)
"""

CREATE_EVENT_TYPE_INDEX = "CREATE INDEX IF NOT EXISTS idx_events_type ON events(event_type)"

CREATE_OCCURRED_AT_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_events_occurred_at ON events(occurred_at)"
)

SCHEMA_STATEMENTS = (CREATE_EVENTS_TABLE, CREATE_EVENT_TYPE_INDEX, CREATE_OCCURRED_AT_INDEX)
