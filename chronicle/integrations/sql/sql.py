"""Coarse backend-level filtering.

Only event-type membership is pushed to SQL, to bound the rows scanned.
Payload predicates are never translated: their structural semantics
can't be expressed in SQL, so they are always re-checked in memory.
"""

from typing import Any

from pydantic import BaseModel, Field

from ...domain import EventQuery

SELECT_EVENTS_SQL = "SELECT sequence_number, occurred_at, event_type, payload FROM events"


class SqlQuery(BaseModel):
    """SQL text with positional ``?`` parameters."""

    sql: str
    params: list[Any] = Field(default_factory=list)


def collect_event_types(query: EventQuery) -> list[str]:
    """Union of the event types of all filters, deduplicated, first-seen order.

    Returns an empty list when some filter accepts any type, since no
    type clause can then narrow the rows without losing matches.
    """
    event_types: dict[str, None] = {}
    for event_filter in query.filters:
        if not event_filter.event_types:
            return []
        for event_type in event_filter.event_types:
            event_types[event_type] = None
    return list(event_types)


def build_context_query_sql(query: EventQuery | None = None) -> SqlQuery:
    """Build the SELECT reading every row a query may match.

    Rows are always ordered by ascending sequence number; the watermark of
    a result is read off its last row.
    """
    clauses: list[str] = []
    params: list[Any] = []

    if query is not None:
        event_types = collect_event_types(query)
        if event_types:
            placeholders = ", ".join("?" for _ in event_types)
            clauses.append(f"event_type IN ({placeholders})")
            params.extend(event_types)

    sql = SELECT_EVENTS_SQL
    if clauses:
        sql += f" WHERE {' AND '.join(clauses)}"
    sql += " ORDER BY sequence_number ASC"

    return SqlQuery(sql=sql, params=params)
