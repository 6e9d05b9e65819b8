"""Mapping of backend rows onto `EventRecord`."""

from datetime import datetime
from typing import Any, TypedDict

from ...domain import EventRecord, deserialize_payload


class EventRow(TypedDict):
    """A row of the events table as returned by the backend."""

    sequence_number: int | str
    occurred_at: str | datetime
    event_type: str
    payload: str | Any


def deserialize_event(row: EventRow) -> EventRecord:
    """Build a record from a row.

    The sequence number is coerced to ``int``, the payload is parsed from
    its stored JSON text (left as is when the driver already decoded it)
    and ``occurred_at`` becomes a timezone-aware timestamp.
    """
    return EventRecord(
        sequence_number=int(row["sequence_number"]),
        timestamp=row["occurred_at"],
        event_type=row["event_type"],
        payload=deserialize_payload(row["payload"]),
    )


def map_rows_to_events(rows: list[EventRow]) -> list[EventRecord]:
    return [deserialize_event(row) for row in rows]


def extract_max_sequence_number(records: list[EventRecord]) -> int:
    """Watermark of an ascending result: the last sequence number, or 0."""
    if not records:
        return 0
    return records[-1].sequence_number
