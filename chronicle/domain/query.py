"""Selection model for reading the log.

A query is an "OR of ANDs": an event matches an `EventQuery` when it
matches at least one of its filters, and it matches an `EventFilter`
when both its type and its payload are accepted by that filter.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from .event import EventRecord


class EventFilter(BaseModel):
    """One conjunctive selection over event type and payload shape.

    Attributes:
        event_types: Accepted event types. ``None`` or empty accepts any type.
        payload_predicates: Structural predicates. ``None`` or empty accepts
            any payload; otherwise the payload must satisfy at least one.

    Examples:
        >>> EventFilter(
        ...     event_types=("StudentSubscribed",),
        ...     payload_predicates=({"course_id": "c1"},),
        ... )
    """

    model_config = ConfigDict(frozen=True)

    event_types: tuple[str, ...] | None = None
    payload_predicates: tuple[JsonValue, ...] | None = None


class EventQuery(BaseModel):
    """Disjunction of filters defining a scope of the log."""

    model_config = ConfigDict(frozen=True)

    filters: tuple[EventFilter, ...] = ()


class QueryResult(BaseModel):
    """Ordered matching records plus the watermark of the queried scope.

    Attributes:
        events: Matching records in ascending sequence order.
        max_sequence_number: Sequence number of the last record, or 0 when
            nothing matched. Pass it back to ``append`` as the expected
            watermark of the same scope.
    """

    events: list[EventRecord] = Field(default_factory=list)
    max_sequence_number: int = Field(default=0, ge=0)


def create_filter(
    event_types: Iterable[str] | None = None,
    payload_predicates: Iterable[JsonValue] | None = None,
) -> EventFilter:
    """Build an `EventFilter` from plain iterables."""
    return EventFilter(
        event_types=tuple(event_types) if event_types is not None else None,
        payload_predicates=tuple(payload_predicates) if payload_predicates is not None else None,
    )


def create_query(*filters: EventFilter) -> EventQuery:
    """Build an `EventQuery` that matches any of ``filters``."""
    return EventQuery(filters=filters)
