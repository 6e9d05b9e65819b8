"""Precise in-memory filtering of event records.

Backends only narrow rows by event type. Everything here runs after the
rows are loaded and decides the exact membership of a record in a scope.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .event import EventRecord
from .query import EventFilter, EventQuery


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_structured(value: Any) -> bool:
    return isinstance(value, Mapping) or _is_sequence(value)


def _strictly_equal(payload: Any, predicate: Any) -> bool:
    # True == 1 in Python but not in JSON
    if isinstance(payload, bool) or isinstance(predicate, bool):
        return isinstance(payload, bool) and isinstance(predicate, bool) and payload is predicate
    return bool(payload == predicate)


def is_subset(payload: Any, predicate: Any) -> bool:
    """Check whether ``payload`` structurally contains ``predicate``.

    The predicate drives the walk and the payload only ever needs to be a
    superset of it:

    - a missing (``None``) predicate matches anything, a missing payload
      matches no present predicate;
    - scalars must be strictly equal;
    - every element of a predicate sequence must be matched by at least
      one element of the payload sequence (order-independent, payload
      elements may be reused);
    - every key of a predicate mapping must exist in the payload mapping
      with a matching value; extra payload keys are ignored;
    - a sequence never matches a mapping, and vice versa.

    Args:
        payload: Stored event payload (or a nested part of it).
        predicate: Shape the payload has to contain.

    Returns:
        True if the payload satisfies the predicate.

    Examples:
        >>> is_subset({"a": 1, "b": 2}, {"a": 1})
        True
        >>> is_subset([{"a": 1}, {"a": 2}], [{"a": 1}])
        True
        >>> is_subset([{"a": 1}], [{"a": 1}, {"a": 2}])
        False
    """
    if predicate is None:
        return True
    if payload is None:
        return False

    if not _is_structured(predicate) or not _is_structured(payload):
        return _strictly_equal(payload, predicate)

    if _is_sequence(predicate) and _is_sequence(payload):
        return all(
            any(is_subset(payload_element, predicate_element) for payload_element in payload)
            for predicate_element in predicate
        )

    if _is_sequence(predicate) != _is_sequence(payload):
        return False

    for key, expected in predicate.items():
        if key not in payload:
            return False
        if not is_subset(payload[key], expected):
            return False
    return True


def matches_event_type(event_type: str, event_types: Iterable[str] | None) -> bool:
    if not event_types:
        return True
    return event_type in event_types


def matches_predicates(payload: Any, predicates: Sequence[Any] | None) -> bool:
    if not predicates:
        return True
    return any(is_subset(payload, predicate) for predicate in predicates)


def matches_filter(event: EventRecord, event_filter: EventFilter) -> bool:
    """Check one filter: type membership AND at least one satisfied predicate."""
    return matches_event_type(event.event_type, event_filter.event_types) and matches_predicates(
        event.payload, event_filter.payload_predicates
    )


def matches_query(event: EventRecord, query: EventQuery) -> bool:
    """Check whether ``event`` matches any filter of ``query``.

    A query without filters matches nothing.
    """
    return any(matches_filter(event, event_filter) for event_filter in query.filters)


def filter_events_by_query(
    events: list[EventRecord], query: EventQuery | None = None
) -> list[EventRecord]:
    """Keep the records matching ``query``, preserving their order.

    Args:
        events: Records in ascending sequence order.
        query: Scope to apply. ``None`` keeps every record.

    Returns:
        The matching records, in the input order.
    """
    if query is None:
        return list(events)
    return [event for event in events if matches_query(event, query)]
