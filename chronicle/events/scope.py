"""Explicit append scopes for optimistic concurrency control.

``append`` takes one of two scopes:

- `Unscoped`: unconditional append, no concurrency check at all.
- `Scoped`: the query defining the scope plus the watermark the caller
  observed for it. The append only commits if the scope's watermark is
  still the same inside the append transaction.
"""

from pydantic import BaseModel, ConfigDict, Field

from ..domain import EventFilter, EventQuery, UsageError

FilterCriteria = EventFilter | EventQuery


class Unscoped(BaseModel):
    """Append without any concurrency precondition."""

    model_config = ConfigDict(frozen=True)


class Scoped(BaseModel):
    """Append guarded by the watermark of a non-empty query.

    Attributes:
        query: Scope whose watermark is re-derived inside the transaction.
        expected_max_sequence_number: Watermark from a previous ``query()``
            of the same (or a broader) scope.
    """

    model_config = ConfigDict(frozen=True)

    query: EventQuery
    expected_max_sequence_number: int = Field(ge=0)


AppendScope = Unscoped | Scoped

UNSCOPED = Unscoped()


def to_event_query(filter_criteria: FilterCriteria) -> EventQuery:
    """Normalize a bare filter into a single-filter query."""
    if isinstance(filter_criteria, EventQuery):
        return filter_criteria
    return EventQuery(filters=(filter_criteria,))


def unscoped() -> Unscoped:
    return UNSCOPED


def scoped(filter_criteria: FilterCriteria, expected_max_sequence_number: int) -> AppendScope:
    """Build the scope for a conditional append.

    A query without filters cannot bound anything and degrades to
    `Unscoped`, whatever watermark was given.

    Raises:
        UsageError: If the watermark is negative.
    """
    query = to_event_query(filter_criteria)
    if not query.filters:
        return UNSCOPED
    if expected_max_sequence_number < 0:
        raise UsageError(
            f"Expected max sequence number must be non-negative, got {expected_max_sequence_number}"
        )
    return Scoped(query=query, expected_max_sequence_number=expected_max_sequence_number)


def normalize_append_scope(
    filter_criteria: FilterCriteria | None = None,
    expected_max_sequence_number: int | None = None,
) -> AppendScope:
    """Map the public ``append`` call shapes onto an `AppendScope`.

    Args:
        filter_criteria: Optional filter or query defining the scope.
        expected_max_sequence_number: Watermark observed for that scope.

    Returns:
        `Unscoped` when no criteria (or an empty query) is given,
        `Scoped` otherwise.

    Raises:
        UsageError: If a non-empty scope is given without a watermark.
    """
    if filter_criteria is None:
        return UNSCOPED

    query = to_event_query(filter_criteria)
    if not query.filters:
        return UNSCOPED

    if expected_max_sequence_number is None:
        raise UsageError("Expected max sequence number is required when a filter is provided")
    return scoped(query, expected_max_sequence_number)
