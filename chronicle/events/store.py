from abc import ABC, abstractmethod
from types import TracebackType

from typing_extensions import Self

from ..domain import Event, EventRecord, QueryResult
from .notifier import EventSubscription, HandleEvents
from .scope import AppendScope, FilterCriteria, normalize_append_scope


class EventStore(ABC):
    """Append-only log of events with scoped optimistic concurrency.

    Readers select a scope of the log with a filter or query and get back
    the matching records plus the scope's watermark (its highest sequence
    number). Writers pass the same scope and watermark to ``append``; the
    append commits only if no event entered the scope in between. Writers
    on disjoint scopes never conflict with each other.

    Examples:
        >>> scope = create_filter(["StudentSubscribed"], [{"course_id": "c1"}])
        >>> result = await store.query(scope)
        >>> if len(result.events) < 30:
        ...     await store.append(
        ...         [Event(event_type="StudentSubscribed", payload={"course_id": "c1"})],
        ...         scope,
        ...         result.max_sequence_number,
        ...     )
    """

    @abstractmethod
    async def query(self, filter_criteria: FilterCriteria | None = None) -> QueryResult:
        """Read the records of a scope.

        Args:
            filter_criteria: A filter, a query, or None for the whole log.

        Returns:
            Matching records in ascending sequence order and the watermark
            of exactly that scope.
        """
        ...

    @abstractmethod
    async def append_in_scope(self, events: list[Event], scope: AppendScope) -> list[EventRecord]:
        """Atomically append ``events`` if ``scope`` still holds.

        Args:
            events: Events to append, in order.
            scope: `Unscoped` or `Scoped` precondition.

        Returns:
            The persisted records, in insertion order.

        Raises:
            ConcurrencyError: If the scope's watermark moved. Nothing is written.
        """
        ...

    @abstractmethod
    async def subscribe(self, handle: HandleEvents) -> EventSubscription:
        """Receive every batch of records appended after this call."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release notifier resources."""
        ...

    async def append(
        self,
        events: list[Event],
        filter_criteria: FilterCriteria | None = None,
        expected_max_sequence_number: int | None = None,
    ) -> list[EventRecord]:
        """Append events, optionally guarded by a scope's watermark.

        Call shapes:

        - ``append(events)``: unconditional.
        - ``append(events, scope, watermark)``: fails with `ConcurrencyError`
          when the scope's watermark is no longer ``watermark``.
        - ``append(events, EventQuery(filters=()), ...)``: an empty scope
          cannot bound anything and behaves like ``append(events)``.
        - ``append([], ...)``: a no-op returning ``[]``, whatever the scope.

        Raises:
            UsageError: If a scope is given without a watermark. Raised
                before the backend is touched.
            ConcurrencyError: If the watermark moved.
        """
        if not events:
            return []
        scope = normalize_append_scope(filter_criteria, expected_max_sequence_number)
        return await self.append_in_scope(events, scope)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
