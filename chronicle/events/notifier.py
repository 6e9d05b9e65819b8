"""Post-commit fan-out of appended records to subscribers.

This module provides:
- EventStreamNotifier: Abstract interface used by stores after a commit
- EventSubscription: Handle returned by subscribe(), used to stop delivery
- InMemoryEventStreamNotifier: In-process implementation
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from ulid import ULID

from ..domain import EventRecord

LOGGER = logging.getLogger(__name__)

HandleEvents = Callable[[list[EventRecord]], Awaitable[None]]


class EventSubscription:
    """Handle for a registered subscriber.

    Attributes:
        id: Unique identifier of the subscription.
    """

    def __init__(self, subscription_id: ULID, cancel: Callable[[ULID], Awaitable[None]]):
        self.id = subscription_id
        self._cancel = cancel

    async def unsubscribe(self) -> None:
        """Stop receiving events. Calling it more than once has no effect."""
        await self._cancel(self.id)


class EventStreamNotifier(ABC):
    """Abstract interface for delivering newly committed records.

    Stores call ``notify`` only after the append transaction committed,
    with exactly the records that were inserted, in insertion order. The
    notifier is not part of persistence: a delivery failure never undoes
    an append.

    Implementations might use:
    - In-process callbacks (for tests or single-process apps)
    - Database notification channels (LISTEN/NOTIFY)
    - Message brokers
    """

    @abstractmethod
    async def subscribe(self, handle: HandleEvents) -> EventSubscription:
        """Register ``handle`` for future appends.

        Args:
            handle: Coroutine function receiving each batch of records.

        Returns:
            A subscription that can be used to stop receiving events.
        """
        ...

    @abstractmethod
    async def notify(self, events: list[EventRecord]) -> None:
        """Deliver a batch of newly appended records to all subscribers."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release all subscriber resources."""
        ...


class InMemoryEventStreamNotifier(EventStreamNotifier):
    """Delivers records to in-process handlers.

    Handlers run concurrently for each batch. A failing handler is logged
    and does not affect the other subscribers or the caller of ``notify``.
    """

    def __init__(self) -> None:
        self._handlers: dict[ULID, HandleEvents] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    async def subscribe(self, handle: HandleEvents) -> EventSubscription:
        subscription_id = ULID()
        self._handlers[subscription_id] = handle
        LOGGER.debug("Subscriber registered", extra={"subscription_id": str(subscription_id)})
        return EventSubscription(subscription_id, self._remove)

    async def notify(self, events: list[EventRecord]) -> None:
        if not events or not self._handlers:
            return

        handlers = list(self._handlers.items())
        await asyncio.gather(
            *(self._deliver(subscription_id, handle, events) for subscription_id, handle in handlers)
        )

    async def close(self) -> None:
        self._handlers.clear()

    async def _remove(self, subscription_id: ULID) -> None:
        self._handlers.pop(subscription_id, None)

    async def _deliver(
        self, subscription_id: ULID, handle: HandleEvents, events: list[EventRecord]
    ) -> None:
        try:
            await handle(list(events))
        except Exception:
            LOGGER.exception(
                "Subscriber failed to handle events",
                extra={"subscription_id": str(subscription_id), "event_count": len(events)},
            )
