"""Tests for the in-memory notifier."""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from chronicle.domain import EventRecord
from chronicle.events import InMemoryEventStreamNotifier


def records(count: int) -> list[EventRecord]:
    return [
        EventRecord(
            sequence_number=i + 1,
            timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
            event_type="A",
            payload={"n": i},
        )
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_notify_delivers_records_in_order():
    """Every subscriber gets the batch in insertion order."""
    notifier = InMemoryEventStreamNotifier()
    first = AsyncMock()
    second = AsyncMock()
    await notifier.subscribe(first)
    await notifier.subscribe(second)
    batch = records(3)

    await notifier.notify(batch)

    first.assert_awaited_once_with(batch)
    second.assert_awaited_once_with(batch)


@pytest.mark.asyncio
async def test_subscribers_get_their_own_list():
    """Handlers mutating their list don't affect others."""
    notifier = InMemoryEventStreamNotifier()
    received: list[list[EventRecord]] = []

    async def greedy(events: list[EventRecord]) -> None:
        events.clear()

    async def collector(events: list[EventRecord]) -> None:
        received.append(events)

    await notifier.subscribe(greedy)
    await notifier.subscribe(collector)
    batch = records(2)

    await notifier.notify(batch)

    assert received == [batch]
    assert len(batch) == 2


@pytest.mark.asyncio
async def test_empty_batches_are_not_delivered():
    """Nothing appended, nothing delivered."""
    notifier = InMemoryEventStreamNotifier()
    handler = AsyncMock()
    await notifier.subscribe(handler)

    await notifier.notify([])

    handler.assert_not_awaited()


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    """Unsubscribed handlers receive nothing, and unsubscribing twice is fine."""
    notifier = InMemoryEventStreamNotifier()
    handler = AsyncMock()
    subscription = await notifier.subscribe(handler)

    await subscription.unsubscribe()
    await subscription.unsubscribe()
    await notifier.notify(records(1))

    handler.assert_not_awaited()
    assert notifier.subscriber_count == 0


@pytest.mark.asyncio
async def test_subscriptions_have_unique_ids():
    """Each subscription is identifiable."""
    notifier = InMemoryEventStreamNotifier()
    first = await notifier.subscribe(AsyncMock())
    second = await notifier.subscribe(AsyncMock())
    assert first.id != second.id


@pytest.mark.asyncio
async def test_failing_subscriber_is_isolated(caplog):
    """One failing handler doesn't prevent delivery to others."""
    notifier = InMemoryEventStreamNotifier()
    failing = AsyncMock(side_effect=RuntimeError("boom"))
    healthy = AsyncMock()
    await notifier.subscribe(failing)
    await notifier.subscribe(healthy)

    with caplog.at_level(logging.ERROR, logger="chronicle.events.notifier"):
        await notifier.notify(records(1))

    healthy.assert_awaited_once()
    assert "Subscriber failed to handle events" in caplog.text


@pytest.mark.asyncio
async def test_close_drops_all_subscribers():
    """close() releases every subscription."""
    notifier = InMemoryEventStreamNotifier()
    handler = AsyncMock()
    await notifier.subscribe(handler)

    await notifier.close()
    await notifier.notify(records(1))

    handler.assert_not_awaited()
    assert notifier.subscriber_count == 0
