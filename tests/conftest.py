"""Central test fixtures."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from chronicle.domain import Event
from chronicle.integrations.sql import SQLEventStore
from chronicle.integrations.sqlite import SQLiteConfiguration


@pytest.fixture
def sqlite_config(tmp_path: Path) -> SQLiteConfiguration:
    """Configuration pointing at a fresh database file."""
    return SQLiteConfiguration(path=str(tmp_path / "events.db"), timeout=5.0)


@pytest_asyncio.fixture
async def sqlite_store(sqlite_config: SQLiteConfiguration) -> AsyncIterator[SQLEventStore]:
    """Store on the shared connection, with the schema created."""
    await sqlite_config.on_startup()
    store = sqlite_config.event_store()
    yield store
    await store.close()
    await sqlite_config.on_shutdown()


@pytest_asyncio.fixture
async def second_sqlite_store(sqlite_config: SQLiteConfiguration) -> AsyncIterator[SQLEventStore]:
    """A concurrent writer on its own connection to the same file."""
    database = sqlite_config.connect()
    store = SQLEventStore(database)
    yield store
    await store.close()
    await database.close()


@pytest.fixture
def course_created() -> Event:
    return Event(event_type="CourseCreated", payload={"course_id": "c1", "capacity": 2})


@pytest.fixture
def student_subscribed() -> Event:
    return Event(
        event_type="StudentSubscribed",
        payload={"course_id": "c1", "student": {"id": "s1", "tags": ["math", "evening"]}},
    )
