"""Unit tests for SQLiteConfiguration."""

import pytest
from pydantic import ValidationError

from chronicle.integrations.sql import SQLEventStore
from chronicle.integrations.sqlite import SQLiteConfiguration, SQLiteDatabase


def test_config_with_defaults(monkeypatch):
    """Test config creation with default values."""
    monkeypatch.delenv("CHRONICLE_SQLITE_PATH", raising=False)
    monkeypatch.delenv("CHRONICLE_SQLITE_TIMEOUT", raising=False)
    monkeypatch.delenv("CHRONICLE_SQLITE_INITIALIZE_SCHEMA", raising=False)

    config = SQLiteConfiguration()

    assert config.path == "chronicle.db"
    assert config.timeout == 5.0
    assert config.initialize_schema is True


def test_config_from_environment(monkeypatch):
    """Settings are read from CHRONICLE_SQLITE_* variables."""
    monkeypatch.setenv("CHRONICLE_SQLITE_PATH", "/tmp/app-events.db")
    monkeypatch.setenv("CHRONICLE_SQLITE_TIMEOUT", "12.5")
    monkeypatch.setenv("CHRONICLE_SQLITE_INITIALIZE_SCHEMA", "false")

    config = SQLiteConfiguration()

    assert config.path == "/tmp/app-events.db"
    assert config.timeout == 12.5
    assert config.initialize_schema is False


def test_config_validation_timeout():
    """Timeouts must be non-negative."""
    with pytest.raises(ValidationError):
        SQLiteConfiguration(timeout=-1)


def test_database_is_cached():
    """The shared handle is created once."""
    config = SQLiteConfiguration(path=":memory:", timeout=1.0)

    assert config.database is config.database
    assert isinstance(config.database, SQLiteDatabase)
    assert config.database.path == ":memory:"
    assert config.database.timeout == 1.0


def test_connect_returns_independent_handles():
    """Each writer may get its own connection."""
    config = SQLiteConfiguration(path=":memory:")

    assert config.connect() is not config.connect()
    assert config.connect() is not config.database


def test_event_store_uses_shared_database():
    """Stores built by the config share its handle."""
    config = SQLiteConfiguration(path=":memory:")

    store = config.event_store()

    assert isinstance(store, SQLEventStore)
    assert store.database is config.database


@pytest.mark.asyncio
async def test_shutdown_without_database_is_noop():
    """Nothing to close if the handle was never created."""
    config = SQLiteConfiguration(path=":memory:", initialize_schema=False)

    await config.on_startup()
    await config.on_shutdown()

    assert "database" not in config.__dict__
