"""SQLite configuration using pydantic-settings."""

from functools import cached_property

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ...events import EventStreamNotifier
from ..sql import SQLEventStore
from .database import SQLiteDatabase


class SQLiteConfiguration(BaseSettings):
    """Configuration and factory for SQLite-backed event stores.

    Implements ``on_startup`` / ``on_shutdown`` lifecycle hooks: the schema
    is created on startup (unless disabled) and the shared connection is
    closed on shutdown.

    All settings can be configured via environment variables with the
    CHRONICLE_SQLITE_ prefix. For example:
    - CHRONICLE_SQLITE_PATH=/var/lib/app/events.db
    - CHRONICLE_SQLITE_TIMEOUT=10

    Attributes:
        path: Database file path. ``":memory:"`` gives a private database
            per connection, so it only suits single-connection use.
        timeout: Seconds a writer waits for another writer's transaction.
        initialize_schema: Create the events table and indexes on startup.

    Example:
        >>> config = SQLiteConfiguration(path="events.db")
        >>> await config.on_startup()
        >>> store = config.event_store()
        >>>
        >>> # A second writer on its own connection
        >>> other = SQLEventStore(config.connect())
    """

    path: str = "chronicle.db"
    timeout: float = Field(default=5.0, ge=0)
    initialize_schema: bool = True

    model_config = SettingsConfigDict(env_prefix="CHRONICLE_SQLITE_")

    @cached_property
    def database(self) -> SQLiteDatabase:
        """Get the shared database handle.

        The handle is lazily created and cached for reuse. Tasks on one
        event loop may share it; their transactions run one at a time.
        """
        return self.connect()

    def connect(self) -> SQLiteDatabase:
        """Open a new, independent database handle on the configured file."""
        return SQLiteDatabase(self.path, timeout=self.timeout)

    def event_store(self, notifier: EventStreamNotifier | None = None) -> SQLEventStore:
        """Create a store on the shared database handle."""
        return SQLEventStore(self.database, notifier=notifier)

    async def on_startup(self) -> None:
        """Called when the application starts.

        Creates the schema through the shared handle if enabled.
        """
        if self.initialize_schema:
            await SQLEventStore(self.database).initialize_schema()

    async def on_shutdown(self) -> None:
        """Called when the application shuts down.

        Closes the shared connection if it was created.
        """
        if "database" in self.__dict__:
            await self.database.close()
