"""SQL implementation of EventStore with scoped optimistic concurrency.

The store combines coarse filtering in SQL (event types only) with a
precise in-memory predicate match, and re-derives the watermark of an
append's scope inside an immediate write transaction before inserting.
"""

import logging
from typing import Any

from ...domain import (
    ConcurrencyError,
    ConfigurationError,
    DatabaseError,
    Event,
    EventQuery,
    EventRecord,
    QueryResult,
    StatementPhase,
    filter_events_by_query,
    serialize_payload,
)
from ...events import (
    AppendScope,
    EventStore,
    EventStreamNotifier,
    EventSubscription,
    FilterCriteria,
    HandleEvents,
    InMemoryEventStreamNotifier,
    Scoped,
    to_event_query,
)
from .database import Database
from .schema import SCHEMA_STATEMENTS
from .sql import build_context_query_sql
from .transform import EventRow, extract_max_sequence_number, map_rows_to_events

LOGGER = logging.getLogger(__name__)

BEGIN_TRANSACTION_SQL = "BEGIN IMMEDIATE TRANSACTION"
COMMIT_SQL = "COMMIT"
ROLLBACK_SQL = "ROLLBACK"

INSERT_EVENT_SQL = """
INSERT INTO events (event_type, payload)
VALUES (?, ?)
RETURNING sequence_number, occurred_at, event_type, payload
"""


class SQLEventStore(EventStore):
    """Event store over any backend implementing the `Database` contract.

    Reads run one SELECT narrowed by event type, then keep only the rows
    matching the query precisely. The watermark of a result is taken from
    the precisely filtered records, so it describes exactly the scope the
    caller will later assert against.

    Appends run in a single ``BEGIN IMMEDIATE`` transaction: the scope's
    watermark is recomputed, compared with the caller's, and only then are
    the events inserted. The backend serializes conflicting transactions;
    the store itself holds no locks. Subscribers are notified after the
    commit with exactly the inserted records.

    Attributes:
        database: Backend handle.
        notifier: Post-commit fan-out to subscribers.

    Examples:
        >>> config = SQLiteConfiguration(path="events.db")
        >>> store = SQLEventStore(config.database)
        >>> await store.initialize_schema()
        >>>
        >>> scope = create_filter(["StudentSubscribed"], [{"course_id": "c1"}])
        >>> result = await store.query(scope)
        >>> await store.append(new_events, scope, result.max_sequence_number)
    """

    def __init__(self, database: Database | None, notifier: EventStreamNotifier | None = None):
        """Initialize the store.

        Args:
            database: Backend handle. Required.
            notifier: Subscriber fan-out, defaults to an in-memory notifier.

        Raises:
            ConfigurationError: If no database handle is given.
        """
        if database is None:
            raise ConfigurationError(
                "Database handle missing. Pass the backend binding to SQLEventStore."
            )
        self.database = database
        self.notifier = notifier if notifier is not None else InMemoryEventStreamNotifier()

    async def initialize_schema(self) -> None:
        """Create the events table and its indexes if they don't exist."""
        for statement in SCHEMA_STATEMENTS:
            await self._exec(statement, StatementPhase.SCHEMA)

    async def query(self, filter_criteria: FilterCriteria | None = None) -> QueryResult:
        query = to_event_query(filter_criteria) if filter_criteria is not None else None
        events = await self._run_query(query)
        return QueryResult(events=events, max_sequence_number=extract_max_sequence_number(events))

    async def subscribe(self, handle: HandleEvents) -> EventSubscription:
        return await self.notifier.subscribe(handle)

    async def append_in_scope(self, events: list[Event], scope: AppendScope) -> list[EventRecord]:
        if not events:
            return []

        inserted: list[EventRecord] = []
        transaction_started = False

        try:
            await self._exec(BEGIN_TRANSACTION_SQL, StatementPhase.BEGIN)
            transaction_started = True

            if isinstance(scope, Scoped):
                await self._check_watermark(scope)

            for event in events:
                rows = await self._execute_all(
                    INSERT_EVENT_SQL,
                    [event.event_type, serialize_payload(event.payload)],
                    StatementPhase.INSERT,
                )
                inserted.extend(map_rows_to_events(rows))

            await self._exec(COMMIT_SQL, StatementPhase.COMMIT)
            transaction_started = False
        except BaseException:
            if transaction_started:
                await self._rollback_preserving_error()
            raise

        LOGGER.info(
            "Appended events",
            extra={
                "event_count": len(inserted),
                "event_types": sorted({record.event_type for record in inserted}),
                "scoped": isinstance(scope, Scoped),
                "max_sequence_number": inserted[-1].sequence_number if inserted else None,
            },
        )

        await self.notifier.notify(inserted)
        return inserted

    async def close(self) -> None:
        await self.notifier.close()

    async def _check_watermark(self, scope: Scoped) -> None:
        events = await self._run_query(scope.query)
        current = extract_max_sequence_number(events)
        if current != scope.expected_max_sequence_number:
            LOGGER.warning(
                "Append rejected, scope changed since it was queried",
                extra={"expected": scope.expected_max_sequence_number, "actual": current},
            )
            raise ConcurrencyError(expected=scope.expected_max_sequence_number, actual=current)

    async def _run_query(self, query: EventQuery | None) -> list[EventRecord]:
        sql_query = build_context_query_sql(query)
        rows = await self._execute_all(sql_query.sql, sql_query.params, StatementPhase.QUERY)
        events = filter_events_by_query(map_rows_to_events(rows), query)
        LOGGER.debug(
            "Queried events",
            extra={"rows_scanned": len(rows), "rows_matched": len(events)},
        )
        return events

    async def _execute_all(
        self, sql: str, params: list[Any], phase: StatementPhase
    ) -> list[EventRow]:
        statement = self.database.prepare(sql)
        if params:
            statement = statement.bind(*params)

        result = await statement.all()
        if not result.success:
            raise DatabaseError(phase, result.error)

        rows: list[EventRow] = result.results or []  # type: ignore[assignment]
        return rows

    async def _exec(self, sql: str, phase: StatementPhase) -> None:
        result = await self.database.exec(sql)
        if not result.success:
            raise DatabaseError(phase, result.error)

    async def _rollback_preserving_error(self) -> None:
        # Called from an except block; the error being handled must win
        try:
            await self._exec(ROLLBACK_SQL, StatementPhase.ROLLBACK)
        except Exception:
            LOGGER.exception("Rollback failed while handling an append error")
