"""SQLite implementation of the `Database` contract.

Each `SQLiteDatabase` owns one connection in autocommit mode, so the
store's explicit ``BEGIN IMMEDIATE`` / ``COMMIT`` / ``ROLLBACK`` statements
control transactions. Blocking sqlite3 calls run in worker threads.

A handle may be shared by many tasks on one event loop. A ``BEGIN``
statement claims the connection for the calling task until its ``COMMIT``
or ``ROLLBACK``; statements from other tasks wait until then, so they
never run inside, or read the uncommitted rows of, someone else's
transaction. Writers on separate handles to the same file are serialized
by SQLite itself, waiting up to ``timeout`` seconds for the write lock.
"""

import asyncio
import logging
import sqlite3
import threading
from typing import Any

from ..sql.database import Database, DatabaseResult, ExecResult, PreparedStatement

LOGGER = logging.getLogger(__name__)

TRANSACTION_START = "BEGIN"
TRANSACTION_END = ("COMMIT", "END", "ROLLBACK")


def _leading_keyword(sql: str) -> str:
    words = sql.split(None, 1)
    return words[0].upper() if words else ""


class SQLitePreparedStatement(PreparedStatement):
    """Statement bound to an `SQLiteDatabase`. Binding returns a new statement."""

    def __init__(self, database: "SQLiteDatabase", sql: str, params: tuple[Any, ...] = ()):
        self._database = database
        self.sql = sql
        self.params = params

    def bind(self, *values: Any) -> "SQLitePreparedStatement":
        return SQLitePreparedStatement(self._database, self.sql, values)

    async def all(self) -> DatabaseResult:
        return await self._database.run_all(self.sql, self.params)


class SQLiteDatabase(Database):
    """SQLite backend handle.

    Attributes:
        path: Database file path, or ``":memory:"``.
        timeout: Seconds to wait for a locked database.

    Examples:
        >>> database = SQLiteDatabase("events.db")
        >>> result = await database.prepare("SELECT 1 AS one").all()
        >>> result.results
        [{'one': 1}]
        >>> await database.close()
    """

    def __init__(self, path: str, timeout: float = 5.0):
        self.path = path
        self.timeout = timeout
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._transaction_lock = asyncio.Lock()
        self._transaction_owner: asyncio.Task[Any] | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or open the underlying connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.path,
                timeout=self.timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            LOGGER.debug("Opened SQLite connection", extra={"path": self.path})
        return self._connection

    def prepare(self, sql: str) -> SQLitePreparedStatement:
        return SQLitePreparedStatement(self, sql)

    async def exec(self, sql: str) -> ExecResult:
        keyword = _leading_keyword(sql)
        if self._owns_transaction():
            result = await asyncio.to_thread(self._exec_sync, sql)
            if keyword in TRANSACTION_END:
                self._end_transaction(keyword)
            return result
        if keyword == TRANSACTION_START:
            return await self._begin(sql)
        async with self._transaction_lock:
            return await asyncio.to_thread(self._exec_sync, sql)

    async def run_all(self, sql: str, params: tuple[Any, ...]) -> DatabaseResult:
        if self._owns_transaction():
            return await asyncio.to_thread(self._all_sync, sql, params)
        async with self._transaction_lock:
            return await asyncio.to_thread(self._all_sync, sql, params)

    async def close(self) -> None:
        """Close the connection if it was opened."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    async def _begin(self, sql: str) -> ExecResult:
        await self._transaction_lock.acquire()
        try:
            result = await asyncio.to_thread(self._exec_sync, sql)
        except BaseException:
            self._transaction_lock.release()
            raise

        if result.success:
            self._transaction_owner = asyncio.current_task()
        else:
            self._transaction_lock.release()
        return result

    def _end_transaction(self, keyword: str) -> None:
        # A failed COMMIT can leave the transaction open for a ROLLBACK
        if keyword != "ROLLBACK" and self._connection is not None:
            if self._connection.in_transaction:
                return
        self._transaction_owner = None
        self._transaction_lock.release()

    def _owns_transaction(self) -> bool:
        return (
            self._transaction_owner is not None
            and self._transaction_owner is asyncio.current_task()
        )

    def _exec_sync(self, sql: str) -> ExecResult:
        with self._lock:
            try:
                self.connection.execute(sql)
            except sqlite3.Error as e:
                return ExecResult(success=False, error=str(e))
        return ExecResult(success=True)

    def _all_sync(self, sql: str, params: tuple[Any, ...]) -> DatabaseResult:
        with self._lock:
            try:
                cursor = self.connection.execute(sql, params)
                rows = cursor.fetchall()
                columns = [column[0] for column in cursor.description or ()]
            except sqlite3.Error as e:
                return DatabaseResult(success=False, error=str(e))

        return DatabaseResult(
            success=True,
            results=[dict(zip(columns, row)) for row in rows],
        )

    async def __aenter__(self) -> "SQLiteDatabase":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
