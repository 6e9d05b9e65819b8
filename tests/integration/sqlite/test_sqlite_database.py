"""Integration tests for the SQLite Database contract implementation."""

import asyncio

import pytest

from chronicle.integrations.sqlite import SQLiteDatabase


@pytest.mark.asyncio
async def test_prepared_statement_returns_row_mappings(tmp_path):
    """Rows come back as column-name mappings."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        result = await database.prepare("SELECT ? AS a, ? AS b").bind(1, "two").all()

    assert result.success is True
    assert result.results == [{"a": 1, "b": "two"}]


@pytest.mark.asyncio
async def test_bind_returns_new_statement(tmp_path):
    """Binding doesn't mutate the prepared statement."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        statement = database.prepare("SELECT ? AS a")
        bound = statement.bind(5)

        assert bound is not statement
        assert bound.params == (5,)
        assert statement.params == ()


@pytest.mark.asyncio
async def test_failures_are_reported_not_raised(tmp_path):
    """SQL errors become unsuccessful results."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        result = await database.prepare("SELECT * FROM missing_table").all()
        exec_result = await database.exec("NOT SQL")

    assert result.success is False
    assert "missing_table" in (result.error or "")
    assert exec_result.success is False
    assert exec_result.error


@pytest.mark.asyncio
async def test_explicit_transactions_control_visibility(tmp_path):
    """Rolled back writes are not visible; committed writes are."""
    path = str(tmp_path / "db.sqlite")
    async with SQLiteDatabase(path) as database:
        assert (await database.exec("CREATE TABLE t (v INTEGER)")).success

        await database.exec("BEGIN IMMEDIATE TRANSACTION")
        await database.prepare("INSERT INTO t (v) VALUES (?)").bind(1).all()
        await database.exec("ROLLBACK")

        await database.exec("BEGIN IMMEDIATE TRANSACTION")
        await database.prepare("INSERT INTO t (v) VALUES (?)").bind(2).all()
        await database.exec("COMMIT")

    async with SQLiteDatabase(path) as other:
        result = await other.prepare("SELECT v FROM t").all()

    assert result.results == [{"v": 2}]


@pytest.mark.asyncio
async def test_close_is_idempotent(tmp_path):
    """Closing twice is harmless and the handle reopens lazily."""
    database = SQLiteDatabase(str(tmp_path / "db.sqlite"))
    await database.prepare("SELECT 1 AS one").all()

    await database.close()
    await database.close()

    result = await database.prepare("SELECT 1 AS one").all()
    assert result.results == [{"one": 1}]
    await database.close()


@pytest.mark.asyncio
async def test_other_tasks_wait_for_an_open_transaction(tmp_path):
    """Statements from another task never see uncommitted rows."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        await database.exec("CREATE TABLE t (v INTEGER)")
        await database.exec("BEGIN IMMEDIATE TRANSACTION")
        await database.prepare("INSERT INTO t (v) VALUES (?)").bind(1).all()

        reader = asyncio.create_task(database.prepare("SELECT COUNT(*) AS n FROM t").all())
        await asyncio.sleep(0.05)
        assert not reader.done()

        await database.exec("ROLLBACK")
        result = await reader

    assert result.results == [{"n": 0}]


@pytest.mark.asyncio
async def test_concurrent_transactions_on_one_handle_are_serialized(tmp_path):
    """A second BEGIN from another task waits for the first COMMIT."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        await database.exec("CREATE TABLE t (v INTEGER)")

        async def write(value: int) -> bool:
            began = await database.exec("BEGIN IMMEDIATE TRANSACTION")
            await database.prepare("INSERT INTO t (v) VALUES (?)").bind(value).all()
            await asyncio.sleep(0)
            committed = await database.exec("COMMIT")
            return began.success and committed.success

        outcomes = await asyncio.gather(*(write(value) for value in range(3)))
        result = await database.prepare("SELECT v FROM t ORDER BY v").all()

    assert outcomes == [True, True, True]
    assert result.results == [{"v": 0}, {"v": 1}, {"v": 2}]


@pytest.mark.asyncio
async def test_failed_begin_releases_the_handle(tmp_path):
    """A BEGIN that fails leaves no claim on the connection."""
    async with SQLiteDatabase(str(tmp_path / "db.sqlite")) as database:
        failed = await database.exec("BEGIN NONSENSE")

        result = await asyncio.wait_for(database.prepare("SELECT 1 AS one").all(), timeout=1.0)

    assert failed.success is False
    assert result.results == [{"one": 1}]
