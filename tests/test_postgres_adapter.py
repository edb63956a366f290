from __future__ import annotations

from typing import Any, List, Optional

import psycopg
import pytest
from psycopg_pool import PoolTimeout

from adapters.db.postgres_adapter import PostgresAdapter
from querygate.errors import (
    ConfigurationError,
    ErrorCode,
    ExecutionError,
    ResourceExhaustionError,
)


class FakeCursor:
    def __init__(self, conn: "FakeConn") -> None:
        self.conn = conn
        self.description = None
        self._rows: List[dict] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> None:
        self.conn.statements.append((sql, params))
        if self.conn.fail_on and self.conn.fail_on in sql:
            raise self.conn.error
        if sql.lstrip().lower().startswith("select"):
            self.description = [("x",)]
            self._rows = [{"x": 1}]

    async def fetchall(self):
        return self._rows


class FakeConn:
    def __init__(self, fail_on: Optional[str] = None, error: Optional[Exception] = None):
        self.statements: List[tuple] = []
        self.fail_on = fail_on
        self.error = error
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, row_factory=None):
        return FakeCursor(self)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class FakePool:
    closed = False

    def __init__(self, conn: Optional[FakeConn] = None, exhausted: bool = False):
        self.conn = conn or FakeConn()
        self.exhausted = exhausted
        self.out = 0
        self.returned = 0

    async def getconn(self, timeout=None):
        if self.exhausted:
            raise PoolTimeout(f"couldn't get a connection after {timeout:.2f} sec")
        self.out += 1
        return self.conn

    async def putconn(self, conn):
        self.returned += 1

    async def close(self):
        self.closed = True


def _adapter(pool: FakePool) -> PostgresAdapter:
    return PostgresAdapter("postgresql://u:p@localhost/db", pool=pool)


def test_missing_dsn_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as ei:
        PostgresAdapter("")
    assert "DATABASE_URL" in ei.value.message


@pytest.mark.asyncio
async def test_transaction_is_read_only_and_commits():
    pool = FakePool()
    adapter = _adapter(pool)

    async with adapter.read_only_transaction() as session:
        rows, cols = await session.fetch("select 1 as x")

    assert rows == [{"x": 1}]
    assert cols == ["x"]
    assert pool.conn.statements[0] == ("SET TRANSACTION READ ONLY", None)
    assert pool.conn.commits == 1
    assert pool.conn.rollbacks == 0
    assert pool.out == pool.returned == 1


@pytest.mark.asyncio
async def test_driver_error_rolls_back_releases_and_wraps():
    conn = FakeConn(
        fail_on="missing",
        error=psycopg.errors.UndefinedTable('relation "missing" does not exist'),
    )
    pool = FakePool(conn)
    adapter = _adapter(pool)

    with pytest.raises(ExecutionError) as ei:
        async with adapter.read_only_transaction() as session:
            await session.fetch("select * from missing", [1])

    err = ei.value
    assert 'relation "missing" does not exist' in err.message
    assert err.code == ErrorCode.DB_EXECUTION_ERROR
    assert err.error_type == "UndefinedTable"
    assert err.sqlstate == "42P01"
    assert isinstance(err.__cause__, psycopg.errors.UndefinedTable)
    assert conn.rollbacks == 1
    assert conn.commits == 0
    assert pool.returned == 1


@pytest.mark.asyncio
async def test_statement_timeout_maps_to_db_timeout():
    conn = FakeConn(
        fail_on="pg_sleep",
        error=psycopg.errors.QueryCanceled("canceling statement due to statement timeout"),
    )
    adapter = _adapter(FakePool(conn))

    with pytest.raises(ExecutionError) as ei:
        async with adapter.read_only_transaction() as session:
            await session.fetch("select pg_sleep(120)")

    assert ei.value.code == ErrorCode.DB_TIMEOUT
    assert ei.value.retryable is True
    assert ei.value.sqlstate == "57014"
    assert conn.rollbacks == 1


@pytest.mark.asyncio
async def test_pool_timeout_is_resource_exhaustion():
    pool = FakePool(exhausted=True)
    adapter = _adapter(pool)

    with pytest.raises(ResourceExhaustionError) as ei:
        async with adapter.read_only_transaction():
            pass

    assert ei.value.retryable is True
    assert ei.value.code == ErrorCode.POOL_EXHAUSTED
    assert pool.returned == 0


@pytest.mark.asyncio
async def test_non_driver_exception_in_body_still_rolls_back():
    pool = FakePool()
    adapter = _adapter(pool)

    with pytest.raises(RuntimeError):
        async with adapter.read_only_transaction():
            raise RuntimeError("boom")

    assert pool.conn.rollbacks == 1
    assert pool.returned == 1


@pytest.mark.asyncio
async def test_ping_and_close():
    pool = FakePool()
    adapter = _adapter(pool)

    await adapter.ping()
    assert ("select 1", None) in pool.conn.statements

    await adapter.close()
    assert pool.closed is True


class ClosingPool(FakePool):
    """Pool whose owner is shut down while a connection is being handed out."""

    adapter: PostgresAdapter

    async def getconn(self, timeout=None):
        conn = await super().getconn(timeout)
        await self.adapter.close()
        return conn


@pytest.mark.asyncio
async def test_connection_returns_to_its_own_pool_after_close():
    pool = ClosingPool()
    adapter = _adapter(pool)
    pool.adapter = adapter

    async with adapter.read_only_transaction() as session:
        await session.fetch("select 1 as x")

    assert pool.closed is True
    assert pool.out == pool.returned == 1
    assert adapter._pool is None
