"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import asyncio

import pytest

from row_model.adapters.mysql import MysqlAsyncAdapter
from row_model.adapters.postgresql import PostgresqlAsyncAdapter, _build_conninfo
from row_model.adapters.protocol import AsyncAdapter
from row_model.adapters.sqlite import SqliteAsyncAdapter
from row_model.core.connection import AsyncConnectionManager, ConnectionConfig
from row_model.core.exceptions import ConnectionError, PoolError  # noqa: A004
from row_model.core.result import ExecutionResult


class TestSqliteAsyncAdapterProtocol:
    def test_implements_async_protocol(self) -> None:
        adapter = SqliteAsyncAdapter()
        assert isinstance(adapter, AsyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteAsyncAdapter()
        assert adapter.paramstyle == "named"

    async def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteAsyncAdapter()
        conn = await adapter.connect(sqlite_config)
        assert conn is not None

        result = await adapter.execute(conn, "SELECT :val AS val", {"val": 1})
        assert isinstance(result, ExecutionResult)
        assert result.rows == [{"val": 1}]

        await adapter.execute(conn, "CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
        result = await adapter.execute(conn, "INSERT INTO t (name) VALUES (:name)", {"name": "a"})
        await adapter.commit(conn)
        assert (result.rowcount, result.lastrowid, result.rows) == (1, 1, [])

        await adapter.disconnect(conn)


# --- PostgreSQL protocol compliance ---


class TestPostgresqlAsyncAdapterProtocol:
    def test_implements_async_protocol(self) -> None:
        adapter = PostgresqlAsyncAdapter()
        assert isinstance(adapter, AsyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = PostgresqlAsyncAdapter()
        assert adapter.paramstyle == "pyformat"

    def test_conninfo(self) -> None:
        config = ConnectionConfig(
            driver="postgresql", host="db", port=5432, user="app", password="pw", database="main"
        )
        assert _build_conninfo(config) == "host=db port=5432 user=app password=pw dbname=main"


# --- MySQL protocol compliance ---


class TestMysqlAsyncAdapterProtocol:
    def test_implements_async_protocol(self) -> None:
        adapter = MysqlAsyncAdapter()
        assert isinstance(adapter, AsyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = MysqlAsyncAdapter()
        assert adapter.paramstyle == "pyformat"


class TestAsyncConnectionManager:
    def test_loads_adapter_for_driver(self, sqlite_config: ConnectionConfig) -> None:
        manager = AsyncConnectionManager(sqlite_config)
        assert isinstance(manager.adapter, SqliteAsyncAdapter)

    async def test_connection_returns_to_pool(self, sqlite_config: ConnectionConfig) -> None:
        manager = AsyncConnectionManager(sqlite_config)
        async with manager.get_connection() as conn:
            assert conn is not None
        async with manager.get_connection() as again:
            assert again is conn
        await manager.close_pool()

    async def test_waiting_borrower_gets_released_connection(
        self, sqlite_config: ConnectionConfig
    ) -> None:
        manager = AsyncConnectionManager(sqlite_config)
        order = []

        async def borrow(name: str) -> None:
            async with manager.get_connection():
                order.append(f"{name} in")
                await asyncio.sleep(0)
                order.append(f"{name} out")

        await asyncio.gather(borrow("a"), borrow("b"))
        assert order == ["a in", "a out", "b in", "b out"]
        await manager.close_pool()

    def test_pool_size_must_be_positive(self) -> None:
        config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=0)
        with pytest.raises(PoolError, match="pool_size"):
            AsyncConnectionManager(config)

    async def test_connect_failure(self, tmp_path) -> None:
        config = ConnectionConfig(
            driver="sqlite", database=str(tmp_path / "missing" / "app.db"), pool_size=1
        )
        manager = AsyncConnectionManager(config)
        with pytest.raises(ConnectionError, match="Cannot connect to sqlite database"):
            await manager.initialize_pool()

    async def test_borrow_from_uninitialized_pool(
        self, sqlite_config: ConnectionConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        manager = AsyncConnectionManager(sqlite_config)

        async def no_pool() -> None:
            return None

        monkeypatch.setattr(manager, "initialize_pool", no_pool)
        with pytest.raises(PoolError, match="not initialized"):
            async with manager.get_connection():
                pass
