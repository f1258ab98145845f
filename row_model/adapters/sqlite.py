"""SQLite adapter using aiosqlite."""

from __future__ import annotations

from typing import Any

from row_model.core.connection import ConnectionConfig
from row_model.core.result import ExecutionResult


class SqliteAsyncAdapter:
    """aiosqlite binding. ``:memory:`` databases are private to one connection."""

    @property
    def paramstyle(self) -> str:
        return "named"

    async def connect(self, config: ConnectionConfig) -> Any:
        import aiosqlite

        connection = await aiosqlite.connect(config.database, **config.extra)
        connection.row_factory = aiosqlite.Row
        await connection.execute("PRAGMA foreign_keys=ON")
        return connection

    async def disconnect(self, connection: Any) -> None:
        await connection.close()

    async def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        async with connection.execute(sql, params or {}) as cursor:
            rows = [dict(row) for row in await cursor.fetchall()]
            return ExecutionResult(rows=rows, rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)

    async def commit(self, connection: Any) -> None:
        await connection.commit()

    async def rollback(self, connection: Any) -> None:
        await connection.rollback()
