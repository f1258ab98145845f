"""MySQL adapter using aiomysql."""

from __future__ import annotations

from typing import Any

from row_model.core.connection import ConnectionConfig
from row_model.core.result import ExecutionResult


class MysqlAsyncAdapter:
    """aiomysql binding using dict cursors."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    async def connect(self, config: ConnectionConfig) -> Any:
        import aiomysql

        return await aiomysql.connect(
            host=config.host or "localhost",
            port=config.port or 3306,
            user=config.user,
            password=config.password or "",
            db=config.database,
            cursorclass=aiomysql.DictCursor,
            **config.extra,
        )

    async def disconnect(self, connection: Any) -> None:
        await connection.ensure_closed()

    async def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        async with connection.cursor() as cursor:
            await cursor.execute(sql, params)
            rows = await cursor.fetchall() if cursor.description else []
            return ExecutionResult(
                rows=[dict(row) for row in rows],
                rowcount=cursor.rowcount,
                lastrowid=cursor.lastrowid,
            )

    async def commit(self, connection: Any) -> None:
        await connection.commit()

    async def rollback(self, connection: Any) -> None:
        await connection.rollback()
