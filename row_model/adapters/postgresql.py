"""PostgreSQL adapter using psycopg (v3+) async support."""

from __future__ import annotations

from typing import Any

from row_model.core.connection import ConnectionConfig
from row_model.core.result import ExecutionResult


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    fields = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "dbname": config.database,
    }
    return " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)


class PostgresqlAsyncAdapter:
    """psycopg binding returning dict rows.

    PostgreSQL reports no generated key; INSERTs ask for it with RETURNING.
    """

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    async def connect(self, config: ConnectionConfig) -> Any:
        import psycopg
        from psycopg.rows import dict_row

        return await psycopg.AsyncConnection.connect(
            _build_conninfo(config), row_factory=dict_row, **config.extra
        )

    async def disconnect(self, connection: Any) -> None:
        await connection.close()

    async def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        async with connection.cursor() as cursor:
            await cursor.execute(sql, params)
            rows = await cursor.fetchall() if cursor.description is not None else []
            return ExecutionResult(rows=[dict(row) for row in rows], rowcount=cursor.rowcount)

    async def commit(self, connection: Any) -> None:
        await connection.commit()

    async def rollback(self, connection: Any) -> None:
        await connection.rollback()
