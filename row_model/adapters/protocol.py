"""Database adapter protocol.

An adapter binds one driver: it opens and closes single connections and
runs one statement at a time on them. Pooling belongs to
AsyncConnectionManager, transaction boundaries to AsyncEngine.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_model.core.connection import ConnectionConfig
from row_model.core.result import ExecutionResult


@runtime_checkable
class AsyncAdapter(Protocol):
    """Asynchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Placeholder style the driver expects: 'named' or 'pyformat'."""
        ...

    async def connect(self, config: ConnectionConfig) -> Any:
        """Open one connection."""
        ...

    async def disconnect(self, connection: Any) -> None:
        ...

    async def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        """Run *sql* and collect its rows as dicts, its row count and generated key."""
        ...

    async def commit(self, connection: Any) -> None:
        ...

    async def rollback(self, connection: Any) -> None:
        ...
