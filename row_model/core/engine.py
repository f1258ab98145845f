"""Statement execution engine.

AsyncEngine rewrites placeholders for the adapter, runs each statement on
a pooled connection in its own transaction, and returns an immutable
ExecutionResult. It is the only place where RowModel awaits I/O.
"""

from __future__ import annotations

import logging
from typing import Any

from row_model.core.connection import AsyncConnectionManager, ConnectionConfig
from row_model.core.enums import DatabaseBackend
from row_model.core.exceptions import ExecutionError
from row_model.core.params import normalize_params
from row_model.core.result import ExecutionResult

logger = logging.getLogger(__name__)


class AsyncEngine:
    """Asynchronous statement execution engine."""

    def __init__(self, connection_manager: AsyncConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._paramstyle = connection_manager.adapter.paramstyle

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> AsyncEngine:
        """Create an AsyncEngine from a ConnectionConfig.

        Args:
            config: ConnectionConfig instance

        Returns:
            AsyncEngine instance
        """
        return cls(AsyncConnectionManager(config))

    @property
    def backend(self) -> DatabaseBackend:
        """The driver descriptor of the underlying connection."""
        return self._connection_manager.backend

    async def run(self, sql: str, params: dict[str, Any] | None = None) -> ExecutionResult:
        """Execute one statement and commit it.

        Raises:
            ExecutionError: If the driver rejects the statement. The message
                is the driver's own; the driver exception is chained. The
                statement's transaction is rolled back.
        """
        if params is not None:
            sql = normalize_params(sql, self._paramstyle)
        logger.debug("Executing %s with params %s", sql, sorted(params or {}))

        adapter = self._connection_manager.adapter
        async with self._connection_manager.get_connection() as connection:
            try:
                result = await adapter.execute(connection, sql, params)
                await adapter.commit(connection)
            except Exception as e:
                await adapter.rollback(connection)
                raise ExecutionError(str(e), sql) from e
        return result

    async def close(self) -> None:
        """Close every pooled connection."""
        await self._connection_manager.close_pool()
