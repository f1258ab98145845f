"""Connection configuration and pooling.

ConnectionConfig is a Pydantic model for type-safe connection config.
AsyncConnectionManager opens ``pool_size`` connections through the
backend's adapter and lends them out one coroutine at a time; a
coroutine finding the pool empty waits for a connection to come back.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from contextlib import asynccontextmanager
from typing import Any

from pydantic import BaseModel

from row_model.core.enums import DatabaseBackend
from row_model.core.exceptions import AdapterError, ConnectionError, PoolError  # noqa: A004

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = 5
    extra: dict[str, Any] = {}

    @property
    def backend(self) -> DatabaseBackend:
        """The backend this config targets."""
        try:
            return DatabaseBackend.from_driver(self.driver)
        except ValueError:
            raise AdapterError(f"Unsupported database driver: {self.driver}") from None


# backend → (module_path, adapter_class)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_model.adapters.sqlite", "SqliteAsyncAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_model.adapters.postgresql", "PostgresqlAsyncAdapter"),
    DatabaseBackend.MYSQL: ("row_model.adapters.mysql", "MysqlAsyncAdapter"),
}


def _load_adapter(backend: DatabaseBackend) -> Any:
    module_path, cls_name = _ADAPTER_MAP[backend]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{backend.value}': {e}") from e


class AsyncConnectionManager:
    """Pool of adapter connections, opened lazily on first use."""

    def __init__(self, config: ConnectionConfig) -> None:
        if config.pool_size < 1:
            raise PoolError(f"pool_size must be at least 1, got {config.pool_size}")
        self.config = config
        self._backend = config.backend
        self._adapter = _load_adapter(self._backend)
        self._idle: asyncio.Queue[Any] | None = None
        self._connections: list[Any] = []
        self._lock = asyncio.Lock()

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def backend(self) -> DatabaseBackend:
        return self._backend

    async def initialize_pool(self) -> None:
        """Open every pooled connection; a no-op once the pool is open."""
        async with self._lock:
            if self._idle is not None:
                return
            logger.debug(
                "Opening %d %s connection(s) to %s",
                self.config.pool_size,
                self._backend.value,
                self.config.database,
            )
            idle: asyncio.Queue[Any] = asyncio.Queue()
            try:
                for _ in range(self.config.pool_size):
                    connection = await self._adapter.connect(self.config)
                    self._connections.append(connection)
                    idle.put_nowait(connection)
            except Exception as e:
                await self._disconnect_all()
                raise ConnectionError(
                    f"Cannot connect to {self._backend.value} database {self.config.database!r}: {e}"
                ) from e
            self._idle = idle

    @asynccontextmanager
    async def get_connection(self):  # type: ignore[no-untyped-def]
        """Borrow a connection for the duration of the ``async with`` block."""
        if self._idle is None:
            await self.initialize_pool()
        idle = self._idle
        if idle is None:
            raise PoolError("Connection pool is not initialized")
        connection = await idle.get()
        try:
            yield connection
        finally:
            idle.put_nowait(connection)

    async def close_pool(self) -> None:
        """Close every pooled connection. The pool reopens on next use."""
        async with self._lock:
            if self._idle is None:
                return
            self._idle = None
            await self._disconnect_all()

    async def _disconnect_all(self) -> None:
        connections, self._connections = self._connections, []
        for connection in connections:
            await self._adapter.disconnect(connection)
