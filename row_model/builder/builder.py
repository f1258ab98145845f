"""Statement factory bound to one engine."""

from __future__ import annotations

from typing import Any

from row_model.builder.statements import Delete, Insert, Select, Update
from row_model.core.enums import DatabaseBackend


class QueryBuilder:
    """Hands out SELECT/INSERT/UPDATE/DELETE builders sharing one engine.

    Args:
        engine: Anything exposing ``backend`` and an awaitable
            ``run(sql, params)``; usually an AsyncEngine.
    """

    def __init__(self, engine: Any) -> None:
        self._engine = engine

    @property
    def engine(self) -> Any:
        return self._engine

    @property
    def backend(self) -> DatabaseBackend:
        """Driver descriptor used to decide on RETURNING clauses."""
        return self._engine.backend

    def select(self) -> Select:
        return Select(self._engine)

    def insert(self) -> Insert:
        return Insert(self._engine)

    def update(self) -> Update:
        return Update(self._engine)

    def delete(self) -> Delete:
        return Delete(self._engine)
