"""SELECT, INSERT, UPDATE and DELETE statement builders.

Each builder is chainable and assembles a SQLAlchemy Core statement.
``compile()`` renders it for the engine's backend with ``:name``
parameters and dialect-quoted identifiers; ``exec()`` runs it through an
engine exposing ``run(sql, params) -> ExecutionResult`` and ``backend``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import sqlalchemy as sa
from sqlalchemy import exc as sa_exc
from sqlalchemy.dialects.mysql.base import MySQLDialect
from sqlalchemy.dialects.postgresql.base import PGDialect
from sqlalchemy.dialects.sqlite.base import SQLiteDialect
from sqlalchemy.engine.interfaces import Dialect
from sqlalchemy.sql.elements import ColumnElement

from row_model.builder.expressions import (
    Params,
    Predicate,
    Scope,
    build_condition,
    column_name,
    table_name,
)
from row_model.core.enums import DatabaseBackend
from row_model.core.exceptions import QueryBuildError
from row_model.core.result import ExecutionResult

_DIRECTIONS = frozenset({"ASC", "DESC"})

_DIALECTS: dict[DatabaseBackend, type[Dialect]] = {
    DatabaseBackend.SQLITE: SQLiteDialect,
    DatabaseBackend.POSTGRESQL: PGDialect,
    DatabaseBackend.MYSQL: MySQLDialect,
}


@lru_cache(maxsize=None)
def dialect_for(backend: DatabaseBackend) -> Dialect:
    """SQLAlchemy dialect rendering *backend*'s SQL with ``:name`` parameters."""
    return _DIALECTS[backend](paramstyle="named")


@dataclass(frozen=True)
class CompiledStatement:
    """SQL text plus the values of its named parameters."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


def _check_row(row: Any) -> dict[str, Any]:
    if not isinstance(row, Mapping) or not row:
        raise QueryBuildError(f"row must be a non-empty mapping, got {row!r}")
    return {column_name(column): value for column, value in row.items()}


def _count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QueryBuildError(f"{what} must be a non-negative integer, got {value!r}")
    return value


class Statement:
    """Base class: owns the engine, the table scope and the parameter counter."""

    def __init__(self, engine: Any) -> None:
        self._engine = engine
        self._scope = Scope()
        self._params = Params()

    def _build(self) -> Any:
        raise NotImplementedError

    def compile(self) -> CompiledStatement:
        statement = self._build()
        try:
            compiled = statement.compile(
                dialect=dialect_for(self._engine.backend),
                compile_kwargs={"render_postcompile": True},
            )
        except sa_exc.SQLAlchemyError as e:
            raise QueryBuildError(str(e)) from e
        return CompiledStatement(" ".join(compiled.string.split()), dict(compiled.params))

    async def _run(self) -> ExecutionResult:
        compiled = self.compile()
        return await self._engine.run(compiled.sql, compiled.params)

    def _condition(self, predicate: Predicate) -> ColumnElement[Any]:
        return build_condition(self._scope, self._params, predicate)

    def __str__(self) -> str:
        return self.compile().sql


class Select(Statement):
    """SELECT builder. ``exec()`` resolves to a list of row dicts."""

    def __init__(self, engine: Any) -> None:
        super().__init__(engine)
        self._columns: list[ColumnElement[Any]] = []
        self._table: str | None = None
        self._distinct = False
        self._joins: list[tuple[str, str, ColumnElement[Any]]] = []
        self._wheres: list[ColumnElement[Any]] = []
        self._groups: list[ColumnElement[Any]] = []
        self._havings: list[ColumnElement[Any]] = []
        self._orders: list[ColumnElement[Any]] = []
        self._limit: int | None = None
        self._offset: int | None = None

    def col(self, *columns: str) -> Select:
        """Replace the select list."""
        self._columns = [self._scope.selectable(c) for c in columns]
        return self

    def from_(self, table: str) -> Select:
        self._table = table_name(table)
        return self

    def distinct(self) -> Select:
        self._distinct = True
        return self

    def join(self, table: str, predicate: Predicate) -> Select:
        return self._join("INNER", table, predicate)

    def left_join(self, table: str, predicate: Predicate) -> Select:
        return self._join("LEFT", table, predicate)

    def right_join(self, table: str, predicate: Predicate) -> Select:
        return self._join("RIGHT", table, predicate)

    def where(self, predicate: Predicate) -> Select:
        """Add a WHERE condition; repeated calls are combined with AND."""
        self._wheres.append(self._condition(predicate))
        return self

    def group_by(self, *columns: str) -> Select:
        self._groups.extend(self._scope.column(c) for c in columns)
        return self

    def having(self, predicate: Predicate) -> Select:
        self._havings.append(self._condition(predicate))
        return self

    def order_by(self, column: str, direction: str = "ASC") -> Select:
        direction = str(direction).upper()
        if direction not in _DIRECTIONS:
            raise QueryBuildError(f"invalid sort direction {direction!r}")
        target = self._scope.column(column)
        self._orders.append(target.desc() if direction == "DESC" else target.asc())
        return self

    def limit(self, count: int) -> Select:
        self._limit = _count(count, "limit")
        return self

    def offset(self, count: int) -> Select:
        self._offset = _count(count, "offset")
        return self

    def paginate(self, page: int, size: int = 10) -> Select:
        """Select page *page* (1-based) of *size* rows."""
        if _count(page, "page") < 1 or _count(size, "page size") < 1:
            raise QueryBuildError("page and page size start at 1")
        return self.limit(size).offset((page - 1) * size)

    def _build(self) -> sa.Select[Any]:
        if self._table is None:
            raise QueryBuildError("SELECT needs a table")
        if self._offset is not None and self._limit is None:
            raise QueryBuildError("OFFSET needs a LIMIT")

        source: Any = self._scope.table(self._table)
        for kind, table, on in self._joins:
            joined = self._scope.table(table)
            if kind == "RIGHT":
                # A RIGHT JOIN B is B LEFT JOIN A.
                source = joined.join(source, on, isouter=True)
            else:
                source = source.join(joined, on, isouter=kind == "LEFT")

        statement = sa.select(*(self._columns or [sa.literal_column("*")])).select_from(source)
        if self._distinct:
            statement = statement.distinct()
        if self._wheres:
            statement = statement.where(*self._wheres)
        if self._groups:
            statement = statement.group_by(*self._groups)
        if self._havings:
            statement = statement.having(*self._havings)
        if self._orders:
            statement = statement.order_by(*self._orders)
        if self._limit is not None:
            statement = statement.limit(self._limit)
        if self._offset is not None:
            statement = statement.offset(self._offset)
        return statement

    async def exec(self) -> Any:
        result = await self._run()
        return result.rows

    def _join(self, kind: str, table: str, predicate: Predicate) -> Select:
        self._joins.append((kind, table_name(table), self._condition(predicate)))
        return self


class Insert(Statement):
    """INSERT builder.

    ``exec()`` resolves to:

    * the returned row, for a single row with ``returning()``;
    * the list of returned rows, for several rows with ``returning()``;
    * the driver's generated key, for a single row without ``returning()``;
    * ``None`` for several rows without ``returning()``.
    """

    def __init__(self, engine: Any) -> None:
        super().__init__(engine)
        self._table: str | None = None
        self._rows: list[dict[str, Any]] = []
        self._returning: list[str] = []

    def into(self, table: str) -> Insert:
        self._table = table_name(table)
        return self

    def row(self, row: Mapping[str, Any]) -> Insert:
        self._rows = [_check_row(row)]
        return self

    def rows(self, rows: Sequence[Mapping[str, Any]]) -> Insert:
        if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence) or not rows:
            raise QueryBuildError(f"rows must be a non-empty list of mappings, got {rows!r}")
        checked = [_check_row(row) for row in rows]
        columns = list(checked[0])
        for row in checked[1:]:
            if set(row) != set(columns):
                raise QueryBuildError(f"every row must have the columns {columns}")
        self._rows = checked
        return self

    def returning(self, *columns: str) -> Insert:
        self._returning = [column_name(c) for c in columns]
        return self

    def _build(self) -> sa.Insert:
        if self._table is None:
            raise QueryBuildError("INSERT needs a table")
        if not self._rows:
            raise QueryBuildError("INSERT needs at least one row")

        table = self._scope.table(self._table)
        columns = list(self._rows[0])
        for column in columns:
            self._scope.column_of(table, column)
        params = self._params.copy()
        values = [{c: params.bind(row[c]) for c in columns} for row in self._rows]
        statement = sa.insert(table).values(values[0] if len(values) == 1 else values)
        if self._returning:
            statement = statement.returning(*(sa.column(c) for c in self._returning))
        return statement

    async def exec(self) -> Any:
        result = await self._run()
        single = len(self._rows) == 1
        if self._returning:
            if single:
                return result.rows[0] if result.rows else None
            return result.rows
        return result.lastrowid if single else None


class Update(Statement):
    """UPDATE builder. ``exec()`` resolves to ``None``."""

    def __init__(self, engine: Any) -> None:
        super().__init__(engine)
        self._table: str | None = None
        self._assignments: dict[str, Any] = {}
        self._wheres: list[ColumnElement[Any]] = []

    def table(self, table: str) -> Update:
        self._table = table_name(table)
        return self

    def set(self, row: Mapping[str, Any]) -> Update:
        self._assignments = _check_row(row)
        return self

    def where(self, predicate: Predicate) -> Update:
        self._wheres.append(self._condition(predicate))
        return self

    def _build(self) -> sa.Update:
        if self._table is None:
            raise QueryBuildError("UPDATE needs a table")
        if not self._assignments:
            raise QueryBuildError("UPDATE needs at least one assignment")

        table = self._scope.table(self._table)
        for column in self._assignments:
            self._scope.column_of(table, column)
        params = self._params.copy()
        statement = sa.update(table).values(
            {column: params.bind(value) for column, value in self._assignments.items()}
        )
        if self._wheres:
            statement = statement.where(*self._wheres)
        return statement

    async def exec(self) -> None:
        await self._run()


class Delete(Statement):
    """DELETE builder. ``exec()`` resolves to ``None``."""

    def __init__(self, engine: Any) -> None:
        super().__init__(engine)
        self._table: str | None = None
        self._wheres: list[ColumnElement[Any]] = []

    def from_(self, table: str) -> Delete:
        self._table = table_name(table)
        return self

    def where(self, predicate: Predicate) -> Delete:
        self._wheres.append(self._condition(predicate))
        return self

    def _build(self) -> sa.Delete:
        if self._table is None:
            raise QueryBuildError("DELETE needs a table")
        statement = sa.delete(self._scope.table(self._table))
        if self._wheres:
            statement = statement.where(*self._wheres)
        return statement

    async def exec(self) -> None:
        await self._run()
