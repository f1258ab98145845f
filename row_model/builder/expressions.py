"""Predicate building blocks shared by every statement.

A predicate is a callable ``predicate(col, con)``. ``col(name)`` returns a
column to compare; ``con`` is the Condition being assembled and offers
the ``and_``/``or_``/``not_`` connectors and parenthesised groups::

    lambda col, con: col("age").greater(18).and_().col("role").in_("admin", "staff")

Conditions are assembled into SQLAlchemy Core clauses; identifiers are
quoted by the dialect the statement is compiled for. Values are always
bound as named parameters. Wrap a value with ``ref()`` to compare against
another column instead.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.sql.elements import BindParameter, ColumnClause, ColumnElement
from sqlalchemy.sql.selectable import TableClause

from row_model.core.exceptions import QueryBuildError

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_TABLE_PATTERN = re.compile(rf"^{_NAME}(?:\.{_NAME})?$")
_COLUMN_PATTERN = re.compile(rf"^(?:{_NAME}\.)?{_NAME}$")
_SELECTABLE_PATTERN = re.compile(
    rf"^(?:(?P<star>\*)|(?:(?P<table>{_NAME})\.)?(?:(?P<all>\*)|(?P<column>{_NAME})(?:\s+AS\s+(?P<alias>{_NAME}))?))$",
    re.IGNORECASE,
)


def table_name(name: Any) -> str:
    """Validate a (optionally schema-qualified) table name."""
    if not isinstance(name, str) or not _TABLE_PATTERN.match(name):
        raise QueryBuildError(f"invalid table name {name!r}")
    return name


def column_name(name: Any) -> str:
    """Validate a (optionally table-qualified) column name."""
    if not isinstance(name, str) or not _COLUMN_PATTERN.match(name):
        raise QueryBuildError(f"invalid column name {name!r}")
    return name


def selectable(name: Any) -> str:
    """Validate a select-list entry: ``col``, ``t.col``, ``t.*``, ``*`` or ``col AS alias``."""
    if not isinstance(name, str) or not _SELECTABLE_PATTERN.match(name.strip()):
        raise QueryBuildError(f"invalid select column {name!r}")
    return " ".join(name.split())


class Scope:
    """Table and column objects of one statement.

    Every reference to a table name resolves to the same TableClause, so
    qualified columns, joins and the target table all share one FROM entry.
    """

    def __init__(self) -> None:
        self._tables: dict[str, TableClause] = {}

    def table(self, name: str) -> TableClause:
        name = table_name(name)
        if name not in self._tables:
            schema, _, table = name.rpartition(".")
            self._tables[name] = sa.table(table, schema=schema or None)
        return self._tables[name]

    def column_of(self, table: TableClause, name: str, literal: bool = False) -> ColumnClause[Any]:
        if name not in table.c:
            table.append_column(sa.column(name, is_literal=literal))
        return table.c[name]

    def column(self, name: str) -> ColumnClause[Any]:
        """``col`` or ``t.col`` as a (table-bound) column."""
        table, _, column = column_name(name).rpartition(".")
        if not table:
            return sa.column(column)
        return self.column_of(self.table(table), column)

    def selectable(self, name: str) -> ColumnElement[Any]:
        """A select-list entry as a column, a ``t.*`` wildcard or a label."""
        match = _SELECTABLE_PATTERN.match(selectable(name))
        if match["star"]:
            return sa.literal_column("*")
        if match["all"]:
            return self.column_of(self.table(match["table"]), "*", literal=True)
        qualified = f"{match['table']}.{match['column']}" if match["table"] else match["column"]
        column = self.column(qualified)
        return column.label(match["alias"]) if match["alias"] else column


class Ref:
    """A column reference used as the right-hand side of a comparison."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = column_name(name)

    def __repr__(self) -> str:
        return f"ref({self.name!r})"


def ref(name: str) -> Ref:
    """Compare against column *name* instead of a bound value."""
    return Ref(name)


class Params:
    """Named parameter counter for one statement (``:p0``, ``:p1``, ...)."""

    def __init__(self) -> None:
        self._count = 0

    def bind(self, value: Any) -> BindParameter[Any]:
        name = f"p{self._count}"
        self._count += 1
        return sa.bindparam(name, value)

    def copy(self) -> Params:
        clone = Params()
        clone._count = self._count
        return clone


class Column:
    """Left-hand side of a comparison inside a Condition."""

    def __init__(self, condition: Condition, column: ColumnClause[Any]) -> None:
        self._condition = condition
        self._column = column

    def equal(self, value: Any) -> Condition:
        """``col = value``; comparing with None renders ``IS NULL``."""
        if value is None:
            return self.is_null()
        return self._push(self._column == self._value(value))

    def not_equal(self, value: Any) -> Condition:
        if value is None:
            return self.is_not_null()
        return self._push(self._column != self._value(value))

    def greater(self, value: Any) -> Condition:
        return self._push(self._column > self._value(value))

    def greater_or_equal(self, value: Any) -> Condition:
        return self._push(self._column >= self._value(value))

    def less(self, value: Any) -> Condition:
        return self._push(self._column < self._value(value))

    def less_or_equal(self, value: Any) -> Condition:
        return self._push(self._column <= self._value(value))

    def like(self, pattern: str) -> Condition:
        return self._push(self._column.like(self._value(pattern)))

    def not_like(self, pattern: str) -> Condition:
        return self._push(self._column.not_like(self._value(pattern)))

    def in_(self, *values: Any) -> Condition:
        return self._push(self._column.in_(self._values("IN", values)))

    def not_in(self, *values: Any) -> Condition:
        return self._push(self._column.not_in(self._values("NOT IN", values)))

    def between(self, low: Any, high: Any) -> Condition:
        return self._push(self._column.between(self._value(low), self._value(high)))

    def not_between(self, low: Any, high: Any) -> Condition:
        return self._push(sa.not_(self._column.between(self._value(low), self._value(high))))

    def is_null(self) -> Condition:
        return self._push(self._column.is_(None))

    def is_not_null(self) -> Condition:
        return self._push(self._column.is_not(None))

    def _push(self, clause: ColumnElement[Any]) -> Condition:
        return self._condition._push(clause)

    def _value(self, value: Any) -> ColumnElement[Any]:
        return self._condition._value(value)

    def _values(self, operator: str, values: tuple[Any, ...]) -> list[ColumnElement[Any]]:
        # Bound one by one so the list renders as (:p0, :p1) rather than an
        # expanding parameter.
        if not values:
            raise QueryBuildError(f"{operator} on {self._column.name} needs at least one value")
        return [self._value(v) for v in values]


class Condition:
    """Accumulates the clauses of a WHERE, ON or HAVING condition.

    Predicates with no connector between them are joined with AND; AND
    binds tighter than OR, as in SQL.
    """

    def __init__(self, scope: Scope, params: Params) -> None:
        self._scope = scope
        self._params = params
        self._groups: list[list[ColumnElement[Any]]] = []
        self._connector: str | None = None
        self._negate = False

    def col(self, name: str) -> Column:
        return Column(self, self._scope.column(name))

    def and_(self) -> Condition:
        return self._connect("AND")

    def or_(self) -> Condition:
        return self._connect("OR")

    def not_(self) -> Condition:
        """Negate the next predicate or group."""
        self._negate = not self._negate
        return self

    def group(self, predicate: Predicate) -> Condition:
        """Add a parenthesised sub-condition built by *predicate*."""
        return self._push(build_condition(self._scope, self._params, predicate).self_group())

    @property
    def is_empty(self) -> bool:
        return not self._groups

    def clause(self) -> ColumnElement[Any]:
        if self._connector is not None or self._negate:
            raise QueryBuildError("condition ends with a dangling connector")
        terms = [sa.and_(*group) if len(group) > 1 else group[0] for group in self._groups]
        return sa.or_(*terms) if len(terms) > 1 else terms[0]

    def _connect(self, connector: str) -> Condition:
        if not self._groups or self._connector is not None:
            raise QueryBuildError(f"{connector} must follow a predicate")
        self._connector = connector
        return self

    def _push(self, clause: ColumnElement[Any]) -> Condition:
        if self._negate:
            clause = sa.not_(clause)
        if not self._groups or self._connector == "OR":
            self._groups.append([clause])
        else:
            self._groups[-1].append(clause)
        self._connector = None
        self._negate = False
        return self

    def _value(self, value: Any) -> ColumnElement[Any]:
        if isinstance(value, Ref):
            return self._scope.column(value.name)
        return self._params.bind(value)


Predicate = Callable[[Callable[[str], Column], Condition], Any]


def build_condition(scope: Scope, params: Params, predicate: Predicate) -> ColumnElement[Any]:
    """Run *predicate* against a fresh Condition and return its clause."""
    if not callable(predicate):
        raise QueryBuildError(f"condition must be callable, got {predicate!r}")
    condition = Condition(scope, params)
    predicate(condition.col, condition)
    if condition.is_empty:
        raise QueryBuildError("condition produced no predicate")
    return condition.clause()
