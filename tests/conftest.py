"""Shared test fixtures."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from row_model.builder.builder import QueryBuilder
from row_model.core.connection import ConnectionConfig
from row_model.core.enums import DatabaseBackend
from row_model.core.result import ExecutionResult
from row_model.model.registry import ModelRegistry


def make_engine(backend: DatabaseBackend = DatabaseBackend.SQLITE) -> MagicMock:
    """Engine double: records statements and answers with an empty result."""
    engine = MagicMock()
    engine.backend = backend
    engine.run = AsyncMock(return_value=ExecutionResult())
    return engine


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def engine() -> MagicMock:
    return make_engine()


@pytest.fixture
def pg_engine() -> MagicMock:
    return make_engine(DatabaseBackend.POSTGRESQL)


@pytest.fixture
def mysql_engine() -> MagicMock:
    return make_engine(DatabaseBackend.MYSQL)


@pytest.fixture
def builder(engine: MagicMock) -> QueryBuilder:
    return QueryBuilder(engine)


@pytest.fixture(autouse=True)
def _reset_channels():
    yield
    ModelRegistry.reset_channels()


@pytest.fixture
def executed():
    """Return the (sql, params) pairs an engine double received, in order."""

    def _executed(engine: MagicMock) -> list[tuple[str, dict[str, Any]]]:
        return [(c.args[0], c.args[1]) for c in engine.run.call_args_list]

    return _executed
