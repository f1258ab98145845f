"""RowModel - async entity mapping with lifecycle events and relationships."""

from __future__ import annotations

from row_model.builder import QueryBuilder, ref
from row_model.core.connection import AsyncConnectionManager, ConnectionConfig
from row_model.core.engine import AsyncEngine
from row_model.core.enums import DatabaseBackend
from row_model.core.exceptions import (
    AdapterError,
    ConfigError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    PoolError,
    QueryBuildError,
    RelationshipIntegrityError,
    RowModelError,
    ValidationError,
)
from row_model.core.result import ExecutionResult
from row_model.model import (
    Descriptor,
    Event,
    EventChannel,
    Model,
    ModelConfig,
    ModelRegistry,
    Selector,
    Where,
)

__all__ = [
    # Connection
    "ConnectionConfig",
    "AsyncConnectionManager",
    # Engine
    "AsyncEngine",
    "ExecutionResult",
    # Builder
    "QueryBuilder",
    "ref",
    # Model
    "Model",
    "ModelConfig",
    "ModelRegistry",
    "Descriptor",
    "Selector",
    "Where",
    # Events
    "Event",
    "EventChannel",
    # Enums
    "DatabaseBackend",
    # Exceptions
    "RowModelError",
    "ConfigError",
    "ValidationError",
    "QueryBuildError",
    "RelationshipIntegrityError",
    "ExecutionError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
