"""RowModel exception hierarchy.

All exceptions are RowModel-specific. Raw driver exceptions are never
exposed to callers: they are re-raised as ExecutionError with the
original exception chained.
"""

from __future__ import annotations

from typing import Any


class RowModelError(Exception):
    """Base exception for all RowModel errors."""


# --- Configuration ---


class ConfigError(RowModelError):
    """Raised when an entity type carries missing or invalid configuration."""

    def __init__(self, model_name: str, setting: str, value: Any) -> None:
        self.model_name = model_name
        self.setting = setting
        self.value = value
        super().__init__(f"Invalid {setting} in {model_name} model: {value!r}")


# --- Validation ---


class ValidationError(RowModelError):
    """Raised on malformed call arguments, before any I/O happens."""


class QueryBuildError(ValidationError):
    """Raised when a statement cannot be assembled from its parts."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Cannot build statement: {detail}")


# --- Relationships ---


class RelationshipIntegrityError(RowModelError):
    """Raised when a one-to-one relationship query yields several rows."""

    def __init__(self, owner: str, related: str, detail: str) -> None:
        self.owner = owner
        self.related = related
        super().__init__(f"Invalid one-to-one relationship: {owner} {detail} {related}")


# --- Execution ---


class ExecutionError(RowModelError):
    """Raised when the database rejects a statement.

    The message is the driver's message, unchanged.
    """

    def __init__(self, detail: str, sql: str | None = None) -> None:
        self.sql = sql
        super().__init__(detail)


# --- Adapter ---


class AdapterError(RowModelError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
