"""Outcome of one executed statement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExecutionResult:
    """Rows, affected row count and driver-generated key of a statement.

    ``lastrowid`` is only meaningful for single-row INSERTs on drivers that
    report it (SQLite, MySQL); PostgreSQL callers use RETURNING instead.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Any = None
