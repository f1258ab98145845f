"""Per-entity-type configuration."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from row_model.builder.builder import QueryBuilder

Modifier = Callable[[Any], Any]


@dataclass(frozen=True)
class ModelConfig:
    """Immutable configuration of one entity type.

    Values are stored as given and validated lazily by the Descriptor, so
    a missing or malformed setting only fails (or falls back to its
    default) when an operation reads it.
    """

    table: str | None = None
    primary_key: str | None = None
    foreign_key: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    timestamps: bool | None = None
    columns: Sequence[str] | None = None
    ignore: Sequence[str] | None = None
    modifiers: Mapping[str, Sequence[Modifier]] | None = None
    builder: QueryBuilder | None = None

    @classmethod
    def option_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
