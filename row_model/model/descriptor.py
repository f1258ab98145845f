"""Per-call resolution of an entity type's configuration.

Every getter re-reads the registry, so ``Model.configure()`` takes effect
on the very next call. Getters fall back to naming conventions when a
setting is missing or malformed; only ``table()``, ``builder()`` and
``link_table()`` can fail.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from row_model.builder.builder import QueryBuilder
from row_model.core.exceptions import ConfigError
from row_model.model.config import ModelConfig
from row_model.model.events import EventChannel
from row_model.model.registry import ModelRegistry

if TYPE_CHECKING:
    from row_model.model.base import Model


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_name_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(_is_name(v) for v in value)


class Descriptor:
    """Configuration accessors for one entity type."""

    def __init__(self, model: type[Model]) -> None:
        self.model = model

    @property
    def name(self) -> str:
        return self.model.__name__

    @property
    def config(self) -> ModelConfig:
        return ModelRegistry.config_of(self.model)

    def table(self) -> str:
        table = self.config.table
        if not _is_name(table):
            raise ConfigError(self.name, "table name", table)
        return table  # type: ignore[return-value]

    def primary_key(self) -> str:
        key = self.config.primary_key
        return key if _is_name(key) else "id"  # type: ignore[return-value]

    def foreign_key(self) -> str:
        key = self.config.foreign_key
        if _is_name(key):
            return key  # type: ignore[return-value]
        return f"{self.name.lower()}_{self.primary_key()}"

    def created_at(self) -> str:
        column = self.config.created_at
        return column if _is_name(column) else "created_at"  # type: ignore[return-value]

    def updated_at(self) -> str:
        column = self.config.updated_at
        return column if _is_name(column) else "updated_at"  # type: ignore[return-value]

    def timestamps(self) -> bool:
        enabled = self.config.timestamps
        return enabled if isinstance(enabled, bool) else True

    def columns(self) -> list[str]:
        """Selected columns, qualified with the table name unless already qualified."""
        table = self.table()
        columns = self.config.columns
        if _is_name_list(columns) and columns:
            return [c if "." in c else f"{table}.{c}" for c in columns]  # type: ignore[union-attr]
        return [f"{table}.*"]

    def ignore(self) -> list[str]:
        """Columns left out of UPDATE assignments."""
        ignore = self.config.ignore
        return list(ignore) if _is_name_list(ignore) else []  # type: ignore[arg-type]

    def builder(self) -> QueryBuilder:
        builder = self.config.builder
        if not isinstance(builder, QueryBuilder):
            raise ConfigError(self.name, "builder", builder)
        return builder

    def link_table(self, other: Any) -> str:
        """Default association table: both type names, sorted and lowercased."""
        if not ModelRegistry.is_model(other):
            raise ConfigError(self.name, "link model", other)
        return "_".join(sorted([self.name, other.__name__])).lower()

    def events(self) -> EventChannel:
        return ModelRegistry.channel_of(self.model)

    def modifiers(self, column: Any) -> list[Callable[[Any], Any]]:
        if not _is_name(column):
            return []
        modifiers = self.config.modifiers
        if not isinstance(modifiers, Mapping):
            return []
        chain = modifiers.get(column)
        if not isinstance(chain, (list, tuple)) or not all(callable(m) for m in chain):
            return []
        return list(chain)
