"""Row-to-entity hydration.

Hydration runs every column of a fetched row through the modifier chain
registered for it on the entity type, then constructs the instance.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Any, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def apply_modifiers(model: Any, row: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *row* with each column passed through its modifiers.

    Modifiers run in registration order; columns without modifiers pass
    through unchanged.
    """
    descriptor = model.describe()
    return {
        column: reduce(lambda value, modifier: modifier(value), descriptor.modifiers(column), value)
        for column, value in row.items()
    }


class EntityMapper(Generic[T]):
    """Maps rows to instances of one entity type.

    Args:
        model: The entity type (a Model subclass) to construct.
    """

    def __init__(self, model: type[T]) -> None:
        self._model = model

    def map_one(self, row: dict[str, Any]) -> T:
        """Hydrate a single row."""
        return self._model(apply_modifiers(self._model, row))  # type: ignore[call-arg]

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Hydrate all rows via map_one."""
        instances = [self.map_one(row) for row in rows]
        logger.debug("Hydrated %d %s instance(s)", len(instances), self._model.__name__)
        return instances
