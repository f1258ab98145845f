"""SELECT builder that resolves to entity instances."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from row_model.builder.statements import Select
from row_model.mapping.entity import EntityMapper

if TYPE_CHECKING:
    from row_model.model.base import Model


class Selector(Select):
    """A ``Select`` bound to one entity type.

    Every builder method is inherited unchanged; only the terminal step
    differs: rows are run through the type's modifiers and turned into
    instances. ``Model.select()`` presets the table and columns.

    When joining tables that share column names (``id``), alias the
    joined columns (``profiles.id AS profile_id``) so they do not
    overwrite each other on the instance.
    """

    def __init__(self, engine: Any, model: type[Model]) -> None:
        super().__init__(engine)
        self._mapper = EntityMapper(model)

    async def exec(self) -> list[Any]:
        rows = await super().exec()
        return self._mapper.map_many(rows)

    async def all(self) -> list[Any]:
        """Alias for ``exec()``."""
        return await self.exec()
