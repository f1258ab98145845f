"""Condition-scoped SELECT, UPDATE and DELETE.

A low-level escape hatch: these operations run straight against the
entity's table and emit no lifecycle events.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from row_model.builder.expressions import Predicate
from row_model.core.exceptions import ValidationError

if TYPE_CHECKING:
    from row_model.model.base import Model


class Where:
    """Deferred operations sharing one WHERE predicate."""

    def __init__(self, model: type[Model], predicate: Predicate) -> None:
        self._model = model
        self._predicate = predicate

    async def select(self) -> list[Any]:
        return await self._model.select().where(self._predicate).exec()

    async def update(self, row: Mapping[str, Any]) -> None:
        if not isinstance(row, Mapping) or not row:
            raise ValidationError(f"Invalid row: {row!r}")
        descriptor = self._model.describe()
        await (
            descriptor.builder()
            .update()
            .table(descriptor.table())
            .set(row)
            .where(self._predicate)
            .exec()
        )

    async def delete(self) -> None:
        descriptor = self._model.describe()
        await descriptor.builder().delete().from_(descriptor.table()).where(self._predicate).exec()
