"""The Model base class.

An entity type is a ``Model`` subclass configured through class
keywords::

    class User(Model, table="users", ignore=["id"]):
        async def profile(self):
            return await self.one_to_one(Profile)

Every operation follows the same order: validate its arguments, resolve
the configuration it needs, emit the pre-event, execute one statement,
then hydrate the result and emit the post-event. Nothing is emitted when
validation or configuration fails; only the pre-event is emitted when the
statement fails.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from row_model.builder.expressions import Predicate, column_name, ref, table_name
from row_model.core import clock
from row_model.core.exceptions import RelationshipIntegrityError, ValidationError
from row_model.mapping.entity import EntityMapper
from row_model.model.descriptor import Descriptor
from row_model.model.events import Event, EventChannel
from row_model.model.registry import ModelRegistry
from row_model.model.selector import Selector
from row_model.model.where import Where

M = TypeVar("M", bound="Model")


def _is_key(value: Any) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def _is_row(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and bool(value)


def _check_columns(row: Mapping[str, Any]) -> None:
    for column in row:
        column_name(column)


def _check_same_columns(rows: Sequence[Mapping[str, Any]]) -> None:
    columns = set(rows[0])
    if any(set(row) != columns for row in rows[1:]):
        raise ValidationError(f"Every row must have the columns {sorted(columns)}")


def _check_model(model: Any) -> None:
    if not ModelRegistry.is_model(model):
        raise ValidationError(f"Invalid model: {model!r}")


def _is_instance(value: Any) -> bool:
    return isinstance(value, Model) and ModelRegistry.is_model(type(value))


def _check_targets(others: Any, action: str) -> type[Model]:
    """Validate a non-empty list of instances sharing one entity type."""
    if not _is_list(others) or not all(_is_instance(o) for o in others):
        raise ValidationError(f"Invalid {action} models: {others!r}")
    model = type(others[0])
    if any(type(o) is not model for o in others):
        raise ValidationError(f"Invalid {action} models: mixed entity types")
    return model


def _association_table(owner: Descriptor, other: type[Model], table: str | None) -> str:
    if table is None:
        return owner.link_table(other)
    return table_name(table)


class Model:
    """Base class of every entity type.

    Instances are plain attribute bags: each column of the row they were
    built from becomes an attribute. A column named like one of the
    methods below (``model`` on a cars table) shadows that method on the
    instance; the operations themselves resolve the entity type through
    ``type(self)`` and keep working.
    """

    def __init_subclass__(cls, **options: Any) -> None:
        super().__init_subclass__()
        ModelRegistry.register(cls, options)

    def __init__(self, row: Mapping[str, Any] | None = None, **fields: Any) -> None:
        if row is not None and not isinstance(row, Mapping):
            raise ValidationError(f"Invalid row: {row!r}")
        for column, value in {**(row or {}), **fields}.items():
            setattr(self, column, value)

    def __repr__(self) -> str:
        fields = ", ".join(f"{column}={value!r}" for column, value in vars(self).items())
        return f"{type(self).__name__}({fields})"

    def to_dict(self) -> dict[str, Any]:
        return dict(vars(self))

    # --- Type-level API ---

    @classmethod
    def describe(cls) -> Descriptor:
        """Configuration accessors, resolved from the registry on every call."""
        return Descriptor(cls)

    @classmethod
    def configure(cls, **changes: Any) -> None:
        """Replace individual configuration settings at runtime."""
        ModelRegistry.configure(cls, **changes)

    @classmethod
    def events(cls) -> EventChannel:
        return cls.describe().events()

    @classmethod
    def where(cls, predicate: Predicate) -> Where:
        if not callable(predicate):
            raise ValidationError(f"Invalid condition: {predicate!r}")
        return Where(cls, predicate)

    @classmethod
    def select(cls) -> Selector:
        """Start a hydrating SELECT over the type's table and columns."""
        descriptor = cls.describe()
        selector = Selector(descriptor.builder().engine, cls)
        selector.from_(descriptor.table()).col(*descriptor.columns())
        return selector

    @classmethod
    async def find(cls: type[M], key: int | str) -> M | None:
        """Load the instance whose primary key equals *key*, or None."""
        if not _is_key(key):
            raise ValidationError(f"Invalid key: {key!r}")
        pk = cls.describe().primary_key()
        models = await cls.select().where(lambda col, con: col(pk).equal(key)).exec()
        return models[0] if models else None

    @classmethod
    async def find_many(cls: type[M], keys: Sequence[int | str]) -> list[M]:
        if not _is_list(keys) or not all(_is_key(k) for k in keys):
            raise ValidationError(f"Invalid keys: {keys!r}")
        pk = cls.describe().primary_key()
        return await cls.select().where(lambda col, con: col(pk).in_(*keys)).exec()

    @classmethod
    async def insert(cls: type[M], row: Mapping[str, Any]) -> M:
        """Insert one row and return it as an instance.

        The INSERT event receives a copy of *row* carrying the timestamp
        columns; listeners may still change it. The primary key comes
        from a RETURNING clause where the backend supports one, otherwise
        from the driver's generated key. A primary key present in *row*
        takes precedence.
        """
        if not _is_row(row):
            raise ValidationError(f"Invalid row: {row!r}")
        descriptor = cls.describe()
        row = dict(row)
        _check_columns(row)
        if descriptor.timestamps():
            now = clock.utc_datetime()
            row[descriptor.created_at()] = now
            row[descriptor.updated_at()] = now
        builder = descriptor.builder()
        table = descriptor.table()
        pk = descriptor.primary_key()
        channel = descriptor.events()

        channel.emit(Event.INSERT, row)

        insert = builder.insert().into(table).row(row)
        if builder.backend.supports_returning:
            insert.returning(pk)
        result = await insert.exec()

        key = result.get(pk) if isinstance(result, Mapping) else result
        instance = EntityMapper(cls).map_one({pk: key, **row})
        channel.emit(Event.INSERTED, instance)
        return instance

    @classmethod
    async def insert_many(cls: type[M], rows: Sequence[Mapping[str, Any]]) -> list[M]:
        """Insert several rows with one statement.

        All rows share one timestamp. Instances carry their primary key
        only on backends that return generated keys (PostgreSQL).
        """
        if not _is_list(rows) or not all(_is_row(r) for r in rows):
            raise ValidationError(f"Invalid rows: {rows!r}")
        descriptor = cls.describe()
        rows = [dict(r) for r in rows]
        for row in rows:
            _check_columns(row)
        _check_same_columns(rows)
        if descriptor.timestamps():
            now = clock.utc_datetime()
            created_at, updated_at = descriptor.created_at(), descriptor.updated_at()
            for row in rows:
                row[created_at] = now
                row[updated_at] = now
        builder = descriptor.builder()
        table = descriptor.table()
        pk = descriptor.primary_key()
        channel = descriptor.events()

        channel.emit(Event.INSERT_MANY, rows)

        insert = builder.insert().into(table).rows(rows)
        if builder.backend.supports_returning:
            insert.returning(pk)
        result = await insert.exec()

        if isinstance(result, list):
            rows = [{pk: returned.get(pk), **row} for row, returned in zip(rows, result)]
        instances = EntityMapper(cls).map_many(rows)
        channel.emit(Event.INSERTED_MANY, instances)
        return instances

    # --- Instance-level API ---

    def model(self) -> type[Model]:
        """The entity type of this instance."""
        return type(self)

    def value_of(self, column: str) -> Any:
        """Return the value of *column*, failing when it is missing or None."""
        if not isinstance(column, str) or not column:
            raise ValidationError(f"Invalid column name: {column!r}")
        value = vars(self).get(column)
        if value is None:
            raise ValidationError(f"Invalid {column} value: {value!r}")
        return value

    async def update(self) -> None:
        """Persist the instance's fields, minus the ignored columns.

        On success the persisted values (including a fresh updated-at
        timestamp) are copied back onto the instance.
        """
        descriptor = type(self).describe()
        pk = descriptor.primary_key()
        key = self.value_of(pk)
        ignore = descriptor.ignore()
        row = {column: value for column, value in vars(self).items() if column not in ignore}
        if descriptor.timestamps():
            row[descriptor.updated_at()] = clock.utc_datetime()
        if not row:
            raise ValidationError(f"Nothing to update on {type(self).__name__}")
        _check_columns(row)
        builder = descriptor.builder()
        table = descriptor.table()
        channel = descriptor.events()

        channel.emit(Event.UPDATE, row)

        await builder.update().table(table).set(row).where(lambda col, con: col(pk).equal(key)).exec()

        for column, value in row.items():
            setattr(self, column, value)
        channel.emit(Event.UPDATED, self)

    async def delete(self) -> None:
        descriptor = type(self).describe()
        pk = descriptor.primary_key()
        key = self.value_of(pk)
        builder = descriptor.builder()
        table = descriptor.table()
        channel = descriptor.events()

        channel.emit(Event.DELETE, self)

        await builder.delete().from_(table).where(lambda col, con: col(pk).equal(key)).exec()

        channel.emit(Event.DELETED, self)

    # --- Links (many-to-many association rows) ---

    async def link(self, other: Model, table: str | None = None, row: Mapping[str, Any] | None = None) -> None:
        """Insert the association row between this instance and *other*.

        *row* supplies extra association columns; the two foreign keys
        always take precedence over it.
        """
        if not _is_instance(other):
            raise ValidationError(f"Invalid link model: {other!r}")
        if row is not None and not isinstance(row, Mapping):
            raise ValidationError(f"Invalid link row: {row!r}")
        parent = type(self).describe()
        child = type(other).describe()
        table = _association_table(parent, type(other), table)
        entry = {
            **(row or {}),
            parent.foreign_key(): self.value_of(parent.primary_key()),
            child.foreign_key(): other.value_of(child.primary_key()),
        }
        _check_columns(entry)
        builder = parent.builder()
        channel = parent.events()

        channel.emit(Event.LINK, self, other, entry)

        await builder.insert().into(table).row(entry).exec()

        channel.emit(Event.LINKED, self, other, entry)

    async def link_many(
        self,
        others: Sequence[Model],
        table: str | None = None,
        rows: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        """Insert one association row per instance in *others*.

        *rows*, when given, holds one mapping of extra columns per
        instance, matched by position.
        """
        child_model = _check_targets(others, "link")
        if rows is not None and (
            not isinstance(rows, (list, tuple))
            or len(rows) != len(others)
            or not all(isinstance(r, Mapping) for r in rows)
        ):
            raise ValidationError(f"Invalid link rows: expected {len(others)} mappings, got {rows!r}")
        parent = type(self).describe()
        child = child_model.describe()
        table = _association_table(parent, child_model, table)
        parent_fk, child_fk, child_pk = parent.foreign_key(), child.foreign_key(), child.primary_key()
        key = self.value_of(parent.primary_key())
        extras = rows if rows is not None else [{}] * len(others)
        entries = [
            {**extra, parent_fk: key, child_fk: other.value_of(child_pk)}
            for other, extra in zip(others, extras)
        ]
        for entry in entries:
            _check_columns(entry)
        _check_same_columns(entries)
        builder = parent.builder()
        channel = parent.events()

        channel.emit(Event.LINK_MANY, self, others, entries)

        await builder.insert().into(table).rows(entries).exec()

        channel.emit(Event.LINKED_MANY, self, others, entries)

    async def unlink(self, other: Model, table: str | None = None) -> None:
        if not _is_instance(other):
            raise ValidationError(f"Invalid unlink model: {other!r}")
        parent = type(self).describe()
        child = type(other).describe()
        table = _association_table(parent, type(other), table)
        parent_fk, child_fk = parent.foreign_key(), child.foreign_key()
        key = self.value_of(parent.primary_key())
        other_key = other.value_of(child.primary_key())
        builder = parent.builder()
        channel = parent.events()

        channel.emit(Event.UNLINK, self, other)

        await (
            builder.delete()
            .from_(table)
            .where(lambda col, con: col(parent_fk).equal(key).and_().col(child_fk).equal(other_key))
            .exec()
        )

        channel.emit(Event.UNLINKED, self, other)

    async def unlink_many(self, others: Sequence[Model], table: str | None = None) -> None:
        child_model = _check_targets(others, "unlink")
        parent = type(self).describe()
        child = child_model.describe()
        table = _association_table(parent, child_model, table)
        parent_fk, child_fk, child_pk = parent.foreign_key(), child.foreign_key(), child.primary_key()
        key = self.value_of(parent.primary_key())
        other_keys = [other.value_of(child_pk) for other in others]
        builder = parent.builder()
        channel = parent.events()

        channel.emit(Event.UNLINK_MANY, self, others)

        await (
            builder.delete()
            .from_(table)
            .where(lambda col, con: col(parent_fk).equal(key).and_().col(child_fk).in_(*other_keys))
            .exec()
        )

        channel.emit(Event.UNLINKED_MANY, self, others)

    # --- Relationships ---

    async def one_to_one(self, model: type[M]) -> M | None:
        """Load the single *model* row holding this instance's foreign key."""
        _check_model(model)
        parent = type(self).describe()
        fk = parent.foreign_key()
        key = self.value_of(parent.primary_key())
        models = await model.select().where(lambda col, con: col(fk).equal(key)).exec()
        if len(models) > 1:
            raise RelationshipIntegrityError(type(self).__name__, model.__name__, "has more than one")
        return models[0] if models else None

    async def references(self, model: type[M]) -> M | None:
        """Load the *model* row this instance points at through its foreign key."""
        _check_model(model)
        parent = model.describe()
        pk = parent.primary_key()
        key = self.value_of(parent.foreign_key())
        models = await model.select().where(lambda col, con: col(pk).equal(key)).exec()
        if len(models) > 1:
            raise RelationshipIntegrityError(type(self).__name__, model.__name__, "references many")
        return models[0] if models else None

    async def one_to_many(self, model: type[M]) -> list[M]:
        _check_model(model)
        parent = type(self).describe()
        fk = parent.foreign_key()
        key = self.value_of(parent.primary_key())
        return await model.select().where(lambda col, con: col(fk).equal(key)).exec()

    async def many_to_many(self, model: type[M], table: str | None = None, *columns: str) -> list[M]:
        """Load the *model* instances linked to this one.

        *columns* names extra association-table columns to load onto each
        instance.
        """
        _check_model(model)
        parent = type(self).describe()
        child = model.describe()
        table = _association_table(parent, model, table)
        extra = [f"{table}.{column_name(c)}" for c in columns]
        child_table, child_pk = child.table(), child.primary_key()
        child_fk, parent_fk = child.foreign_key(), parent.foreign_key()
        key = self.value_of(parent.primary_key())
        return await (
            model.select()
            .col(*child.columns(), *extra)
            .join(table, lambda col, con: col(f"{child_table}.{child_pk}").equal(ref(f"{table}.{child_fk}")))
            .where(lambda col, con: col(f"{table}.{parent_fk}").equal(key))
            .exec()
        )
