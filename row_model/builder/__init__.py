"""Statement builders - chainable SQL with named parameters."""

from __future__ import annotations

from row_model.builder.builder import QueryBuilder
from row_model.builder.expressions import Column, Condition, Predicate, Ref, ref
from row_model.builder.statements import CompiledStatement, Delete, Insert, Select, Update

__all__ = [
    "QueryBuilder",
    "Select",
    "Insert",
    "Update",
    "Delete",
    "CompiledStatement",
    "Condition",
    "Column",
    "Predicate",
    "Ref",
    "ref",
]
