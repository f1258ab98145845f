"""Mapping layer - transform row dicts into entity instances."""

from __future__ import annotations

from row_model.mapping.entity import EntityMapper, apply_modifiers

__all__ = [
    "EntityMapper",
    "apply_modifiers",
]
