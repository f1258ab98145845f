"""Entity types - configuration, lifecycle events and the Model base class."""

from __future__ import annotations

from row_model.model.base import Model
from row_model.model.config import ModelConfig
from row_model.model.descriptor import Descriptor
from row_model.model.events import Event, EventChannel
from row_model.model.registry import ModelRegistry
from row_model.model.selector import Selector
from row_model.model.where import Where

__all__ = [
    "Model",
    "ModelConfig",
    "ModelRegistry",
    "Descriptor",
    "Event",
    "EventChannel",
    "Selector",
    "Where",
]
