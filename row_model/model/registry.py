"""Explicit lookup from entity type to its configuration and event channel."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, ClassVar

from row_model.core.exceptions import ConfigError
from row_model.model.config import ModelConfig
from row_model.model.events import EventChannel

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Process-wide registry of entity types.

    Entity types register themselves when their class is created; the
    registry keeps one frozen ``ModelConfig`` and one ``EventChannel`` per
    type.
    """

    _configs: ClassVar[dict[type, ModelConfig]] = {}
    _channels: ClassVar[dict[type, EventChannel]] = {}

    @classmethod
    def register(cls, model: type, options: dict[str, Any]) -> EventChannel:
        """Register *model*, inheriting the config of its nearest registered base."""
        base = next((b for b in model.__mro__[1:] if b in cls._configs), None)
        inherited = cls._configs[base] if base is not None else ModelConfig()
        cls._configs[model] = _merge(model, inherited, options)
        logger.debug("Registered entity type %s", model.__name__)
        return cls.channel_of(model)

    @classmethod
    def is_model(cls, obj: Any) -> bool:
        return isinstance(obj, type) and obj in cls._configs

    @classmethod
    def config_of(cls, model: type) -> ModelConfig:
        try:
            return cls._configs[model]
        except KeyError:
            raise ConfigError(getattr(model, "__name__", repr(model)), "entity type", model) from None

    @classmethod
    def configure(cls, model: type, **changes: Any) -> ModelConfig:
        """Replace *model*'s config with a copy carrying *changes*."""
        config = _merge(model, cls.config_of(model), changes)
        cls._configs[model] = config
        return config

    @classmethod
    def channel_of(cls, model: type) -> EventChannel:
        channel = cls._channels.get(model)
        if channel is None:
            channel = cls._channels[model] = EventChannel(model.__name__)
        return channel

    @classmethod
    def reset_channels(cls) -> None:
        """Drop every listener on every channel."""
        for channel in cls._channels.values():
            channel.clear()


def _merge(model: type, config: ModelConfig, changes: dict[str, Any]) -> ModelConfig:
    allowed = ModelConfig.option_names()
    for name, value in changes.items():
        if name not in allowed:
            raise ConfigError(model.__name__, f"option {name!r}", value)
    return dataclasses.replace(config, **changes)
