"""Lifecycle events and the per-entity-type event channel.

Every CRUD and link operation emits a pre-event before its statement
runs and a post-event once it succeeded. Listeners are plain callables
registered explicitly::

    User.events().on(Event.INSERTED, lambda user: audit(user))

Emission is synchronous and in subscription order. Coroutine listeners
are scheduled on the running loop and never awaited by the operation.
A failing listener is logged and handed to the channel's
``error_handler``; the remaining listeners still run.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from row_model.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]
ErrorHandler = Callable[["Event", BaseException], Any]


class Event(Enum):
    """Lifecycle event tags."""

    INSERT = "insert"
    INSERTED = "inserted"
    INSERT_MANY = "insert_many"
    INSERTED_MANY = "inserted_many"
    UPDATE = "update"
    UPDATED = "updated"
    DELETE = "delete"
    DELETED = "deleted"
    LINK = "link"
    LINKED = "linked"
    LINK_MANY = "link_many"
    LINKED_MANY = "linked_many"
    UNLINK = "unlink"
    UNLINKED = "unlinked"
    UNLINK_MANY = "unlink_many"
    UNLINKED_MANY = "unlinked_many"


def _check_event(event: Any) -> Event:
    if not isinstance(event, Event):
        raise ValidationError(f"Invalid event: {event!r}")
    return event


class EventChannel:
    """Publish/subscribe channel owned by one entity type."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.error_handler: ErrorHandler | None = None
        self._listeners: dict[Event, list[Listener]] = {}
        self._pending: set[asyncio.Future[Any]] = set()

    def on(self, event: Event, listener: Listener | None = None) -> Any:
        """Subscribe *listener* to *event*; usable as a decorator."""
        _check_event(event)
        if listener is None:

            def decorator(fn: Listener) -> Listener:
                return self.on(event, fn)

            return decorator
        if not callable(listener):
            raise ValidationError(f"Invalid listener: {listener!r}")
        self._listeners.setdefault(event, []).append(listener)
        return listener

    def off(self, event: Event, listener: Listener) -> None:
        """Unsubscribe *listener* from *event* if it is subscribed."""
        listeners = self._listeners.get(_check_event(event), [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: Event) -> list[Listener]:
        return list(self._listeners.get(_check_event(event), []))

    def clear(self, event: Event | None = None) -> None:
        """Drop the listeners of *event*, or of every event."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(_check_event(event), None)

    def emit(self, event: Event, *args: Any) -> None:
        listeners = self.listeners(event)
        logger.debug("%s: emitting %s to %d listener(s)", self.name, event.name, len(listeners))
        for listener in listeners:
            try:
                result = listener(*args)
            except Exception as e:
                logger.exception("%s: listener for %s failed", self.name, event.name)
                self._handle(event, e)
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)

    async def drain(self) -> None:
        """Wait for every scheduled coroutine listener to finish."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _schedule(self, event: Event, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.error("%s: no running loop for %s listener", self.name, event.name)
            self._handle(event, e)
            return
        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)
        future.add_done_callback(lambda f: self._settle(event, f))

    def _settle(self, event: Event, future: asyncio.Future[Any]) -> None:
        self._pending.discard(future)
        error = None if future.cancelled() else future.exception()
        if error is not None:
            logger.error("%s: listener for %s failed", self.name, event.name, exc_info=error)
            self._handle(event, error)

    def _handle(self, event: Event, error: BaseException) -> None:
        if self.error_handler is not None:
            self.error_handler(event, error)
