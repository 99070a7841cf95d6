"""Publish/subscribe bus for engine events.

Handlers are synchronous. A handler needing async work should schedule it
with ``asyncio.create_task()`` instead of awaiting.
"""

import asyncio
from typing import Callable, Type, TypeVar

from scriptupd.logger import get_logger

from .types import Event

logger = get_logger("events.bus")

T = TypeVar("T", bound=Event)


class EventBus:
    """Dispatches events to the handlers subscribed to their exact type.

    Example:
        ```python
        bus = EventBus()
        bus.subscribe(ScriptUpdateProgress, lambda e: print(e.script_id, e.message))
        bus.publish(ScriptUpdateProgress(script_id=1, message="Checking", checking=True))
        ```

    Not thread-safe; meant to be used from a single event loop.
    """

    def __init__(self) -> None:
        self._handlers: dict[Type[Event], list[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """
        Register ``handler`` for events of ``event_type``.

        Subscribing the same handler twice has no effect.

        Raises:
            TypeError: If handler is a coroutine function
        """
        if asyncio.iscoroutinefunction(handler):
            raise TypeError(
                f"Event handler {getattr(handler, '__name__', handler)!r} is async; "
                f"subscribe a sync function that schedules the work with asyncio.create_task()"
            )
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)  # type: ignore[arg-type]
            logger.debug(f"Subscribed handler for {event_type.__name__}")

    def unsubscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Remove ``handler``; a no-op if it was not subscribed."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)  # type: ignore[arg-type]
            logger.debug(f"Unsubscribed handler for {event_type.__name__}")

    def publish(self, event: Event) -> None:
        """
        Call every handler of the event's type in subscription order.

        A failing handler is logged and does not stop the others.
        """
        event_type = type(event)
        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type.__name__}: {e}")

    def has_subscribers(self, event_type: Type[Event]) -> bool:
        return bool(self._handlers.get(event_type))

    def clear(self) -> None:
        self._handlers.clear()
