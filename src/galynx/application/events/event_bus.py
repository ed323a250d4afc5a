"""Event bus delivering local events to frontend subscribers"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from galynx.domain.models.event import Event


class EventBus:
    """Central event bus for core -> frontend events

    Subscribers register by event name ("realtime:status",
    "realtime:message.created", ...); global handlers see every event.
    Events are processed asynchronously through a queue.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable]] = {}
        self._event_queue: asyncio.Queue = asyncio.Queue()
        self._running = False
        self._handlers: list[Callable] = []
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe(self, name: str, handler: Callable) -> None:
        """Subscribe handler to an event name

        Args:
            name: Event name to subscribe to
            handler: Callable (sync or async) invoked with the Event
        """
        self._subscribers.setdefault(name, []).append(handler)
        logger.debug(f"Subscribed handler to event: {name}")

    def unsubscribe(self, name: str, handler: Callable) -> None:
        """Remove handler from an event name subscription"""
        if name in self._subscribers:
            self._subscribers[name].remove(handler)
            logger.debug(f"Unsubscribed handler from event: {name}")

    def add_handler(self, handler: Callable) -> None:
        """Add global handler receiving every event"""
        self._handlers.append(handler)
        logger.debug("Added global event handler")

    def remove_handler(self, handler: Callable) -> None:
        """Remove a global handler if registered"""
        if handler in self._handlers:
            self._handlers.remove(handler)
            logger.debug("Removed global event handler")

    async def publish(self, event: Event) -> None:
        """Queue an event for delivery"""
        await self._event_queue.put(event)
        logger.debug(f"Published event: {event}")

    def publish_sync(self, event: Event) -> None:
        """Queue an event without awaiting (for testing)"""
        self._event_queue.put_nowait(event)
        logger.debug(f"Published event (sync): {event}")

    async def start(self) -> None:
        """Start the event processing loop as a background task"""
        if self._running:
            logger.warning("Event bus already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self) -> None:
        """Stop event processing after draining queued events"""
        if not self._running:
            logger.warning("Event bus not running")
            return

        if self._task:
            await self._event_queue.put(None)
            await self._task
            self._task = None

        self._running = False
        logger.info("Event bus stopped")

    async def _process_events(self) -> None:
        """Background task that processes events from the queue"""
        logger.debug("Event processing loop started")

        while True:
            event = await self._event_queue.get()
            if event is None:
                break
            try:
                await self._process_event(event)
            except Exception as e:
                logger.error(f"Error in event processing loop: {e}")

        logger.debug("Event processing loop stopped")

    async def _process_event(self, event: Event) -> None:
        """Notify global handlers first, then name-specific handlers"""
        for handler in [*self._handlers, *self._subscribers.get(event.name, [])]:
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.opt(exception=e).error(f"Handler failed for {event.name}: {e}")


def create_event(
    name: str,
    data: Any = None,
    timestamp: datetime | None = None,
) -> Event:
    """Factory function to create an Event

    Args:
        name: Event name
        data: Optional event payload
        timestamp: Optional timestamp

    Returns:
        New Event instance
    """
    return Event(name=name, data=data, timestamp=timestamp)
