"""In-process pub/sub between the scheduler and its side-effect owners.

The scheduler publishes from inside a synchronous tick with
:meth:`EventBus.publish_nowait`; a single consumer task delivers events
to subscribers in publish order, so a slow push request never stalls a
tick.  Async code may ``await publish(...)`` instead.

Delivery rules:

* Handlers may be plain functions or coroutine functions.
* A handler that raises is logged and dropped from the bus.
* ``match`` on subscribe is compared key-by-key against the payload.
* The queue is bounded; when full, the oldest pending event is discarded.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, NamedTuple

from flowfit.core.models.event import Event

_log = logging.getLogger(__name__)

Handler = Callable[[Event], Any]


class _Listener(NamedTuple):
    handler: Handler
    match: dict[str, Any] | None


class EventBus:
    """Bounded asyncio queue plus a consumer task.

    Args:
        queue_size: Pending events kept before the oldest is dropped.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self._queue_size = queue_size
        self._queue: asyncio.Queue[Event] | None = None
        self._consumer: asyncio.Task[None] | None = None
        # event_type -> {sub_id: listener}, insertion-ordered
        self._listeners: dict[str, dict[str, _Listener]] = {}

    @property
    def is_running(self) -> bool:
        return self._consumer is not None

    async def start(self) -> None:
        """Create the queue and consumer on the running loop."""
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._consumer = asyncio.create_task(self._drain(self._queue), name="event-bus")
        _log.info("Event bus started (queue_size=%d)", self._queue_size)

    async def stop(self) -> None:
        """Cancel the consumer and forget every subscriber.  Pending events are lost."""
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            try:
                await consumer
            except asyncio.CancelledError:
                pass
        self._listeners.clear()
        _log.info("Event bus stopped")

    # -- publishing ----------------------------------------------------

    def publish_nowait(self, event_type: str, payload: dict[str, Any] | None = None) -> None:
        """Queue an event from code running on the loop without awaiting."""
        if self._queue is None:
            raise RuntimeError("EventBus.start() has not been called")
        event = Event(event_type=event_type, payload=payload or {})
        if self._queue.full():
            dropped = self._queue.get_nowait()
            _log.warning("Event bus full, dropped %s", dropped.event_type)
        self._queue.put_nowait(event)

    async def publish(self, event_type: str, payload: dict[str, Any] | None = None) -> None:
        self.publish_nowait(event_type, payload)

    # -- subscribing ---------------------------------------------------

    def subscribe(
        self,
        event_type: str,
        handler: Handler,
        match: dict[str, Any] | None = None,
    ) -> str:
        """Deliver *event_type* events to *handler*; returns an id for :meth:`unsubscribe`.

        With *match*, only events whose payload has every given key/value
        are delivered.
        """
        sub_id = uuid.uuid4().hex
        self._listeners.setdefault(event_type, {})[sub_id] = _Listener(handler, match)
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        for listeners in self._listeners.values():
            if listeners.pop(sub_id, None) is not None:
                return

    # -- delivery ------------------------------------------------------

    async def _drain(self, queue: asyncio.Queue[Event]) -> None:
        while True:
            event = await queue.get()
            await self._deliver(event)

    async def _deliver(self, event: Event) -> None:
        listeners = self._listeners.get(event.event_type, {})
        for sub_id, (handler, match) in list(listeners.items()):
            if sub_id not in listeners:
                continue
            if match and any(event.payload.get(k) != v for k, v in match.items()):
                continue
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                _log.exception("Subscriber %r failed on %s; unsubscribed", handler, event.event_type)
                listeners.pop(sub_id, None)
