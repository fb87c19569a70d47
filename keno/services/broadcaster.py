"""Fan-out of game events to connected clients."""

from __future__ import annotations

import json
import logging
import queue
from collections.abc import Callable
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

Event = dict[str, Any]


def make_event(event_type: str, data: Any) -> Event:
    return {"type": event_type, "data": data}


def format_sse(event: Event) -> str:
    """Encode an event as a Server-Sent Events frame."""

    return f"event: {event['type']}\ndata: {json.dumps(event, separators=(',', ':'))}\n\n"


class Subscription:
    """One client's bounded event queue."""

    def __init__(self, broadcaster: "Broadcaster", maxsize: int) -> None:
        self._broadcaster = broadcaster
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, event: Event) -> bool:
        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            return False
        return True

    def get(self, timeout: float | None = None) -> Event | None:
        """Next event, or None if nothing arrived within `timeout`."""

        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)


class Broadcaster:
    """Best-effort publisher.

    `publish` never blocks: a subscriber whose queue is full is dropped.
    """

    def __init__(self, queue_size: int = 256) -> None:
        self._lock = Lock()
        self._subscribers: set[Subscription] = set()
        self._queue_size = int(queue_size)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, initial: Callable[[], Event] | None = None) -> Subscription:
        """Register a subscriber.

        `initial` builds the first event (typically a state snapshot); it is
        queued before any event published afterwards.
        """

        sub = Subscription(self, self._queue_size)
        with self._lock:
            if initial is not None:
                sub.offer(initial())
            self._subscribers.add(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)
            sub.closed = True

    def publish(self, event_type: str, data: Any) -> int:
        """Send an event to all subscribers. Returns how many received it."""

        event = make_event(event_type, data)
        with self._lock:
            subscribers = list(self._subscribers)

        delivered = 0
        for sub in subscribers:
            if sub.offer(event):
                delivered += 1
                continue
            if not sub.closed:
                logger.warning("Dropping slow subscriber (queue full) on %s", event_type)
            self.unsubscribe(sub)
        return delivered
