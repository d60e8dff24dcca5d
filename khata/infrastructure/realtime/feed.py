"""In-process change feed: publish committed writes, fan out to subscribers"""

import asyncio
import logging
import threading
from typing import List, Optional
from khata.config import settings
from khata.domain.models import ChangeEvent
from khata.infrastructure.observability.metrics import change_events_counter, change_events_dropped_counter

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    Async iterator over change events for one subscriber.

    Events arrive in publish order. close() unsubscribes and ends iteration.
    """

    def __init__(self, feed: "ChangeFeed", table: Optional[str], queue_size: int):
        self.table = table
        self._feed = feed
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    def matches(self, event: ChangeEvent) -> bool:
        return self.table is None or self.table == event.table

    def deliver(self, event: ChangeEvent) -> None:
        """Hand an event to the subscriber's loop; safe from any thread"""
        self._loop.call_soon_threadsafe(self._enqueue, event)

    def _enqueue(self, item) -> None:
        if self._closed and item is not _CLOSED:
            return
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            if item is not _CLOSED:
                change_events_dropped_counter.labels(table=item.table).inc()
                logger.warning("Dropped change event for slow subscriber", extra={"table": item.table})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed.unsubscribe(self)
        self._enqueue(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()


class ChangeFeed:
    """Publish/subscribe hub for insert/update/delete events"""

    def __init__(self, queue_size: int = 1000):
        self.queue_size = queue_size
        self._subscribers: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, table: Optional[str] = None) -> Subscription:
        """Subscribe to one table (or all when None); must be called from a running event loop"""
        subscription = Subscription(self, table, self.queue_size)
        with self._lock:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    def publish(self, event: ChangeEvent) -> None:
        change_events_counter.labels(table=event.table, kind=event.kind).inc()
        with self._lock:
            targets = [s for s in self._subscribers if s.matches(event)]

        for subscription in targets:
            try:
                subscription.deliver(event)
            except RuntimeError:
                # Subscriber's event loop is gone
                self.unsubscribe(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


change_feed = ChangeFeed(settings.change_feed_queue_size)
