"""EventBus — in-process pub/sub between the map engine and its clients.

Everything runs on a single asyncio event loop, so subscribers receive
``asyncio.Queue`` instances and publishing never blocks: the scene publishes
synchronously from pointer handlers and the WebSocket bridge awaits the
queue on the other side.
"""

from __future__ import annotations

import asyncio
from typing import Iterable


class EventBus:
    """Topic-filtered pub/sub with bounded, drop-oldest queues.

    A full queue loses its oldest message.  Each drop is counted per queue so
    the consumer can tell its stream has a gap and resynchronise
    (see :meth:`take_dropped`).
    """

    def __init__(self, maxsize: int = 256) -> None:
        self._maxsize = maxsize
        self._subscribers: dict[asyncio.Queue, frozenset[str] | None] = {}
        self._dropped: dict[asyncio.Queue, int] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, topics: Iterable[str] | None = None) -> asyncio.Queue:
        """Subscribe to ``topics`` (all topics when None)."""
        q: asyncio.Queue = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers[q] = frozenset(topics) if topics is not None else None
        self._dropped[q] = 0
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.pop(q, None)
        self._dropped.pop(q, None)

    def dropped(self, q: asyncio.Queue) -> int:
        """Messages discarded from ``q`` since the last :meth:`take_dropped`."""
        return self._dropped.get(q, 0)

    def take_dropped(self, q: asyncio.Queue) -> int:
        """Return and reset the drop count of ``q``."""
        count = self._dropped.get(q, 0)
        if q in self._dropped:
            self._dropped[q] = 0
        return count

    def publish(self, topic: str, data: dict | None = None) -> int:
        """Deliver ``{"type": topic, "data": data}`` to matching subscribers.

        Returns the number of queues the message was put on.
        """
        msg: dict = {"type": topic}
        if data is not None:
            msg["data"] = data
        delivered = 0
        for q, topics in list(self._subscribers.items()):
            if topics is not None and topic not in topics:
                continue
            if q.full():
                q.get_nowait()
                self._dropped[q] += 1
            q.put_nowait(msg)
            delivered += 1
        return delivered
