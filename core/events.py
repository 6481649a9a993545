#!/usr/bin/env python3
"""In-process broadcaster feeding the leaderboard server-sent event stream."""

from __future__ import annotations

import queue
import threading
import time
from typing import Any, Dict


DEFAULT_QUEUE_SIZE = 64


class EventBus:
    """Publish/subscribe helper; each listener owns a bounded queue."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._listeners: set[queue.Queue] = set()
        self._lock = threading.Lock()
        self._queue_size = max(1, int(queue_size))

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def listen(self) -> queue.Queue:
        q: queue.Queue = queue.Queue(maxsize=self._queue_size)
        with self._lock:
            self._listeners.add(q)
        return q

    def remove(self, q: queue.Queue) -> None:
        with self._lock:
            self._listeners.discard(q)

    def publish(self, event_type: str, payload: Dict[str, Any]) -> int:
        """Queue the event for every listener; returns how many received it."""
        message = {
            "type": event_type,
            "payload": payload,
            "ts": time.time(),
        }
        with self._lock:
            listeners = list(self._listeners)
        delivered = 0
        for listener in listeners:
            try:
                listener.put_nowait(message)
            except queue.Full:
                # Slow listeners miss updates; publishers never block.
                continue
            delivered += 1
        return delivered


event_bus = EventBus()
