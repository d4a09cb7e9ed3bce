"""EventBus — thread-safe pub/sub for map session events.

The map session publishes here whenever a location reading changes what the
user sees, so that push channels (or tests) can follow along without polling.

Event types:
    location_update  -- every processed reading (fix as data)
    room_changed     -- the containing room differs from the previous one
    floor_changed    -- the altitude classifier switched floors
    map_loaded       -- building features were fetched and bucketed
"""

from __future__ import annotations

import queue
import threading

LOCATION_UPDATE = "location_update"
ROOM_CHANGED = "room_changed"
FLOOR_CHANGED = "floor_changed"
MAP_LOADED = "map_loaded"


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._subscribers: list[tuple[queue.Queue, str | None]] = []

    def subscribe(self, event_type: str | None = None) -> queue.Queue:
        """Subscribe to events. Returns a Queue receiving matching events.

        With ``event_type`` set only that type is delivered; otherwise all.
        """
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append((q, event_type))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [(s, t) for s, t in self._subscribers if s is not q]

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            for q, wanted in self._subscribers:
                if wanted is not None and wanted != event_type:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Drop oldest so the latest position always gets through
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass
