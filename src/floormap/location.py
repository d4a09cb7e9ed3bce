"""Location readings, fixes, and the stream consumer.

A location source is any async iterator yielding ``LocationReading`` values
(or ``LocationError`` values when the underlying provider reports a failure).
``LocationTracker`` drains it one reading at a time on the event loop, so two
readings are never processed concurrently.  Errors and timeouts are logged
and skipped; the last good fix is kept by whoever handles the readings.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Union

from loguru import logger

DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class LocationReading:
    """One raw reading from the location source."""
    longitude: float
    latitude: float
    altitude: float | None = None


@dataclass(frozen=True)
class LocationFix:
    """A processed position as shown on the map.

    ``elevation`` is the quantized display height for ``floor``, not the
    raw altitude.
    """
    longitude: float
    latitude: float
    elevation: float
    floor: str


@dataclass(frozen=True)
class LocationError:
    """A failure reported by the location source (non-fatal)."""
    code: int | None = None
    message: str = ""


SourceItem = Union[LocationReading, LocationError]
ReadingHandler = Callable[[LocationReading], object]


class LocationQueue:
    """Async-iterable location source fed by ``put()`` calls.

    Used to bridge push-style providers (HTTP posts, device callbacks)
    into the tracker.  ``close()`` ends iteration.
    """

    _CLOSED = object()

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

    def put(self, item: SourceItem) -> None:
        self._queue.put_nowait(item)

    def close(self) -> None:
        self._queue.put_nowait(self._CLOSED)

    def __aiter__(self) -> "LocationQueue":
        return self

    async def __anext__(self) -> SourceItem:
        item = await self._queue.get()
        if item is self._CLOSED:
            raise StopAsyncIteration
        return item


class LocationTracker:
    """Consume a location source, handing each reading to ``handler``.

    Usage:
        tracker = LocationTracker(session.process_reading, timeout=10.0)
        await tracker.run(source)
    """

    def __init__(self, handler: ReadingHandler, timeout: float = DEFAULT_TIMEOUT_S) -> None:
        self._handler = handler
        self._timeout = timeout
        self._running = False
        self._pending: asyncio.Future | None = None
        self.processed = 0
        self.errors = 0

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Stop tracking now; a read still waiting on the source is cancelled."""
        self._running = False
        if self._pending is not None:
            self._pending.cancel()

    async def run(self, source: AsyncIterator[SourceItem]) -> None:
        self._running = True
        iterator = source.__aiter__()
        logger.info("Location tracking started")
        try:
            while self._running:
                # A timed-out read stays pending; cancelling it would close
                # generator sources.
                if self._pending is None:
                    self._pending = asyncio.ensure_future(iterator.__anext__())
                done, _ = await asyncio.wait({self._pending}, timeout=self._timeout)
                if not done:
                    self.errors += 1
                    logger.warning(f"Location source: no reading within {self._timeout:.1f}s")
                    continue

                next_item, self._pending = self._pending, None
                if next_item.cancelled():
                    break
                try:
                    item = next_item.result()
                except StopAsyncIteration:
                    break

                if isinstance(item, LocationError):
                    self.errors += 1
                    logger.warning(f"Location error: {item.message} (code={item.code})")
                    continue

                self._handler(item)
                self.processed += 1
        finally:
            self._running = False
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            logger.info(
                f"Location tracking stopped ({self.processed} readings, {self.errors} errors)"
            )
