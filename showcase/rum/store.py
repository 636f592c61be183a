"""In-memory RUM event store.

Holds recent Web Vitals samples in a bounded, time-windowed buffer. One
instance is created by the application at startup and shared by the ingest
and summary routes; nothing here touches the network or the database.

Retention is approximate by design: pruning drops the oldest prefix of the
buffer up to the first event still inside the window. Client timestamps are
clamped but not re-sorted, so an out-of-order straggler can shield a few
older events behind it until the capacity cap evicts them. Memory stays
bounded by ``capacity`` regardless.
"""

from __future__ import annotations

import logging
import math
from threading import Lock
from typing import Callable, Iterable, Optional

from showcase.rum.events import DeviceClass, MetricEvent, MetricName
from showcase.utils.time import epoch_ms

logger = logging.getLogger("showcase.rum")

DEFAULT_WINDOW_MS = 24 * 60 * 60 * 1000
DEFAULT_CAPACITY = 10_000


def _is_valid_timestamp(ts: object) -> bool:
    # None or 0 means "stamp on arrival".
    if ts is None:
        return True
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        return False
    return math.isfinite(ts)


def _device_class(value: object) -> DeviceClass:
    if isinstance(value, DeviceClass):
        return value
    try:
        return DeviceClass(value)
    except (TypeError, ValueError):
        return DeviceClass.UNKNOWN


def _is_well_formed(event: object) -> bool:
    if not isinstance(event, MetricEvent):
        return False
    if not isinstance(event.name, MetricName):
        return False
    if isinstance(event.value, bool) or not isinstance(event.value, (int, float)):
        return False
    if not math.isfinite(event.value):
        return False
    if not _is_valid_timestamp(event.timestamp):
        return False
    return isinstance(event.path, str) and event.path.startswith("/") and not event.path.startswith("//")


class RumStore:
    """Bounded FIFO buffer of metric events with a retention window."""

    def __init__(
        self,
        window_ms: int = DEFAULT_WINDOW_MS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        if window_ms < 1:
            raise ValueError("window_ms must be positive")
        self._lock = Lock()
        self._events: list[MetricEvent] = []
        self._window_ms = window_ms
        self._capacity = capacity
        self._clock = clock
        self._dropped = 0

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dropped(self) -> int:
        """Events discarded as malformed since startup."""
        return self._dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def add(self, event: MetricEvent) -> bool:
        """Append one event; returns False when it was discarded as malformed."""
        if not _is_well_formed(event):
            with self._lock:
                self._dropped += 1
            logger.debug("Dropping malformed RUM event: %r", event)
            return False

        now = self._clock()
        ts = event.timestamp if event.timestamp else now
        ts = max(0, min(int(ts), now))
        device = _device_class(event.device_class)
        if ts != event.timestamp or device is not event.device_class:
            event = MetricEvent(
                name=event.name,
                value=float(event.value),
                path=event.path,
                timestamp=ts,
                device_class=device,
                navigation_type=event.navigation_type,
                connection_type=event.connection_type,
                user_agent=event.user_agent,
            )

        with self._lock:
            self._events.append(event)
            overflow = len(self._events) - self._capacity
            if overflow > 0:
                del self._events[:overflow]
            self._prune_locked(now)
        return True

    def add_many(self, events: Iterable[MetricEvent]) -> int:
        """Add events in order, skipping malformed ones. Returns the accepted count."""
        accepted = 0
        for event in events:
            if self.add(event):
                accepted += 1
        return accepted

    def prune(self) -> None:
        with self._lock:
            self._prune_locked(self._clock())

    def _prune_locked(self, now: int) -> None:
        if not self._events:
            return
        cutoff = now - self._window_ms
        # Drop the stale prefix in one slice; insertion order tracks timestamp order.
        first_fresh = len(self._events)
        for idx, event in enumerate(self._events):
            if event.timestamp >= cutoff:
                first_fresh = idx
                break
        if first_fresh:
            del self._events[:first_fresh]

    def data_within(self, window_ms: Optional[int] = None) -> tuple[MetricEvent, ...]:
        """Snapshot of retained events with ``timestamp >= now - window_ms``."""
        window = self._window_ms if window_ms is None else window_ms
        cutoff = self._clock() - window
        with self._lock:
            return tuple(e for e in self._events if e.timestamp >= cutoff)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
