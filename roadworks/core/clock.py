from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

_TICK = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Naive values are taken to be UTC (SQLite hands them back that way)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class MonotonicClock:
    """
    UTC clock whose readings strictly increase.

    If the source repeats or steps backwards the reading is bumped one
    microsecond past the previous one. The lock only covers the read.
    """

    def __init__(self, source: Optional[Callable[[], datetime]] = None):
        self._source = source or utcnow
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            t = as_utc(self._source())
            if self._last is not None and t <= self._last:
                t = self._last + _TICK
            self._last = t
            return t
