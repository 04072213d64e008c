"""Clock -- the single source of "now" for the timer core."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Supplies the current timestamp in integer milliseconds since the epoch.

    The timer reads the clock on every operation and query and never mutates
    it.  Tests inject a fake clock to get deterministic or accelerated time.
    """

    def now(self) -> int:
        """Return the current time in milliseconds since the Unix epoch."""
        ...


class SystemClock:
    """Wall-clock implementation backed by ``time.time_ns()``.

    Wall-clock time (not ``time.monotonic()``) is used because ``begin_time``
    is an absolute epoch timestamp and must be comparable with ``now()``.
    """

    def now(self) -> int:
        return time.time_ns() // 1_000_000
