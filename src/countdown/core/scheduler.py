"""Scheduler -- one-shot delayed callbacks on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class CancelHandle(Protocol):
    """Handle returned by :meth:`Scheduler.schedule_once`.

    ``cancel()`` must be idempotent: cancelling a callback that already fired
    or was already cancelled is a no-op.
    """

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules a single delayed callback and exposes its cancellation."""

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> CancelHandle: ...


class AsyncioScheduler:
    """Scheduler built on :meth:`asyncio.AbstractEventLoop.call_later`.

    ``asyncio.TimerHandle.cancel()`` is already idempotent, so the loop's
    handle is returned as the :class:`CancelHandle` directly.

    When no *loop* is given, the running loop is looked up each time a
    callback is scheduled, so one scheduler can be created before
    ``asyncio.run()`` starts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> CancelHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        delay_seconds = max(delay_ms, 0) / 1000.0
        logger.debug("Scheduling callback %s in %d ms", callback, delay_ms)
        return loop.call_later(delay_seconds, callback)
