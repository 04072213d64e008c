"""Event channel -- synchronous fan-out of timer lifecycle events."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class TimerEvent(Enum):
    """Lifecycle events pushed by the timer."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    RESET = "reset"
    TICK = "tick"


EventCallback = Callable[[TimerEvent], None]


class Subscription:
    """Registration returned by :meth:`EventChannel.subscribe`."""

    def __init__(self, channel: EventChannel, entry: tuple[TimerEvent | None, EventCallback]) -> None:
        self._channel = channel
        self._entry = entry
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving events.  Calling it more than once is harmless."""
        if not self._active:
            return
        self._active = False
        self._channel._remove(self._entry)


class EventChannel:
    """Broadcast point owned by a single timer.

    Subscribers are called synchronously in registration order.  A subscriber
    may filter on one :class:`TimerEvent` kind or receive all of them.  An
    exception raised by one subscriber is logged and does not prevent the
    remaining subscribers from being called.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[TimerEvent | None, EventCallback]] = []

    def subscribe(self, callback: EventCallback, kind: TimerEvent | None = None) -> Subscription:
        """Register *callback* for *kind* events, or for every event if *kind* is None."""
        entry = (kind, callback)
        self._subscribers.append(entry)
        logger.debug("Subscribed %s to %s", callback, kind.name if kind else "all events")
        return Subscription(self, entry)

    def emit(self, event: TimerEvent) -> None:
        # Snapshot so handlers can (un)subscribe while we iterate.
        for kind, callback in list(self._subscribers):
            if kind is not None and kind is not event:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception("Error dispatching %s to %s", event.name, callback)

    def __len__(self) -> int:
        return len(self._subscribers)

    def _remove(self, entry: tuple[TimerEvent | None, EventCallback]) -> None:
        # Identity match: the same callback may be registered more than once.
        for index, existing in enumerate(self._subscribers):
            if existing is entry:
                del self._subscribers[index]
                return
