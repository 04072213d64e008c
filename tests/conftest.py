"""Shared fixtures: a deterministic clock/scheduler pair driven by hand."""

from __future__ import annotations

from typing import Callable

import pytest

from countdown.core.events import TimerEvent
from countdown.core.timer import Timer

EPOCH_MS = 1_700_000_000_000


class FakeHandle:
    """Cancel handle for :class:`FakeTime`; ``cancel()`` is idempotent."""

    def __init__(self, due: int, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTime:
    """Virtual clock and one-shot scheduler sharing the same timeline.

    ``advance(ms)`` moves time forward and fires every due callback in due
    order, including callbacks scheduled by callbacks fired along the way.
    Setting ``failure`` makes the next ``schedule_once()`` calls raise it.
    """

    def __init__(self, start: int = EPOCH_MS) -> None:
        self.origin = start
        self._now = start
        self._seq = 0
        self.handles: list[FakeHandle] = []
        self.failure: Exception | None = None

    def now(self) -> int:
        return self._now

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> FakeHandle:
        if self.failure is not None:
            raise self.failure
        self._seq += 1
        handle = FakeHandle(self._now + max(delay_ms, 0), self._seq, callback)
        self.handles.append(handle)
        return handle

    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, ms: int) -> None:
        target = self._now + ms
        while True:
            due = [h for h in self.pending() if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self._now = handle.due
            handle.fired = True
            handle.callback()
        self._now = target


class Recorder:
    """Collects every event pushed by a timer."""

    def __init__(self) -> None:
        self.events: list[TimerEvent] = []

    def __call__(self, event: TimerEvent) -> None:
        self.events.append(event)

    def count(self, kind: TimerEvent) -> int:
        return self.events.count(kind)


@pytest.fixture()
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture()
def make_timer(fake_time: FakeTime) -> Callable[..., Timer]:
    """Return a factory building timers on the fake timeline."""

    def factory(duration_ms: int, *, continue_mode: bool = False, begin_time: int | None = None) -> Timer:
        return Timer(
            duration_ms,
            continue_mode=continue_mode,
            begin_time=begin_time,
            clock=fake_time,
            scheduler=fake_time,
        )

    return factory


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()
