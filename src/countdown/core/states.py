"""State machine -- transition and timing rules of the countdown timer.

The timer is always in exactly one of three phases:

* ``STABLE`` -- idle, finished, or paused with leftover time.
* ``COUNTING_TO_BEGIN_TIME`` -- waiting for the configured ``begin_time``.
* ``COUNTING`` -- a cycle is running, backed by one pending callback.

:class:`StateMachine` holds no timer state of its own.  Every call receives
the :class:`TimerRuntime` it operates on, and dispatches on
``runtime.phase``.  Operations whose precondition does not hold are
ignored: no event, no side effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from countdown.core.clock import Clock
from countdown.core.config import TimerConfig
from countdown.core.events import TimerEvent
from countdown.core.scheduler import CancelHandle, Scheduler

logger = logging.getLogger(__name__)


class TimerPhase(Enum):
    """Mutually exclusive phases of the timer."""

    STABLE = "stable"
    COUNTING_TO_BEGIN_TIME = "counting_to_begin_time"
    COUNTING = "counting"


class Operation(Enum):
    """Mutating operations accepted by :meth:`StateMachine.apply`."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    RESET = "reset"


_HALT_EVENTS = {Operation.STOP: TimerEvent.STOP, Operation.RESET: TimerEvent.RESET}


@dataclass
class TimerRuntime:
    """Mutable per-timer fields.

    ``remaining_ms`` is the time left in the current cycle when not actively
    counting; 0 means no cycle is in progress.  ``start_timestamp`` is only
    meaningful while ``phase`` is ``COUNTING``.  ``pending`` is the single
    outstanding scheduled callback, if any.
    """

    remaining_ms: int = 0
    start_timestamp: int | None = None
    phase: TimerPhase = TimerPhase.STABLE
    pending: CancelHandle | None = None


class StateMachine:
    """Applies operations and answers queries for a :class:`TimerRuntime`."""

    def __init__(
        self,
        config: TimerConfig,
        clock: Clock,
        scheduler: Scheduler,
        emit: Callable[[TimerEvent], None],
    ) -> None:
        self._config = config
        self._clock = clock
        self._scheduler = scheduler
        self._emit = emit

    # -- operations ----------------------------------------------------------

    def apply(self, runtime: TimerRuntime, operation: Operation) -> None:
        """Apply *operation* according to the rules of the active phase."""
        phase = runtime.phase
        if phase is TimerPhase.STABLE:
            self._apply_stable(runtime, operation)
        elif phase is TimerPhase.COUNTING_TO_BEGIN_TIME:
            self._apply_counting_to_begin_time(runtime, operation)
        else:
            self._apply_counting(runtime, operation)

    # -- queries -------------------------------------------------------------

    def is_counting(self, runtime: TimerRuntime) -> bool:
        return runtime.phase is TimerPhase.COUNTING

    def is_paused(self, runtime: TimerRuntime) -> bool:
        return runtime.phase is TimerPhase.STABLE and runtime.remaining_ms > 0

    def is_stopped(self, runtime: TimerRuntime) -> bool:
        if runtime.phase is TimerPhase.COUNTING_TO_BEGIN_TIME:
            return True
        return runtime.phase is TimerPhase.STABLE and runtime.remaining_ms == 0

    def get_remaining_milliseconds(self, runtime: TimerRuntime) -> int:
        """Return the live remaining time of the current or paused cycle.

        While waiting for ``begin_time`` no cycle exists yet, so this is 0.
        """
        if runtime.phase is TimerPhase.COUNTING:
            elapsed = self._clock.now() - self._started_at(runtime)
            return max(int(runtime.remaining_ms - elapsed), 0)
        if runtime.phase is TimerPhase.COUNTING_TO_BEGIN_TIME:
            return 0
        return runtime.remaining_ms

    # -- STABLE --------------------------------------------------------------

    def _apply_stable(self, runtime: TimerRuntime, operation: Operation) -> None:
        if operation is Operation.START:
            if self._config.begin_time is not None:
                self._enter(runtime, TimerPhase.COUNTING_TO_BEGIN_TIME)
            else:
                self._enter(runtime, TimerPhase.COUNTING)
            self.apply(runtime, Operation.START)
        elif operation is Operation.RESUME:
            if runtime.remaining_ms <= 0:
                return
            self._enter(runtime, TimerPhase.COUNTING)
            self._schedule_cycle(runtime, runtime.remaining_ms)
            self._emit(TimerEvent.RESUME)
        elif operation in _HALT_EVENTS:
            # Only a paused timer has progress to discard.
            if runtime.remaining_ms <= 0:
                return
            self._clear(runtime)
            self._emit(_HALT_EVENTS[operation])

    # -- COUNTING_TO_BEGIN_TIME ----------------------------------------------

    def _apply_counting_to_begin_time(self, runtime: TimerRuntime, operation: Operation) -> None:
        if operation is Operation.START:
            if runtime.pending is not None:
                return
            delay = int(self._config.begin_time - self._clock.now())
            if delay < 0:
                self._begin_counting(runtime)
                return
            logger.debug("Deferring start by %d ms until begin time", delay)
            runtime.pending = self._schedule_or_settle(
                runtime, delay, lambda: self._on_begin_time(runtime)
            )
        elif operation is not Operation.RESUME:
            # PAUSE, STOP and RESET all disarm the deferred start silently.
            self._enter(runtime, TimerPhase.STABLE)

    def _on_begin_time(self, runtime: TimerRuntime) -> None:
        runtime.pending = None
        self._begin_counting(runtime)

    def _begin_counting(self, runtime: TimerRuntime) -> None:
        self._enter(runtime, TimerPhase.COUNTING)
        self.apply(runtime, Operation.START)

    # -- COUNTING ------------------------------------------------------------

    def _apply_counting(self, runtime: TimerRuntime, operation: Operation) -> None:
        if operation is Operation.START:
            if runtime.pending is not None:
                return
            fresh = runtime.remaining_ms == 0
            cycle_ms = self._config.duration_ms if fresh else runtime.remaining_ms
            self._schedule_cycle(runtime, cycle_ms)
            if fresh:
                self._emit(TimerEvent.START)
        elif operation is Operation.PAUSE:
            if runtime.pending is None:
                return
            elapsed = self._clock.now() - self._started_at(runtime)
            runtime.remaining_ms = max(int(runtime.remaining_ms - elapsed), 0)
            self._enter(runtime, TimerPhase.STABLE)
            self._emit(TimerEvent.PAUSE)
        elif operation in _HALT_EVENTS:
            if runtime.pending is None:
                return
            self._clear(runtime)
            self._enter(runtime, TimerPhase.STABLE)
            self._emit(_HALT_EVENTS[operation])

    def _schedule_cycle(self, runtime: TimerRuntime, cycle_ms: int) -> None:
        """Start a counting segment of *cycle_ms*.

        The runtime is only updated once the scheduler has accepted the
        callback.  If scheduling raises, the timer settles back to STABLE
        with its previous remaining time and the error propagates.
        """
        started_at = self._clock.now()
        handle = self._schedule_or_settle(
            runtime, cycle_ms, lambda: self._on_cycle_complete(runtime)
        )
        runtime.remaining_ms = cycle_ms
        runtime.start_timestamp = started_at
        runtime.pending = handle

    def _schedule_or_settle(
        self, runtime: TimerRuntime, delay_ms: int, callback: Callable[[], None]
    ) -> CancelHandle:
        try:
            return self._scheduler.schedule_once(delay_ms, callback)
        except Exception:
            self._enter(runtime, TimerPhase.STABLE)
            raise

    def _on_cycle_complete(self, runtime: TimerRuntime) -> None:
        runtime.pending = None
        runtime.remaining_ms = 0
        if self._config.continue_mode:
            self._schedule_cycle(runtime, self._config.duration_ms)
        else:
            self._enter(runtime, TimerPhase.STABLE)
        # Runtime is consistent before subscribers run, so they may call back in.
        self._emit(TimerEvent.TICK)

    # -- helpers -------------------------------------------------------------

    def _started_at(self, runtime: TimerRuntime) -> int:
        if runtime.start_timestamp is None:
            return self._clock.now()
        return runtime.start_timestamp

    def _cancel_pending(self, runtime: TimerRuntime) -> None:
        if runtime.pending is not None:
            runtime.pending.cancel()
            runtime.pending = None
            logger.debug("Cancelled pending callback")

    def _clear(self, runtime: TimerRuntime) -> None:
        """Cancel any pending callback and forget the cycle's progress."""
        self._cancel_pending(runtime)
        runtime.remaining_ms = 0
        runtime.start_timestamp = None

    def _enter(self, runtime: TimerRuntime, phase: TimerPhase) -> None:
        """Switch the active phase, dropping what the previous phase left behind."""
        self._cancel_pending(runtime)
        if runtime.phase is TimerPhase.COUNTING and phase is not TimerPhase.COUNTING:
            runtime.start_timestamp = None
        logger.debug("Timer phase %s -> %s", runtime.phase.value, phase.value)
        runtime.phase = phase
