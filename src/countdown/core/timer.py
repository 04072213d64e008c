"""Timer controller -- the public countdown timer façade."""

from __future__ import annotations

from typing import Callable

from countdown.core.clock import Clock, SystemClock
from countdown.core.config import TimerConfig
from countdown.core.events import EventCallback, EventChannel, Subscription, TimerEvent
from countdown.core.scheduler import AsyncioScheduler, Scheduler
from countdown.core.states import Operation, StateMachine, TimerPhase, TimerRuntime


class Timer:
    """A countdown timer with start/pause/resume/stop controls.

    Every public call is synchronous: state is updated and events are pushed
    to subscribers before the call returns.  Calls that make no sense in the
    current state (``pause()`` while idle, ``resume()`` while counting, ...)
    are silently ignored.

    Usage::

        timer = Timer(1000, continue_mode=True)
        timer.on_tick(lambda: print("tick"))
        timer.start()   # inside a running asyncio loop
    """

    def __init__(
        self,
        duration_ms: int,
        *,
        continue_mode: bool = False,
        begin_time: int | None = None,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._config = TimerConfig(duration_ms, continue_mode=continue_mode, begin_time=begin_time)
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._events = EventChannel()
        self._runtime = TimerRuntime()
        self._machine = StateMachine(self._config, self._clock, self._scheduler, self._events.emit)

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def duration_ms(self) -> int:
        return self._config.duration_ms

    # -- public interface ----------------------------------------------------

    def start(self) -> None:
        """Begin a new countdown cycle, emitting START and later TICK.

        With ``begin_time`` configured the cycle begins at that timestamp
        (immediately if it has already passed).  A paused timer continues
        from its remaining time without a new START.
        """
        self._machine.apply(self._runtime, Operation.START)

    def pause(self) -> None:
        """Pause a counting timer, keeping the remaining time for ``resume()``."""
        self._machine.apply(self._runtime, Operation.PAUSE)

    def resume(self) -> None:
        """Resume a paused timer from its remaining time."""
        self._machine.apply(self._runtime, Operation.RESUME)

    def stop(self) -> None:
        """Stop the timer and discard the remaining time.

        A stopped timer cannot be resumed; call ``start()`` to begin again.
        """
        self._machine.apply(self._runtime, Operation.STOP)

    def reset(self) -> None:
        """Deprecated: behaves like ``stop()`` but emits RESET instead of STOP."""
        self._machine.apply(self._runtime, Operation.RESET)

    def is_counting(self) -> bool:
        return self._machine.is_counting(self._runtime)

    def is_stopped(self) -> bool:
        return self._machine.is_stopped(self._runtime)

    def is_paused(self) -> bool:
        return self._machine.is_paused(self._runtime)

    def get_remaining_milliseconds(self) -> int:
        """Return the milliseconds left in the current or paused cycle."""
        return self._machine.get_remaining_milliseconds(self._runtime)

    def get_state(self) -> TimerPhase:
        """Return the active phase."""
        return self._runtime.phase

    # -- subscriptions -------------------------------------------------------

    def on_start(self, callback: Callable[[], None]) -> Subscription:
        """Called when a brand new cycle starts (not when a paused one resumes)."""
        return self._subscribe_kind(TimerEvent.START, callback)

    def on_pause(self, callback: Callable[[], None]) -> Subscription:
        """Called when a counting timer is paused.

        Pausing a timer that is still waiting for ``begin_time`` is silent.
        """
        return self._subscribe_kind(TimerEvent.PAUSE, callback)

    def on_resume(self, callback: Callable[[], None]) -> Subscription:
        return self._subscribe_kind(TimerEvent.RESUME, callback)

    def on_stop(self, callback: Callable[[], None]) -> Subscription:
        """Called when ``stop()`` halts a counting or paused timer."""
        return self._subscribe_kind(TimerEvent.STOP, callback)

    def on_tick(self, callback: Callable[[], None]) -> Subscription:
        """Called each time a countdown cycle completes."""
        return self._subscribe_kind(TimerEvent.TICK, callback)

    def on_event(self, callback: EventCallback) -> Subscription:
        """Called with the :class:`TimerEvent` of every lifecycle transition."""
        return self._events.subscribe(callback)

    # -- private helpers -----------------------------------------------------

    def _subscribe_kind(self, kind: TimerEvent, callback: Callable[[], None]) -> Subscription:
        return self._events.subscribe(lambda _event: callback(), kind)
