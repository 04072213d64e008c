"""CLI entry point for countdown.

Uses Click to expose the ``countdown`` command group.  ``countdown run``
drives a :class:`~countdown.core.timer.Timer` on an asyncio event loop and
prints one line per lifecycle event.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, TypeVar

import click

import countdown
from countdown.core.clock import SystemClock
from countdown.core.config import TimerConfigError
from countdown.core.events import TimerEvent
from countdown.core.timer import Timer
from countdown.logger import configure_logging

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``TimerConfigError`` to a CLI error.

    On ``TimerConfigError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except TimerConfigError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


async def _drive(timer: Timer, ticks: int) -> int:
    """Run *timer* until it finishes, echoing events.  Returns the TICK count.

    A one-shot timer finishes at its TICK.  A continuing timer is stopped
    after *ticks* TICKs and finishes at the resulting STOP.
    """
    clock = SystemClock()
    started_at = clock.now()
    finished: asyncio.Future[None] = asyncio.get_running_loop().create_future()
    tick_count = 0

    def on_event(event: TimerEvent) -> None:
        nonlocal tick_count
        click.echo(f"{clock.now() - started_at:>8} ms  {event.name}")
        if event is TimerEvent.TICK:
            tick_count += 1
            if not timer.config.continue_mode:
                finished.set_result(None)
            elif tick_count >= ticks:
                timer.stop()
        elif event is TimerEvent.STOP and not finished.done():
            finished.set_result(None)

    timer.on_event(on_event)
    timer.start()
    await finished
    return tick_count


@click.group()
@click.version_option(version=countdown.__version__, prog_name="countdown")
@click.option("--debug", is_flag=True, envvar="COUNTDOWN_DEBUG", help="Enable debug logging.")
def cli(debug: bool) -> None:
    """countdown: a pausable countdown timer with lifecycle events."""
    configure_logging(debug)


@cli.command()
@click.argument("duration_ms", type=int)
@click.option(
    "--continue",
    "continue_mode",
    is_flag=True,
    envvar="COUNTDOWN_CONTINUE",
    help="Restart a fresh cycle after every tick.",
)
@click.option("--begin-at", type=int, default=None, help="Epoch milliseconds to begin counting at.")
@click.option("--begin-in", type=int, default=None, help="Milliseconds from now to begin counting.")
@click.option(
    "--ticks",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    envvar="COUNTDOWN_TICKS",
    help="With --continue, stop after this many ticks.",
)
def run(
    duration_ms: int,
    continue_mode: bool,
    begin_at: int | None,
    begin_in: int | None,
    ticks: int,
) -> None:
    """Run a timer of DURATION_MS milliseconds and print its events."""
    if begin_at is not None and begin_in is not None:
        raise click.UsageError("--begin-at and --begin-in are mutually exclusive")
    begin_time = begin_at
    if begin_in is not None:
        begin_time = SystemClock().now() + begin_in

    timer = _run(
        lambda: Timer(duration_ms, continue_mode=continue_mode, begin_time=begin_time)
    )
    logger.debug("Running %s", timer.config)
    tick_count = asyncio.run(_drive(timer, ticks))
    click.echo(f"Finished after {tick_count} tick(s)")
