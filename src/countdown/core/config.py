"""Timer configuration, fixed at construction."""

from __future__ import annotations

from dataclasses import dataclass


class TimerConfigError(ValueError):
    """Raised when a timer is constructed with an invalid configuration."""


@dataclass(frozen=True)
class TimerConfig:
    """Immutable timer configuration.

    ``duration_ms`` is the length of one countdown cycle.  With
    ``continue_mode`` the timer restarts a fresh cycle after every TICK.
    ``begin_time`` (epoch milliseconds) defers the first cycle until that
    timestamp is reached.
    """

    duration_ms: int
    continue_mode: bool = False
    begin_time: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.duration_ms, bool) or not isinstance(self.duration_ms, int):
            raise TypeError(
                f"duration_ms must be an integer, got {type(self.duration_ms).__name__}"
            )
        if self.duration_ms <= 0:
            raise TimerConfigError(f"duration_ms must be positive, got {self.duration_ms}")
        if self.begin_time is not None and (
            isinstance(self.begin_time, bool) or not isinstance(self.begin_time, (int, float))
        ):
            raise TypeError(
                f"begin_time must be a timestamp in milliseconds, got {type(self.begin_time).__name__}"
            )
