"""countdown: a countdown timer with pause/resume and lifecycle events."""

from countdown.core.config import TimerConfig, TimerConfigError
from countdown.core.events import Subscription, TimerEvent
from countdown.core.states import TimerPhase
from countdown.core.timer import Timer

__version__ = "1.0.0"

__all__ = [
    "Subscription",
    "Timer",
    "TimerConfig",
    "TimerConfigError",
    "TimerEvent",
    "TimerPhase",
    "__version__",
]
