"""Measure how long a unit of work takes, once or on a repeating schedule."""

__version__ = "0.1.0"

from .timer_utils import (
    DEFAULT_CLOCK,
    Measurement,
    Timer,
    format_runtime,
    time_elapsed,
    time_elapsed_with_result,
)
from .scheduling import (
    MIN_INTERVAL,
    ScheduledTask,
    Scheduler,
    ThreadScheduler,
    get_default_scheduler,
    normalize_interval,
    schedule_timed_task,
    schedule_timed_task_with_result,
    set_default_scheduler,
)

__all__ = [
    "DEFAULT_CLOCK",
    "Measurement",
    "Timer",
    "format_runtime",
    "time_elapsed",
    "time_elapsed_with_result",
    "MIN_INTERVAL",
    "ScheduledTask",
    "Scheduler",
    "ThreadScheduler",
    "get_default_scheduler",
    "normalize_interval",
    "schedule_timed_task",
    "schedule_timed_task_with_result",
    "set_default_scheduler",
]
