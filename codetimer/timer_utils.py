#!/usr/bin/env python3
"""
Utility functions for measuring how long a unit of work takes to run.
"""

import logging
import time
from typing import Any, Callable, NamedTuple

logger = logging.getLogger(__name__)

# Monotonic by default. Pass time.time to measure against the wall clock.
DEFAULT_CLOCK = time.perf_counter


class Measurement(NamedTuple):
    """Duration in seconds paired with the value the timed work returned."""
    duration: float
    result: Any = None

    def __str__(self):
        return format_runtime(self.duration)


def format_runtime(seconds):
    """Format runtime in hours, minutes, and seconds with decimal precision"""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    seconds_remainder = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes:02d}m {seconds_remainder:05.2f}s"
    elif minutes > 0:
        return f"{minutes}m {seconds_remainder:05.2f}s"
    else:
        return f"{seconds_remainder:.2f}s"


def _require_callable(work):
    if not callable(work):
        raise TypeError(f"work must be callable, got {type(work).__name__}")


def time_elapsed(work: Callable[[], Any], clock: Callable[[], float] = DEFAULT_CLOCK) -> float:
    """Run ``work`` once and return how many seconds it took.

    Any exception raised by ``work`` propagates unchanged; no duration is
    produced in that case.
    """
    _require_callable(work)
    start = clock()
    work()
    return abs(clock() - start)


def time_elapsed_with_result(work: Callable[[], Any], clock: Callable[[], float] = DEFAULT_CLOCK) -> Measurement:
    """Run ``work`` once and return ``Measurement(duration, result)``."""
    _require_callable(work)
    start = clock()
    result = work()
    return Measurement(abs(clock() - start), result)


class Timer:
    """Context manager for measuring and formatting runtime"""

    def __init__(self, description="Total runtime", clock=DEFAULT_CLOCK):
        self.description = description
        self.clock = clock
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = self.clock()
        self.end_time = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = self.clock()
        logger.info("%s: %s", self.description, format_runtime(self.elapsed()))
        return False

    def elapsed(self):
        """Get elapsed time in seconds"""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else self.clock()
        return abs(end - self.start_time)
