#!/usr/bin/env python3
"""
Run a timed unit of work on a schedule and report each duration to a callback.

The timer facility is abstracted behind ``Scheduler`` so the measuring code in
``timer_utils`` has no dependency on how firings are driven. ``ThreadScheduler``
is the default: every task gets its own daemon thread that sleeps until the
next deadline.

A task that is cancelled while a firing is in flight still lets that firing
finish, so at most one more callback may arrive after ``cancel()`` returns.
"""

import itertools
import logging
import math
import numbers
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from codetimer.timer_utils import DEFAULT_CLOCK, time_elapsed, time_elapsed_with_result

logger = logging.getLogger(__name__)

# Smallest interval the timer will honour (0.1 ms). Anything lower is clamped.
MIN_INTERVAL = 0.0001


class ScheduledTask:
    """Handle to a one-shot or repeating scheduled firing."""

    def __init__(self, interval: float, repeats: bool):
        self.interval = interval
        self.repeats = repeats
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._firing = False
        self._fire_count = 0

    def __repr__(self):
        state = "active" if self.is_active else "inactive"
        return (f"<ScheduledTask interval={self.interval} repeats={self.repeats} "
                f"fired={self.fire_count} {state}>")

    def cancel(self):
        """Stop further firings. Safe to call more than once."""
        with self._lock:
            if self._cancel_event.is_set():
                return
            self._cancel_event.set()
            if not self._firing:
                self._done_event.set()
        logger.debug("Cancelled %r", self)

    # Alias matching the host timer vocabulary.
    invalidate = cancel

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_active(self) -> bool:
        """False once the task is cancelled, has fired its only time, or died."""
        return not (self._cancel_event.is_set() or self._done_event.is_set())

    is_valid = is_active

    @property
    def fire_count(self) -> int:
        with self._lock:
            return self._fire_count

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until the task can no longer fire. Returns True if it reached that state."""
        return self._done_event.wait(timeout)

    # Firing bookkeeping. Scheduler implementations call begin_firing() before
    # each action, end_firing() after it returns, and finish() when they stop
    # driving the task for any other reason.

    def begin_firing(self) -> bool:
        with self._lock:
            if self._cancel_event.is_set() or self._done_event.is_set():
                return False
            self._firing = True
            return True

    def end_firing(self):
        with self._lock:
            self._firing = False
            self._fire_count += 1
            if not self.repeats or self._cancel_event.is_set():
                self._done_event.set()

    def finish(self):
        with self._lock:
            self._firing = False
            self._done_event.set()


class Scheduler(ABC):
    """Timer facility that drives ``ScheduledTask`` firings."""

    @abstractmethod
    def schedule(self, interval: float, repeats: bool,
                 action: Callable[[ScheduledTask], None]) -> ScheduledTask:
        """Register ``action`` and return its handle without blocking.

        ``action(task)`` must be called once per firing, first after
        ``interval`` seconds, and never concurrently for the same task.
        Each firing is bracketed by ``task.begin_firing()`` (skip the firing
        when it returns False) and ``task.end_firing()``. Call
        ``task.finish()`` if the task stops for any other reason.
        """


class ThreadScheduler(Scheduler):
    """Fires each task from a dedicated daemon thread at a fixed rate.

    Deadlines fall on ``start + k * interval``. When a firing overruns one or
    more deadlines those are skipped rather than fired back to back.
    """

    _counter = itertools.count(1)

    def __init__(self, clock=time.monotonic):
        self.clock = clock

    def schedule(self, interval, repeats, action):
        task = ScheduledTask(interval, repeats)
        thread = threading.Thread(
            target=self._run,
            args=(task, action),
            name=f"codetimer-{next(self._counter)}",
            daemon=True,
        )
        thread.start()
        logger.debug("Scheduled %r on %s", task, thread.name)
        return task

    def _wait_until(self, task, deadline):
        """Sleep until ``deadline``. Returns True if the task was cancelled first."""
        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                return task.cancelled
            if task._cancel_event.wait(min(remaining, threading.TIMEOUT_MAX)):
                return True

    def _run(self, task, action):
        try:
            deadline = self.clock() + task.interval
            while True:
                if self._wait_until(task, deadline) or not task.begin_firing():
                    return
                action(task)
                task.end_firing()
                if not task.repeats:
                    return
                deadline += task.interval
                now = self.clock()
                if deadline < now:
                    missed = math.ceil((now - deadline) / task.interval)
                    deadline += missed * task.interval
        finally:
            # An exception from the action ends the task and goes on to threading.excepthook.
            task.finish()


_default_scheduler: Optional[Scheduler] = None
_default_lock = threading.Lock()


def get_default_scheduler() -> Scheduler:
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            _default_scheduler = ThreadScheduler()
        return _default_scheduler


def set_default_scheduler(scheduler: Optional[Scheduler]) -> Optional[Scheduler]:
    """Replace the scheduler used when none is passed; returns the previous one.

    Passing None restores a fresh ``ThreadScheduler`` on next use.
    """
    global _default_scheduler
    if scheduler is not None and not isinstance(scheduler, Scheduler):
        raise TypeError(f"expected a Scheduler, got {type(scheduler).__name__}")
    with _default_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    return previous


def normalize_interval(interval) -> float:
    """Convert ``interval`` to float seconds, clamping to ``MIN_INTERVAL``.

    An infinite interval is kept as is: the task never fires until cancelled.
    """
    if isinstance(interval, bool) or not isinstance(interval, numbers.Real):
        raise TypeError(f"interval must be a real number of seconds, got {interval!r}")
    seconds = float(interval)
    if math.isnan(seconds) or seconds < MIN_INTERVAL:
        logger.warning("Interval %r is below the minimum of %s seconds; using the minimum instead",
                       interval, MIN_INTERVAL)
        return MIN_INTERVAL
    return seconds


def _check_callables(callback, work):
    for name, fn in (("callback", callback), ("work", work)):
        if not callable(fn):
            raise TypeError(f"{name} must be callable, got {type(fn).__name__}")


def schedule_timed_task(interval, repeats: bool = False,
                        callback: Optional[Callable[[ScheduledTask, float], Any]] = None,
                        work: Optional[Callable[[], Any]] = None,
                        scheduler: Optional[Scheduler] = None,
                        clock=DEFAULT_CLOCK) -> ScheduledTask:
    """Time ``work`` after ``interval`` seconds (and every interval if ``repeats``).

    Each firing calls ``callback(task, duration)`` once ``work`` has returned.
    ``callback`` and ``work`` are required; they default to None only so that
    ``repeats`` can be left out for a one-shot task.
    """
    _check_callables(callback, work)
    seconds = normalize_interval(interval)

    def fire(task):
        duration = time_elapsed(work, clock)
        callback(task, duration)

    if scheduler is None:
        scheduler = get_default_scheduler()
    return scheduler.schedule(seconds, bool(repeats), fire)


def schedule_timed_task_with_result(interval, repeats: bool = False,
                                    callback: Optional[Callable[[ScheduledTask, float, Any], Any]] = None,
                                    work: Optional[Callable[[], Any]] = None,
                                    scheduler: Optional[Scheduler] = None,
                                    clock=DEFAULT_CLOCK) -> ScheduledTask:
    """Like ``schedule_timed_task`` but calls ``callback(task, duration, result)``."""
    _check_callables(callback, work)
    seconds = normalize_interval(interval)

    def fire(task):
        duration, result = time_elapsed_with_result(work, clock)
        callback(task, duration, result)

    if scheduler is None:
        scheduler = get_default_scheduler()
    return scheduler.schedule(seconds, bool(repeats), fire)
