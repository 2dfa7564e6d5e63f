#!/usr/bin/env python3
"""
Example script demonstrating the codetimer utilities.
"""

import logging
import time

from codetimer import (
    Timer,
    format_runtime,
    schedule_timed_task,
    schedule_timed_task_with_result,
    time_elapsed,
    time_elapsed_with_result,
)


def some_work():
    """Simulate some work"""
    time.sleep(0.5)


def work_with_answer():
    time.sleep(0.25)
    return 42


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # Method 1: time a callable directly
    print("=== Method 1: time_elapsed ===")
    duration = time_elapsed(some_work)
    print(f"some_work took {format_runtime(duration)}")

    print()

    # Method 2: keep the return value as well
    print("=== Method 2: time_elapsed_with_result ===")
    duration, answer = time_elapsed_with_result(work_with_answer)
    print(f"work_with_answer returned {answer} after {format_runtime(duration)}")

    print()

    # Method 3: Timer context manager logs the runtime on exit
    print("=== Method 3: Timer Context Manager ===")
    with Timer("Section 1"):
        time.sleep(0.3)

    print()

    # Method 4: scheduled timing, once and repeating
    print("=== Method 4: Scheduled Timing ===")

    def report(task, duration):
        print(f"one-shot firing took {format_runtime(duration)}")

    once = schedule_timed_task(1, False, report, some_work)
    once.join()

    def report_result(task, duration, result):
        print(f"firing {task.fire_count + 1}: {result} in {format_runtime(duration)}")
        if task.fire_count + 1 >= 3:
            task.cancel()

    repeating = schedule_timed_task_with_result(0.5, True, report_result, work_with_answer)
    repeating.join()


if __name__ == "__main__":
    main()
