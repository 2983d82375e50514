from __future__ import annotations

import logging
import threading
from datetime import timedelta
from time import perf_counter
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ScheduledService:
    """Run a task serially on a fixed interval.

    A run never overlaps the previous one: the next tick is only scheduled once
    the task returned. Exceptions escaping the task are logged and the loop
    keeps going.
    """

    def __init__(self, name: str, interval: timedelta, task: Callable[[], Any]) -> None:
        if interval.total_seconds() <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        self.name = name
        self.interval = interval
        self.task = task

    def run_once(self) -> bool:
        started = perf_counter()
        try:
            self.task()
        except Exception:
            logger.exception("Scheduled task %s failed", self.name)
            return False
        logger.debug("Scheduled task %s finished in %.2fs", self.name, perf_counter() - started)
        return True

    def run_forever(self, stop_event: threading.Event | None = None, *, max_runs: int | None = None) -> None:
        stop = stop_event or threading.Event()
        logger.info("Scheduled task %s started, interval %s", self.name, self.interval)
        runs = 0
        while not stop.is_set():
            self.run_once()
            runs += 1
            if max_runs is not None and runs >= max_runs:
                break
            stop.wait(self.interval.total_seconds())
        logger.info("Scheduled task %s stopped", self.name)


__all__ = ["ScheduledService"]
