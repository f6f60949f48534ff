"""
Periodic tasks with skip-if-running semantics. Each task runs on its own thread,
so a slow fetch in one task never delays another.
"""

from __future__ import annotations
import logging
import threading
import time
from typing import Callable, List, Optional

logger = logging.getLogger("signal_bot.runtime.scheduler")


class PeriodicTask:
    """A callable run every `interval_s`. Overlapping runs are skipped, exceptions are logged."""

    def __init__(self, name: str, interval_s: float, func: Callable[[], object], run_immediately: bool = True):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.name = name
        self.interval_s = interval_s
        self.func = func
        self.run_immediately = run_immediately
        self._running = threading.Lock()
        self.runs = 0
        self.skipped = 0

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def run_once(self) -> bool:
        """Run unless a previous run is still in progress. Returns False when skipped."""
        if not self._running.acquire(blocking=False):
            self.skipped += 1
            logger.debug("%s still running, tick skipped", self.name)
            return False
        try:
            self.func()
        except Exception as e:
            logger.exception("%s tick failed: %s", self.name, e)
        finally:
            self.runs += 1
            self._running.release()
        return True


class Scheduler:
    """Drives PeriodicTasks at a fixed cadence until stop() is called."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.tasks: List[PeriodicTask] = []
        self._clock = clock
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    def add(self, task: PeriodicTask) -> PeriodicTask:
        self.tasks.append(task)
        return task

    def _loop(self, task: PeriodicTask) -> None:
        next_run = self._clock()
        if not task.run_immediately:
            next_run += task.interval_s
        while not self._stop.wait(max(0.0, next_run - self._clock())):
            task.run_once()
            next_run += task.interval_s
            now = self._clock()
            if next_run < now:
                # Slow run: drop the ticks that were missed instead of bursting.
                missed = int((now - next_run) // task.interval_s) + 1
                task.skipped += missed
                next_run += missed * task.interval_s
                logger.warning("%s overran its interval, skipped %d tick(s)", task.name, missed)

    def start(self) -> None:
        self._stop.clear()
        for task in self.tasks:
            t = threading.Thread(target=self._loop, args=(task,), name=f"task-{task.name}", daemon=True)
            t.start()
            self._threads.append(t)
        logger.info("Scheduler started: %s", ", ".join(f"{t.name}/{t.interval_s:g}s" for t in self.tasks))

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal all loops to exit. In-flight runs are abandoned after `timeout`."""
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads.clear()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until stop() is called. Returns True if stopped."""
        return self._stop.wait(timeout)
