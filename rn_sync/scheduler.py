from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable


class IntervalScheduler:
    """Runs ``job`` every ``interval_s`` seconds, never two runs at once.

    Ticks that fall due while a run is still in progress are dropped rather
    than queued, so a slow cycle delays the next one instead of stacking up.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        interval_s: float,
        run_on_start: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.job = job
        self.interval_s = float(interval_s)
        self.run_on_start = run_on_start
        self._clock = clock
        self._run_lock = threading.Lock()
        self._stop = threading.Event()
        self.runs = 0
        self.skipped = 0
        self._log = logging.getLogger("rn_sync.scheduler")

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    def trigger(self) -> bool:
        """Run the job now unless a run is already in progress."""
        if not self._run_lock.acquire(blocking=False):
            self.skipped += 1
            self._log.warning("Previous cycle still running; skipping this tick")
            return False
        try:
            self.runs += 1
            self.job()
        finally:
            self._run_lock.release()
        return True

    def _next_due(self, start: float) -> float:
        now = self._clock()
        elapsed = max(0.0, now - start)
        ticks = int(elapsed // self.interval_s) + 1
        return start + ticks * self.interval_s

    def run_forever(self) -> None:
        """Block until stop() is called. Exceptions from the job propagate."""
        start = self._clock()
        self._log.info("Scheduler started interval_s=%.1f run_on_start=%s", self.interval_s, self.run_on_start)
        if self.run_on_start and not self._stop.is_set():
            self.trigger()
        while not self._stop.is_set():
            wait_s = max(0.0, self._next_due(start) - self._clock())
            if self._stop.wait(wait_s):
                break
            self.trigger()
        self._log.info("Scheduler stopped after %d runs", self.runs)

    def stop(self) -> None:
        self._stop.set()
