"""Running-total progress and ETA across concurrently validated subsystems."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class ProgressSnapshot:
    completed: int
    total: int
    per_subsystem: timedelta
    remaining: timedelta


class ProgressTracker:
    """Counts finished subsystems and estimates the time remaining.

    The increment and the average/ETA computation happen under one lock, so
    the divisor is never zero and snapshots are never torn.
    """

    def __init__(self, total: int, clock: Callable[[], float] = time.monotonic):
        self.total = total
        self._clock = clock
        self._completed = 0
        self._start = clock()
        self._lock = threading.Lock()

    def skip(self) -> None:
        """Drop a subsystem that will never complete (e.g. unparseable rules)."""
        with self._lock:
            self.total = max(self._completed, self.total - 1)

    def complete(self) -> ProgressSnapshot:
        with self._lock:
            self._completed += 1
            elapsed = self._clock() - self._start
            per_subsystem = elapsed / self._completed
            remaining = per_subsystem * max(self.total - self._completed, 0)
            return ProgressSnapshot(
                completed=self._completed,
                total=self.total,
                per_subsystem=timedelta(seconds=per_subsystem),
                remaining=timedelta(seconds=remaining),
            )

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed
