import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class ScheduledTask:
    fn: Callable[[], None]
    due: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class Debouncer:
    """
    Holds at most one pending task. Scheduling a new one cancels the previous,
    so a burst of calls inside the window results in a single run.
    Nothing runs on its own: the owner calls run_due() from its event loop.
    """

    def __init__(self, window: float = 100.0, clock: Callable[[], float] = monotonic_ms):
        self.window = window
        self.clock = clock
        self._pending: Optional[ScheduledTask] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> Optional[ScheduledTask]:
        return self._pending

    def schedule(self, fn: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(fn=fn, due=self.clock() + self.window)
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = task
        return task

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    def run_due(self) -> bool:
        """Run the pending task if its window has elapsed. Returns True if it ran."""
        task = self._pending
        if task is None or self.clock() < task.due:
            return False
        return self._run(task)

    def flush(self) -> bool:
        """Run the pending task now, whatever its due time."""
        task = self._pending
        if task is None:
            return False
        return self._run(task)

    def _run(self, task: ScheduledTask) -> bool:
        # a task scheduled after `task` was read stays pending
        with self._lock:
            if self._pending is not task:
                return False
            self._pending = None
        if task.cancelled:
            return False
        task.fn()
        return True
