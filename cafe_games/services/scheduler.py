"""
Scheduled Tasks

Periodic background work runs here under one LifecycleManager with an
explicit start/stop, instead of free-running threads started at import time.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """A function run every interval_seconds on its own daemon thread."""

    def __init__(self, name: str, interval_seconds: float, func: Callable[[], object],
                 run_immediately: bool = False):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.func = func
        self.run_immediately = run_immediately
        self.runs = 0
        self.failures = 0
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> None:
        """Run the task, logging rather than propagating failures."""
        try:
            self.func()
            self.runs += 1
        except Exception as e:
            self.failures += 1
            logger.error("Error in scheduled task %s: %s", self.name, e)

    def _loop(self, stop_event: threading.Event) -> None:
        if self.run_immediately:
            self.run_once()
        while not stop_event.wait(self.interval_seconds):
            self.run_once()

    def start(self, stop_event: threading.Event) -> None:
        self._thread = threading.Thread(target=self._loop, args=(stop_event,),
                                        name=f"task-{self.name}", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


class LifecycleManager:
    """Owns every scheduled task in the process."""

    def __init__(self):
        self.tasks: List[ScheduledTask] = []
        self._stop_event = threading.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def add_task(self, task: ScheduledTask) -> ScheduledTask:
        if self._running:
            raise RuntimeError("Cannot add tasks while the lifecycle manager is running")
        self.tasks.append(task)
        return task

    def start(self) -> None:
        if self._running:
            return
        self._stop_event.clear()
        for task in self.tasks:
            task.start(self._stop_event)
        self._running = True
        logger.info("Started %d scheduled task(s)", len(self.tasks))

    def stop(self, timeout: float = 5.0) -> None:
        if not self._running:
            return
        self._stop_event.set()
        for task in self.tasks:
            task.join(timeout)
        self._running = False
        logger.info("Stopped scheduled tasks")

    def status(self) -> Dict[str, Dict[str, int]]:
        return {task.name: {"runs": task.runs, "failures": task.failures} for task in self.tasks}
