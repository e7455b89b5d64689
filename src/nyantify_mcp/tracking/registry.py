"""In-memory registry of running tasks."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable

from .models import Task, TaskResult

logger = logging.getLogger(__name__)


class DuplicateTaskError(ValueError):
    """Raised when a task id is started while it is still being tracked."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id '{task_id}' already exists")
        self.task_id = task_id


class TaskRegistry:
    """Track running tasks and decide whether their completion is worth a notification.

    Each id maps to at most one live task. Ending a task removes it, after which
    the id may be started again.
    """

    def __init__(
        self,
        min_duration_ms: int = 60_000,
        *,
        clock: Callable[[], float] | None = None,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        if min_duration_ms < 0:
            raise ValueError("min_duration_ms must be >= 0")
        self._min_duration_ms = min_duration_ms
        self._clock = clock or time.monotonic
        self._wall_clock = wall_clock or (lambda: datetime.now(timezone.utc))
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

    @property
    def min_duration_ms(self) -> int:
        return self._min_duration_ms

    def start(self, task_id: str, name: str, metadata: dict[str, Any] | None = None) -> Task:
        task = Task(
            id=task_id,
            name=name,
            start_time=self._clock(),
            started_at=self._wall_clock(),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            if task_id in self._tasks:
                raise DuplicateTaskError(task_id)
            self._tasks[task_id] = task

        logger.debug("Task started", extra={"task_id": task_id, "task_name": name})
        return task

    def end(self, task_id: str, force_notify: bool = False) -> TaskResult | None:
        """Stop tracking ``task_id`` and return its result, or ``None`` if it is not tracked."""

        with self._lock:
            task = self._tasks.pop(task_id, None)
            end_time = self._clock()
        if task is None:
            logger.debug("Task not found on end", extra={"task_id": task_id})
            return None

        duration_ms = max(0, round((end_time - task.start_time) * 1000))
        should_notify = force_notify or duration_ms >= self._min_duration_ms

        logger.debug(
            "Task ended",
            extra={
                "task_id": task_id,
                "duration_ms": duration_ms,
                "should_notify": should_notify,
            },
        )
        return TaskResult(
            id=task.id,
            name=task.name,
            duration_ms=duration_ms,
            should_notify=should_notify,
        )

    def cancel(self, task_id: str) -> bool:
        with self._lock:
            removed = self._tasks.pop(task_id, None) is not None
        if removed:
            logger.debug("Task cancelled", extra={"task_id": task_id})
        return removed

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def list_running(self) -> list[Task]:
        """Return a snapshot of the tracked tasks ordered by start time."""

        with self._lock:
            tasks = list(self._tasks.values())
        return sorted(tasks, key=lambda task: task.start_time)

    def elapsed_ms(self, task: Task) -> int:
        return max(0, round((self._clock() - task.start_time) * 1000))

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks


__all__ = ["DuplicateTaskError", "TaskRegistry"]
