"""Data models for in-flight task tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    name: str
    start_time: float
    started_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of ending a tracked task."""

    id: str
    name: str
    duration_ms: int
    should_notify: bool

    @property
    def duration_seconds(self) -> int:
        return self.duration_ms // 1000


__all__ = ["Task", "TaskResult"]
