"""Task tracking primitives."""

from .models import Task, TaskResult
from .registry import DuplicateTaskError, TaskRegistry

__all__ = ["DuplicateTaskError", "Task", "TaskRegistry", "TaskResult"]
