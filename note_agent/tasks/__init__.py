"""Sequential task queue used to pace outbound provider calls."""

from .task_queue import Task, TaskQueue

__all__ = ["Task", "TaskQueue"]
