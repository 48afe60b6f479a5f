# src/tdm/engine/registry.py
from __future__ import annotations

import datetime as dt
import itertools
from dataclasses import dataclass, field
from typing import Optional

from tdm.domain.errors import InvalidTaskError, UnknownVertexError
from tdm.domain.states import TaskStatus
from tdm.logging import get_logger

_LOG = get_logger(__name__)


@dataclass
class Task:
    """
    Canonical task record. Everything except status and the lifecycle
    stamps is fixed at creation.
    """
    id: str
    name: str
    priority: int
    created_at: int
    deadline: Optional[dt.date] = None
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    updated_at: int = 0
    started_at: Optional[int] = None
    finished_at: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED


@dataclass
class TaskRegistry:
    """
    Owns task records and allocates ids ("task-1", "task-2", ...).

    Ids come from a monotonically increasing counter and are never reused,
    even after deletion.
    """
    id_prefix: str = "task"
    _tasks: dict[str, Task] = field(default_factory=dict, init=False, repr=False)
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def create(
        self,
        name: str,
        priority: int,
        now_ms: int,
        deadline: Optional[dt.date] = None,
        description: str = "",
    ) -> Task:
        """
        Validates and stores a new PENDING task.

        Raises InvalidTaskError on an empty name or a non-positive priority;
        no id is consumed in that case.
        """
        problems = _validate(name, priority)
        if problems:
            raise InvalidTaskError("Invalid task", details=problems)

        task = Task(
            id=f"{self.id_prefix}-{next(self._counter)}",
            name=name,
            priority=priority,
            created_at=now_ms,
            deadline=deadline,
            description=description or "",
        )
        self._tasks[task.id] = task
        _LOG.debug("Registered task %s (%r, priority=%d)", task.id, name, priority)
        return task

    def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownVertexError(f"Task not found: {task_id}", details={"id": task_id})
        return task

    def remove(self, task_id: str) -> Optional[Task]:
        return self._tasks.pop(task_id, None)

    def list_tasks(self) -> list[Task]:
        # dicts keep insertion order, i.e. creation order
        return list(self._tasks.values())

    def completed_ids(self) -> set[str]:
        return {t.id for t in self._tasks.values() if t.is_completed}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)


def _validate(name: object, priority: object) -> dict[str, str]:
    problems: dict[str, str] = {}
    if not isinstance(name, str) or not name.strip():
        problems["name"] = "name must be non-empty"
    # bool is an int subclass but not a priority
    if isinstance(priority, bool) or not isinstance(priority, int) or priority <= 0:
        problems["priority"] = "priority must be a positive integer"
    return problems
