# src/tdm/domain/states.py
from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle.

    Allowed transitions:
      - PENDING -> IN_PROGRESS -> COMPLETED
      - PENDING -> COMPLETED (picked straight off the queue)

    Nothing leaves COMPLETED and nothing moves backwards.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    def can_transition_to(self, target: "TaskStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
}


class PriorityOrder(StrEnum):
    """
    Which end of the priority scale leaves the queue first.

      - URGENT_FIRST: larger priority value is more urgent (1=low .. 4=urgent)
      - LOWEST_FIRST: plain min-heap on the priority value
    """

    URGENT_FIRST = "urgent_first"
    LOWEST_FIRST = "lowest_first"
