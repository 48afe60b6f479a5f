# src/tdm/engine/scheduler.py
from __future__ import annotations

import datetime as dt
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tdm.domain.errors import InvalidTransitionError, SelfDependencyError
from tdm.domain.models import DependencyView, ScheduleView, TaskView
from tdm.domain.states import PriorityOrder, TaskStatus
from tdm.logging import get_logger

from .graph import DependencyGraph
from .queue import Comparator, PriorityQueue, ascending_priority, descending_priority
from .registry import Task, TaskRegistry

_LOG = get_logger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def comparator_for(order: PriorityOrder) -> Comparator:
    if order is PriorityOrder.LOWEST_FIRST:
        return ascending_priority
    return descending_priority


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Runtime config for the scheduler.
    """
    priority_order: PriorityOrder = PriorityOrder.URGENT_FIRST


class Scheduler:
    """
    Owns one registry, one dependency graph and one priority queue.

    After every mutation the ready set and topological order are re-derived
    from the graph and the queue is re-synchronised so that it holds exactly
    the ready, not-yet-completed tasks:
    - a task enters the queue when its last incomplete prerequisite goes away
    - it leaves when a new edge gives it an incomplete prerequisite, when it
      is deleted, or when it completes

    Concurrency semantics:
    - Every public method runs under one re-entrant lock, so a single
      instance may be shared between threads (e.g. request handlers).
    - Nothing blocks on anything else; execute_next() on an empty queue
      returns None straight away.
    """

    def __init__(
        self,
        cfg: Optional[SchedulerConfig] = None,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._cfg = cfg or SchedulerConfig()
        self._clock = clock

        self._lock = threading.RLock()

        self._registry = TaskRegistry()
        self._graph = DependencyGraph()
        self._queue: PriorityQueue[Task] = PriorityQueue(comparator_for(self._cfg.priority_order))

        # ids currently held by the queue
        self._queued: set[str] = set()

        # published after every mutation
        self._ready: list[str] = []
        self._order: list[str] = []

    @property
    def priority_order(self) -> PriorityOrder:
        return self._cfg.priority_order

    # -------------------------
    # Mutations
    # -------------------------

    def add_task(
        self,
        name: str,
        priority: int = 1,
        deadline: Optional[dt.date] = None,
        description: str = "",
    ) -> Task:
        """
        Registers a PENDING task and adds it to the graph. A task with no
        prerequisites is ready at once, so it also enters the queue.
        """
        with self._lock:
            task = self._registry.create(
                name,
                priority,
                now_ms=self._clock(),
                deadline=deadline,
                description=description,
            )
            self._graph.add_vertex(task.id, task)
            self.recompute_ready_set()
            _LOG.info("Created task %s (%r, priority=%d)", task.id, task.name, task.priority)
            return task

    def add_dependency(self, prereq_id: str, dependent_id: str) -> None:
        """
        prereq_id must complete before dependent_id may start.

        Raises SelfDependencyError, UnknownVertexError or CycleDetectedError;
        state is unchanged on any of them.
        """
        with self._lock:
            if prereq_id == dependent_id:
                _LOG.info("Rejected self dependency on %s", prereq_id)
                raise SelfDependencyError(
                    "A task cannot depend on itself",
                    details={"id": prereq_id},
                )
            self._graph.add_edge(prereq_id, dependent_id)
            self.recompute_ready_set()

    def remove_dependency(self, prereq_id: str, dependent_id: str) -> None:
        with self._lock:
            self._graph.remove_edge(prereq_id, dependent_id)
            self.recompute_ready_set()

    def delete_task(self, task_id: str) -> None:
        """Idempotent: unknown ids are ignored."""
        with self._lock:
            if self._registry.remove(task_id) is None:
                return
            self._graph.remove_vertex(task_id)
            if task_id in self._queued:
                self._queue.discard(lambda t: t.id == task_id)
                self._queued.discard(task_id)
            self.recompute_ready_set()
            _LOG.info("Deleted task %s", task_id)

    def recompute_ready_set(self) -> list[str]:
        """
        Re-derives the ready set and topological order from the graph and
        brings the queue in line with the ready set. Returns the ready ids.
        """
        with self._lock:
            completed = self._registry.completed_ids()
            ready = self._graph.get_ready_tasks(satisfied=completed)
            ready_set = set(ready)

            stale = self._queued - ready_set
            if stale:
                self._queue.discard(lambda t: t.id in stale)
                self._queued -= stale

            for task_id in ready:
                if task_id not in self._queued:
                    self._queue.insert(self._registry.get(task_id))
                    self._queued.add(task_id)

            self._ready = ready
            self._order = self._graph.topological_sort()
            return list(self._ready)

    def execute_next(self) -> Optional[Task]:
        """
        Pops the next ready task and marks it COMPLETED. Returns None when
        nothing is ready.
        """
        with self._lock:
            task = self._queue.extract_min()
            if task is None:
                return None

            self._queued.discard(task.id)
            self._transition(task, TaskStatus.COMPLETED)
            self.recompute_ready_set()
            _LOG.info("Executed task %s (%r)", task.id, task.name)
            return task

    def mark_in_progress(self, task_id: str) -> Task:
        """
        PENDING -> IN_PROGRESS. Queue and graph membership are unaffected.
        Repeating it on an IN_PROGRESS task is a no-op.
        """
        with self._lock:
            task = self._registry.get(task_id)
            if task.status is TaskStatus.IN_PROGRESS:
                return task
            self._transition(task, TaskStatus.IN_PROGRESS)
            return task

    def mark_completed(self, task_id: str) -> Task:
        """
        Completes a specific task out of priority order. The task must be
        ready: completed tasks and tasks with an incomplete prerequisite are
        rejected with InvalidTransitionError.
        """
        with self._lock:
            task = self._registry.get(task_id)
            if task.is_completed:
                raise InvalidTransitionError(
                    f"Task already completed: {task_id}",
                    details={"id": task_id, "status": task.status.value},
                )
            if task_id not in self._queued:
                blocking = [d for d in self._graph.get_dependencies(task_id) if not self._registry.get(d).is_completed]
                raise InvalidTransitionError(
                    f"Task has incomplete prerequisites: {task_id}",
                    details={"id": task_id, "blocked_by": blocking},
                )

            self._queue.discard(lambda t: t.id == task_id)
            self._queued.discard(task_id)
            self._transition(task, TaskStatus.COMPLETED)
            self.recompute_ready_set()
            _LOG.info("Completed task %s (%r)", task.id, task.name)
            return task

    # -------------------------
    # Queries
    # -------------------------

    def get_task(self, task_id: str) -> Task:
        with self._lock:
            return self._registry.get(task_id)

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return self._registry.list_tasks()

    def has_task(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._registry

    @property
    def execution_order(self) -> list[str]:
        with self._lock:
            return list(self._order)

    @property
    def ready_tasks(self) -> list[str]:
        with self._lock:
            return list(self._ready)

    def queued_ids(self) -> list[str]:
        """Queued ids in the order execute_next() would take them."""
        with self._lock:
            return [t.id for t in self._queue.ordered()]

    def peek_next(self) -> Optional[Task]:
        with self._lock:
            return self._queue.peek()

    def get_dependencies(self, task_id: str) -> list[str]:
        with self._lock:
            return self._graph.get_dependencies(task_id)

    def get_dependents(self, task_id: str) -> list[str]:
        with self._lock:
            return self._graph.get_dependents(task_id)

    def is_ready(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._queued

    def graph_snapshot(self) -> DependencyGraph:
        with self._lock:
            return self._graph.copy()

    # -------------------------
    # Views
    # -------------------------

    def describe_task(self, task_id: str) -> TaskView:
        with self._lock:
            return self._view(self._registry.get(task_id))

    def describe_tasks(self) -> list[TaskView]:
        with self._lock:
            return [self._view(t) for t in self._registry.list_tasks()]

    def snapshot(self) -> ScheduleView:
        """Consistent copy of order, ready set, queue and edges."""
        with self._lock:
            nxt = self._queue.peek()
            return ScheduleView(
                priority_order=self._cfg.priority_order,
                execution_order=list(self._order),
                ready=list(self._ready),
                queue=[t.id for t in self._queue.ordered()],
                next=nxt.id if nxt else None,
                edges=[DependencyView(prerequisite_id=a, dependent_id=b) for a, b in self._graph.edges()],
            )

    # -------------------------
    # Helpers
    # -------------------------

    def _view(self, task: Task) -> TaskView:
        return TaskView(
            id=task.id,
            name=task.name,
            priority=task.priority,
            deadline=task.deadline,
            description=task.description,
            status=task.status,
            ready=task.id in self._queued,
            created_at=task.created_at,
            updated_at=task.updated_at,
            started_at=task.started_at,
            finished_at=task.finished_at,
            dependencies=self._graph.get_dependencies(task.id),
            dependents=self._graph.get_dependents(task.id),
        )

    def _transition(self, task: Task, target: TaskStatus) -> None:
        if not task.status.can_transition_to(target):
            raise InvalidTransitionError(
                f"Cannot move task {task.id} from {task.status.value} to {target.value}",
                details={"id": task.id, "status": task.status.value, "target": target.value},
            )
        now = self._clock()
        task.status = target
        task.updated_at = now
        if target is TaskStatus.IN_PROGRESS:
            task.started_at = now
        elif target is TaskStatus.COMPLETED:
            task.finished_at = now
