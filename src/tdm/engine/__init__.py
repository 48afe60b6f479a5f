# src/tdm/engine/__init__.py
"""
Scheduling core for TDM.

- graph: dependency DAG with cycle-safe edge insertion
- queue: binary-heap priority queue
- registry: task records and id allocation
- scheduler: keeps the three consistent and picks the next task
"""

from .graph import DependencyGraph
from .queue import PriorityQueue
from .registry import Task, TaskRegistry
from .scheduler import Scheduler, SchedulerConfig

__all__ = [
    "DependencyGraph",
    "PriorityQueue",
    "Task",
    "TaskRegistry",
    "Scheduler",
    "SchedulerConfig",
]
