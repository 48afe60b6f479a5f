"""
Domain layer for TDM.

- states: TaskStatus and PriorityOrder enums
- models: Pydantic models for API input/output
- errors: domain-level exceptions
"""

from .states import PriorityOrder, TaskStatus
from .models import (
    DependencyCreate,
    DependencyView,
    ErrorResponse,
    ExecuteNextResponse,
    ScheduleView,
    TaskCreate,
    TaskListResponse,
    TaskView,
)
from .errors import (
    TDMBaseError,
    DuplicateVertexError,
    UnknownVertexError,
    SelfDependencyError,
    CycleDetectedError,
    InvalidTaskError,
    InvalidTransitionError,
)

__all__ = [
    "TaskStatus",
    "PriorityOrder",
    "TaskCreate",
    "TaskView",
    "TaskListResponse",
    "DependencyCreate",
    "DependencyView",
    "ScheduleView",
    "ExecuteNextResponse",
    "ErrorResponse",
    "TDMBaseError",
    "DuplicateVertexError",
    "UnknownVertexError",
    "SelfDependencyError",
    "CycleDetectedError",
    "InvalidTaskError",
    "InvalidTransitionError",
]
