from __future__ import annotations

import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .states import PriorityOrder, TaskStatus


TaskId = Annotated[str, Field(min_length=1, max_length=256)]


class TaskCreate(BaseModel):
    """
    API input model for submitting a task.
    """
    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, max_length=256)]
    priority: Annotated[int, Field(gt=0)] = 1
    deadline: Optional[dt.date] = None
    description: Annotated[str, Field(max_length=4096)] = ""

    @field_validator("name")
    @classmethod
    def _validate_name(cls, name: str) -> str:
        if not name.strip():
            raise ValueError("name must not be blank")
        return name


class DependencyCreate(BaseModel):
    """
    API input model for a prerequisite edge: prerequisite_id must complete
    before dependent_id may start.
    """
    model_config = ConfigDict(extra="forbid")

    prerequisite_id: TaskId
    dependent_id: TaskId


class DependencyView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    prerequisite_id: str
    dependent_id: str


class TaskView(BaseModel):
    """
    API output model for a single task.
    """
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    priority: int
    deadline: Optional[dt.date] = None
    description: str = ""

    status: TaskStatus

    # True when every prerequisite is completed and the task itself is not
    ready: bool

    created_at: int
    updated_at: int
    started_at: Optional[int] = None
    finished_at: Optional[int] = None

    dependencies: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tasks: list[TaskView]
    total: int


class ScheduleView(BaseModel):
    """
    Copy-on-read view of the scheduler: topological order, ready set and the
    queue contents in extraction order.
    """
    model_config = ConfigDict(extra="forbid")

    priority_order: PriorityOrder
    execution_order: list[str]
    ready: list[str]
    queue: list[str]
    next: Optional[str] = None
    edges: list[DependencyView] = Field(default_factory=list)


class ExecuteNextResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # None when the queue was empty
    task: Optional[TaskView] = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str
    code: str
    details: dict = Field(default_factory=dict)
