# src/tdm/api/routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from tdm.domain.errors import (
    CycleDetectedError,
    InvalidTaskError,
    InvalidTransitionError,
    SelfDependencyError,
    TDMBaseError,
    UnknownVertexError,
)
from tdm.domain.models import (
    DependencyCreate,
    DependencyView,
    ErrorResponse,
    ExecuteNextResponse,
    ScheduleView,
    TaskCreate,
    TaskListResponse,
    TaskView,
)
from tdm.engine.scheduler import Scheduler
from tdm.logging import get_logger

from .deps import get_scheduler

_LOG = get_logger(__name__)
router = APIRouter()


def _error_response(err: TDMBaseError, http_status: int) -> JSONResponse:
    payload = ErrorResponse(
        error=err.message,
        code=err.code,
        details=err.details or {},
    ).model_dump()
    return JSONResponse(status_code=http_status, content=payload)


@router.get("/healthz")
def healthz() -> dict:
    return {"ok": True}


@router.post("/tasks", response_model=TaskView, status_code=201)
def submit_task(
    task: TaskCreate,
    scheduler: Scheduler = Depends(get_scheduler),
):
    """
    Register a task. It starts PENDING and is queued once it has no
    incomplete prerequisite (immediately, since it has none yet).
    """
    try:
        created = scheduler.add_task(
            task.name,
            priority=task.priority,
            deadline=task.deadline,
            description=task.description,
        )
        return scheduler.describe_task(created.id)
    except InvalidTaskError as e:
        return _error_response(e, 400)


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    scheduler: Scheduler = Depends(get_scheduler),
):
    views = scheduler.describe_tasks()
    return TaskListResponse(tasks=views[offset:offset + limit], total=len(views))


@router.get("/tasks/{task_id}", response_model=TaskView)
def get_task(
    task_id: str,
    scheduler: Scheduler = Depends(get_scheduler),
):
    try:
        return scheduler.describe_task(task_id)
    except UnknownVertexError as e:
        return _error_response(e, 404)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Idempotent; deleting an unknown id is not an error."""
    scheduler.delete_task(task_id)
    return Response(status_code=204)


@router.post("/tasks/{task_id}/start", response_model=TaskView)
def start_task(
    task_id: str,
    scheduler: Scheduler = Depends(get_scheduler),
):
    try:
        scheduler.mark_in_progress(task_id)
        return scheduler.describe_task(task_id)
    except UnknownVertexError as e:
        return _error_response(e, 404)
    except InvalidTransitionError as e:
        return _error_response(e, 400)


@router.post("/tasks/{task_id}/complete", response_model=TaskView)
def complete_task(
    task_id: str,
    scheduler: Scheduler = Depends(get_scheduler),
):
    try:
        scheduler.mark_completed(task_id)
        return scheduler.describe_task(task_id)
    except UnknownVertexError as e:
        return _error_response(e, 404)
    except InvalidTransitionError as e:
        return _error_response(e, 400)


@router.post("/dependencies", response_model=DependencyView, status_code=201)
def add_dependency(
    dep: DependencyCreate,
    scheduler: Scheduler = Depends(get_scheduler),
):
    """
    prerequisite_id must complete before dependent_id may start.

    Notes:
    - Both tasks must already exist.
    - Self dependencies and cycles are rejected.
    """
    try:
        scheduler.add_dependency(dep.prerequisite_id, dep.dependent_id)
        return DependencyView(prerequisite_id=dep.prerequisite_id, dependent_id=dep.dependent_id)
    except UnknownVertexError as e:
        return _error_response(e, 404)
    except (SelfDependencyError, CycleDetectedError) as e:
        return _error_response(e, 400)
    except TDMBaseError as e:
        return _error_response(e, 400)


@router.delete("/dependencies", status_code=204)
def remove_dependency(
    prerequisite_id: str = Query(min_length=1),
    dependent_id: str = Query(min_length=1),
    scheduler: Scheduler = Depends(get_scheduler),
):
    """Idempotent; removing an absent edge is not an error."""
    scheduler.remove_dependency(prerequisite_id, dependent_id)
    return Response(status_code=204)


@router.get("/schedule", response_model=ScheduleView)
def get_schedule(scheduler: Scheduler = Depends(get_scheduler)):
    return scheduler.snapshot()


@router.post("/schedule/next", response_model=ExecuteNextResponse)
def execute_next(scheduler: Scheduler = Depends(get_scheduler)):
    """
    Completes the highest-priority ready task. `task` is null when nothing
    is ready.
    """
    task = scheduler.execute_next()
    if task is None:
        _LOG.info("execute_next: queue is empty")
        return ExecuteNextResponse(task=None)
    return ExecuteNextResponse(task=scheduler.describe_task(task.id))
