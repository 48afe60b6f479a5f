# src/tdm/api/deps.py
from __future__ import annotations

from fastapi import Request

from tdm.engine.scheduler import Scheduler


def get_scheduler(request: Request) -> Scheduler:
    """
    The process-wide scheduler stored on app.state during startup. It
    serialises access internally, so sync handlers running in the
    threadpool can share it.
    """
    return request.app.state.scheduler  # type: ignore[attr-defined]
