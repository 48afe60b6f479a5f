# src/tdm/api/app.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from tdm.config import load_settings
from tdm.engine.scheduler import Scheduler, SchedulerConfig
from tdm.logging import configure_logging, get_logger

from .routes import router

_LOG = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan handler.

    Responsible for:
    - loading settings
    - configuring logging
    - creating the single in-memory scheduler
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    # Store on app.state for DI
    app.state.settings = settings
    app.state.scheduler = Scheduler(SchedulerConfig(priority_order=settings.priority_order))

    _LOG.info("Startup complete (priority_order=%s).", settings.priority_order.value)

    try:
        yield
    finally:
        _LOG.info("Shutdown complete.")


app = FastAPI(
    title="Task Dependency Manager",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)
