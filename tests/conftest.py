# tests/conftest.py
import importlib
import itertools
from contextlib import contextmanager
from typing import Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from tdm.domain.states import PriorityOrder
from tdm.engine.scheduler import Scheduler, SchedulerConfig

DEFAULT_ENV = {
    "TDM_PRIORITY_ORDER": "urgent_first",
    "TDM_LOG_LEVEL": "warning",
    # server host/port are irrelevant for TestClient, but harmless if set elsewhere
}


def _apply_env(monkeypatch: pytest.MonkeyPatch, overrides: Optional[dict[str, str]] = None) -> None:
    for k, v in DEFAULT_ENV.items():
        monkeypatch.setenv(k, v)
    if overrides:
        for k, v in overrides.items():
            monkeypatch.setenv(k, v)


@contextmanager
def _client_ctx(monkeypatch: pytest.MonkeyPatch, *, overrides: Optional[dict[str, str]] = None) -> Iterator[TestClient]:
    _apply_env(monkeypatch, overrides)

    # Import after env is set; reload to avoid cross-test state
    app_mod = importlib.import_module("tdm.api.app")
    importlib.reload(app_mod)

    with TestClient(app_mod.app) as client:
        yield client


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """
    Default integration test client.
    Uses DEFAULT_ENV and a fresh in-memory scheduler per test.
    """
    with _client_ctx(monkeypatch) as c:
        yield c


@pytest.fixture()
def client_factory(monkeypatch: pytest.MonkeyPatch):
    """
    Factory for tests that need custom settings.

    Usage:
      with client_factory(overrides={"TDM_PRIORITY_ORDER": "lowest_first"}) as client:
          ...
    """

    def _make(*, overrides: Optional[dict[str, str]] = None):
        return _client_ctx(monkeypatch, overrides=overrides)

    return _make


@pytest.fixture()
def clock():
    """Deterministic millisecond clock: 1000, 1001, 1002, ..."""
    ticks = itertools.count(1000)
    return lambda: next(ticks)


@pytest.fixture()
def scheduler(clock) -> Scheduler:
    return Scheduler(SchedulerConfig(priority_order=PriorityOrder.URGENT_FIRST), clock=clock)
