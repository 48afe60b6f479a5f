# tests/test_config.py
import pytest

from tdm.config import load_settings
from tdm.domain.states import PriorityOrder


def _clear(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TDM_PRIORITY_ORDER", "TDM_HOST", "TDM_PORT", "TDM_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    _clear(monkeypatch)
    s = load_settings()
    assert s.priority_order is PriorityOrder.URGENT_FIRST
    assert s.host == "127.0.0.1"
    assert s.port == 8000
    assert s.log_level == "info"


def test_overrides(monkeypatch: pytest.MonkeyPatch):
    _clear(monkeypatch)
    monkeypatch.setenv("TDM_PRIORITY_ORDER", " Lowest_First ")
    monkeypatch.setenv("TDM_PORT", "9001")
    monkeypatch.setenv("TDM_LOG_LEVEL", "DEBUG")
    s = load_settings()
    assert s.priority_order is PriorityOrder.LOWEST_FIRST
    assert s.port == 9001
    assert s.log_level == "debug"


@pytest.mark.parametrize(
    "name, value",
    [
        ("TDM_PRIORITY_ORDER", "highest_first"),
        ("TDM_PORT", "abc"),
        ("TDM_PORT", "70000"),
    ],
)
def test_bad_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str):
    _clear(monkeypatch)
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_settings()
