from __future__ import annotations

import os
from dataclasses import dataclass

from tdm.domain.states import PriorityOrder


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an int, got: {raw!r}") from e
    return value


def _get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    # Scheduling policy
    priority_order: PriorityOrder

    # Server (used by tdm.main when starting uvicorn programmatically)
    host: str
    port: int
    log_level: str


def load_settings() -> Settings:
    """
    Loads settings from env vars with sane defaults.

    Env vars:
      - TDM_PRIORITY_ORDER (default: urgent_first; or lowest_first)
      - TDM_HOST (default: 127.0.0.1)
      - TDM_PORT (default: 8000)
      - TDM_LOG_LEVEL (default: info)
    """
    raw_order = _get_env_str("TDM_PRIORITY_ORDER", PriorityOrder.URGENT_FIRST.value).strip().lower()
    try:
        priority_order = PriorityOrder(raw_order)
    except ValueError as e:
        allowed = ", ".join(o.value for o in PriorityOrder)
        raise ValueError(f"TDM_PRIORITY_ORDER must be one of: {allowed}") from e

    host = _get_env_str("TDM_HOST", "127.0.0.1")
    port = _get_env_int("TDM_PORT", 8000)
    if not (1 <= port <= 65535):
        raise ValueError("TDM_PORT must be between 1 and 65535")

    log_level = _get_env_str("TDM_LOG_LEVEL", "info").lower()

    return Settings(
        priority_order=priority_order,
        host=host,
        port=port,
        log_level=log_level,
    )
