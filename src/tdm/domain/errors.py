# src/tdm/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class TDMBaseError(Exception):
    """
    Base domain error.

    Every rejection leaves the scheduler in its prior state; the API layer
    maps these to HTTP responses consistently.
    """
    message: str
    code: str = "TDM_ERROR"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class DuplicateVertexError(TDMBaseError):
    code: str = "DUPLICATE_VERTEX"


@dataclass
class UnknownVertexError(TDMBaseError):
    code: str = "UNKNOWN_VERTEX"


@dataclass
class SelfDependencyError(TDMBaseError):
    code: str = "SELF_DEPENDENCY"


@dataclass
class CycleDetectedError(TDMBaseError):
    code: str = "CYCLE_DETECTED"


@dataclass
class InvalidTaskError(TDMBaseError):
    code: str = "INVALID_TASK"


@dataclass
class InvalidTransitionError(TDMBaseError):
    code: str = "INVALID_TRANSITION"
