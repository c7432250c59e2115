"""
Typed failures raised by the engine components.

Each error keeps the underlying store failure as `cause` (and `__cause__`
when raised with `from`). `user_message` is the short text shown to users;
transport details only ever go to the log.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Which engine operation failed."""
    CATALOG = "catalog"
    SCHEDULE = "schedule"
    LIMIT_READ = "limit_read"
    LIMIT_WRITE = "limit_write"


class RoutineError(Exception):
    """Base class for engine failures."""

    kind: ErrorKind
    user_message: str = "Something went wrong."

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(detail)
        self.cause = cause


class CatalogLoadError(RoutineError):
    kind = ErrorKind.CATALOG
    user_message = "Could not load teacher list."


class ScheduleLoadError(RoutineError):
    kind = ErrorKind.SCHEDULE
    user_message = "Could not load schedule."


class LimitReadError(RoutineError):
    kind = ErrorKind.LIMIT_READ
    user_message = "Could not load load limit."


class LimitWriteError(RoutineError):
    kind = ErrorKind.LIMIT_WRITE
    user_message = "Could not save limit."


USER_MESSAGES: dict[ErrorKind, str] = {
    cls.kind: cls.user_message
    for cls in (CatalogLoadError, ScheduleLoadError, LimitReadError, LimitWriteError)
}


def user_message(kind: ErrorKind) -> str:
    return USER_MESSAGES[kind]
