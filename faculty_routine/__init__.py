"""Faculty Routine - weekly teacher schedules and load limits from a routine store."""

from .engine import (
    AggregationSession,
    LoadCalculator,
    LoadLimitStore,
    ScheduleIndex,
    ScheduleIndexBuilder,
    SessionSnapshot,
    SessionStatus,
    TeacherCatalogResolver,
    compute_load,
)
from .errors import (
    CatalogLoadError,
    LimitReadError,
    LimitWriteError,
    RoutineError,
    ScheduleLoadError,
)
from .cli import app as cli_app

__all__ = [
    # Engine
    "AggregationSession",
    "LoadCalculator",
    "LoadLimitStore",
    "ScheduleIndex",
    "ScheduleIndexBuilder",
    "SessionSnapshot",
    "SessionStatus",
    "TeacherCatalogResolver",
    "compute_load",
    # Errors
    "CatalogLoadError",
    "LimitReadError",
    "LimitWriteError",
    "RoutineError",
    "ScheduleLoadError",
    # CLI
    "cli_app",
]
