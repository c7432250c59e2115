"""Schedule aggregation and load-limit engine."""

from .cancellation import CancellationToken
from .catalog import TeacherCatalogResolver
from .index_builder import ScheduleIndex, ScheduleIndexBuilder
from .limits import LoadLimitStore, parse_limit_input
from .load import (
    LoadCalculator,
    classify_subject,
    compute_load,
    exceeds_limit,
    format_load,
    is_lab,
    limit_overage,
)
from .session import AggregationSession, SessionSnapshot, SessionStatus

__all__ = [
    "CancellationToken",
    "TeacherCatalogResolver",
    "ScheduleIndex",
    "ScheduleIndexBuilder",
    "LoadLimitStore",
    "parse_limit_input",
    "LoadCalculator",
    "classify_subject",
    "compute_load",
    "exceeds_limit",
    "format_load",
    "is_lab",
    "limit_overage",
    "AggregationSession",
    "SessionSnapshot",
    "SessionStatus",
]
