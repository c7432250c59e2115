"""Data model and document store access."""

from .loader import (
    DataValidationError,
    load_store_snapshot,
    save_store_snapshot,
    validate_store_snapshot,
)
from .models import (
    DAY_KEYS,
    DEFAULT_TIME_SLOTS,
    DayKey,
    EntryKind,
    LoadLimit,
    LoadSummary,
    PeriodAssignment,
    Routine,
    ScheduleEntry,
    Teacher,
    TimeSlot,
    day_label,
    resolve_alias,
)
from .store import (
    DocumentRecord,
    DocumentSnapshot,
    DocumentStore,
    InMemoryDocumentStore,
    StoreError,
)

__all__ = [
    # Models
    "DAY_KEYS",
    "DEFAULT_TIME_SLOTS",
    "DayKey",
    "EntryKind",
    "LoadLimit",
    "LoadSummary",
    "PeriodAssignment",
    "Routine",
    "ScheduleEntry",
    "Teacher",
    "TimeSlot",
    "day_label",
    "resolve_alias",
    # Store
    "DocumentRecord",
    "DocumentSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
    "StoreError",
    # Loader
    "DataValidationError",
    "load_store_snapshot",
    "save_store_snapshot",
    "validate_store_snapshot",
]
