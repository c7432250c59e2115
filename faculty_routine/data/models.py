"""
Pydantic models for the faculty routine data model.

Store layout:
- routines/{routineId}                      routine documents ({name})
- routines/{routineId}/{dayKey}/{periodId}  period assignment documents
- subjects/{subjectId}/teachers/{teacherId} teacher catalog entries ({name})
- teachers/{teacherId}                      per-teacher settings ({loadLimit, name})

Time conventions:
- Time is represented as minutes from midnight (0-1439)
- Days are the five weekday keys mon-fri
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants and Enums
# =============================================================================

class DayKey(str, Enum):
    """Weekday key used as the day sub-collection name under a routine."""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"

    @property
    def label(self) -> str:
        return DAY_LABELS[self]


DAY_KEYS: tuple[DayKey, ...] = (
    DayKey.MON,
    DayKey.TUE,
    DayKey.WED,
    DayKey.THU,
    DayKey.FRI,
)

DAY_LABELS: dict[DayKey, str] = {
    DayKey.MON: "Monday",
    DayKey.TUE: "Tuesday",
    DayKey.WED: "Wednesday",
    DayKey.THU: "Thursday",
    DayKey.FRI: "Friday",
}


class EntryKind(str, Enum):
    """Load classification of a schedule entry."""
    THEORY = "theory"
    LAB = "lab"


# Candidate field names, evaluated in order; the first present value wins.
TEACHER_REF_FIELDS: tuple[str, ...] = ("teacherId", "teacher", "facultyId")
TEACHER_NAME_FIELDS: tuple[str, ...] = ("tname",)
SUBJECT_NAME_FIELDS: tuple[str, ...] = ("sname", "subject", "name")
SUBJECT_CODE_FIELDS: tuple[str, ...] = ("scode", "code")
ROOM_FIELDS: tuple[str, ...] = ("room", "venue")

MinutesFromMidnight = Annotated[int, Field(ge=0, le=1439, description="Time as minutes from midnight")]
PeriodNumber = Annotated[int, Field(ge=1, description="Period number within the day (1-based)")]


# =============================================================================
# Helper Functions
# =============================================================================

def minutes_to_time(minutes: int) -> str:
    """Convert minutes from midnight to HH:MM format."""
    h, m = divmod(minutes, 60)
    return f"{h:02d}:{m:02d}"


def day_label(day: DayKey | str) -> str:
    """Get the display label for a day key."""
    return DAY_LABELS[DayKey(day)]


def resolve_alias(data: dict[str, Any], candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first present string value among candidate field names.

    A value is present when it is a non-empty string. Anything else (missing,
    None, "", numbers) falls through to the next candidate.

    Args:
        data: Raw document fields
        candidates: Field names in priority order

    Returns:
        The resolved value, or None when no candidate is present
    """
    for name in candidates:
        value = data.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def parse_period_number(value: Any) -> Optional[int]:
    """Parse a document id or field as a positive period number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 1 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit() and int(text) >= 1:
            return int(text)
    return None


# =============================================================================
# Core Entity Models
# =============================================================================

class Teacher(BaseModel):
    """Teacher catalog entry."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Display name")

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Routine(BaseModel):
    """A named weekly timetable template."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Routine name")

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Routine:
        """Build from a routine document; the name falls back to the id."""
        name = data.get("name")
        return cls(id=doc_id, name=name if isinstance(name, str) and name else doc_id)


class PeriodAssignment(BaseModel):
    """
    Raw period record stored under routines/{routineId}/{dayKey}/{periodId}.

    Field names in stored documents vary between routines, so every field is
    resolved through an ordered alias list (see resolve_alias).
    """
    model_config = ConfigDict(frozen=True)

    period: PeriodNumber
    teacher_ref: Optional[str] = Field(default=None, description="Teacher id reference")
    teacher_name: Optional[str] = Field(default=None, description="Legacy display-name field")
    subject_name: str = Field(default="", description="Subject display name")
    subject_code: str = Field(default="", description="Subject code")
    room: str = Field(default="", description="Room or venue")

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Optional[PeriodAssignment]:
        """
        Build from a period document.

        The period number comes from the document id, falling back to the
        'period' field. Returns None when neither is a positive integer.
        """
        period = parse_period_number(doc_id)
        if period is None:
            period = parse_period_number(data.get("period"))
        if period is None:
            logger.warning("Skipping period document %r: no valid period number", doc_id)
            return None

        return cls(
            period=period,
            teacher_ref=resolve_alias(data, TEACHER_REF_FIELDS),
            teacher_name=resolve_alias(data, TEACHER_NAME_FIELDS),
            subject_name=resolve_alias(data, SUBJECT_NAME_FIELDS) or "",
            subject_code=resolve_alias(data, SUBJECT_CODE_FIELDS) or "",
            room=resolve_alias(data, ROOM_FIELDS) or "",
        )

    @property
    def is_indexable(self) -> bool:
        """Records without any teacher reference cannot be attributed."""
        return self.teacher_ref is not None

    def matches(self, teacher_id: str) -> bool:
        """
        Whether this assignment belongs to the given teacher.

        Matches on the teacher reference, or on the legacy display-name field
        holding the same string. The second rule compares a name against an
        id and can produce false matches when the two namespaces collide.
        """
        if not self.is_indexable:
            return False
        return self.teacher_ref == teacher_id or self.teacher_name == teacher_id


class ScheduleEntry(BaseModel):
    """One class a teacher holds in a given day/period cell."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    routine_id: str = Field(alias="routineId")
    routine_name: str = Field(alias="routineName")
    subject: str = ""
    subject_code: str = Field(default="", alias="subjectCode")
    room: str = ""

    @classmethod
    def from_assignment(cls, routine: Routine, assignment: PeriodAssignment) -> ScheduleEntry:
        return cls(
            routine_id=routine.id,
            routine_name=routine.name,
            subject=assignment.subject_name,
            subject_code=assignment.subject_code,
            room=assignment.room,
        )


class LoadSummary(BaseModel):
    """Weighted weekly load derived from a schedule index."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    theory_count: int = Field(default=0, ge=0, alias="theoryCount")
    lab_count: int = Field(default=0, ge=0, alias="labCount")
    total_load: float = Field(default=0.0, ge=0, alias="totalLoad")

    @property
    def class_count(self) -> int:
        return self.theory_count + self.lab_count


class LoadLimit(BaseModel):
    """Configured weekly load limit for one teacher."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    teacher_id: str = Field(min_length=1, alias="teacherId")
    limit: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)

    @property
    def is_set(self) -> bool:
        return self.limit is not None


# =============================================================================
# Display Models
# =============================================================================

class TimeSlot(BaseModel):
    """Column of the weekly grid."""
    model_config = ConfigDict(frozen=True)

    period: PeriodNumber
    start_minutes: MinutesFromMidnight
    end_minutes: MinutesFromMidnight
    is_lunch: bool = False

    @model_validator(mode="after")
    def validate_time_range(self) -> "TimeSlot":
        """Ensure start time is before end time."""
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"start_minutes ({self.start_minutes}) must be less than "
                f"end_minutes ({self.end_minutes})"
            )
        return self

    @property
    def label(self) -> str:
        return f"{minutes_to_time(self.start_minutes)}-{minutes_to_time(self.end_minutes)}"


DEFAULT_TIME_SLOTS: tuple[TimeSlot, ...] = tuple(
    TimeSlot(
        period=period,
        start_minutes=480 + period * 60,
        end_minutes=540 + period * 60,
        is_lunch=period == 4,
    )
    for period in range(1, 9)
)
