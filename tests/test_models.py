"""Tests for Pydantic models and field resolution helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from faculty_routine.data.models import (
    DAY_KEYS,
    DEFAULT_TIME_SLOTS,
    SUBJECT_NAME_FIELDS,
    TEACHER_REF_FIELDS,
    DayKey,
    LoadLimit,
    LoadSummary,
    PeriodAssignment,
    Routine,
    ScheduleEntry,
    TimeSlot,
    day_label,
    minutes_to_time,
    parse_period_number,
    resolve_alias,
)


class TestHelpers:
    """Tests for small conversion helpers."""

    def test_minutes_to_time(self):
        assert minutes_to_time(0) == "00:00"
        assert minutes_to_time(540) == "09:00"
        assert minutes_to_time(750) == "12:30"
        assert minutes_to_time(1439) == "23:59"

    def test_day_keys_in_weekday_order(self):
        assert [d.value for d in DAY_KEYS] == ["mon", "tue", "wed", "thu", "fri"]

    def test_day_label(self):
        assert day_label("mon") == "Monday"
        assert day_label(DayKey.FRI) == "Friday"
        assert DayKey.WED.label == "Wednesday"

    def test_parse_period_number(self):
        assert parse_period_number("3") == 3
        assert parse_period_number(" 4 ") == 4
        assert parse_period_number(2) == 2
        assert parse_period_number(2.0) == 2

    def test_parse_period_number_rejects_invalid(self):
        for value in ("0", "-1", "abc", "", 0, -2, 2.5, True, None):
            assert parse_period_number(value) is None, value


class TestResolveAlias:
    """Tests for ordered alias resolution."""

    def test_first_candidate_wins(self):
        data = {"teacherId": "T1", "teacher": "T2", "facultyId": "T3"}
        assert resolve_alias(data, TEACHER_REF_FIELDS) == "T1"

    def test_falls_through_to_later_candidates(self):
        assert resolve_alias({"facultyId": "T3"}, TEACHER_REF_FIELDS) == "T3"
        assert resolve_alias({"subject": "Physics", "name": "Other"}, SUBJECT_NAME_FIELDS) == "Physics"

    def test_empty_and_non_string_values_are_absent(self):
        data = {"teacherId": "", "teacher": None, "facultyId": "T3"}
        assert resolve_alias(data, TEACHER_REF_FIELDS) == "T3"
        assert resolve_alias({"teacherId": 42}, TEACHER_REF_FIELDS) is None

    def test_nothing_present(self):
        assert resolve_alias({}, TEACHER_REF_FIELDS) is None


class TestPeriodAssignment:
    """Tests for period document parsing."""

    def test_from_document(self):
        a = PeriodAssignment.from_document(
            "2", {"teacherId": "T001", "sname": "Maths", "scode": "M1", "room": "101"}
        )
        assert a.period == 2
        assert a.teacher_ref == "T001"
        assert a.subject_name == "Maths"
        assert a.subject_code == "M1"
        assert a.room == "101"

    def test_aliases(self):
        a = PeriodAssignment.from_document("1", {"facultyId": "T9", "name": "Algo", "code": "A1", "venue": "B-12"})
        assert a.teacher_ref == "T9"
        assert a.subject_name == "Algo"
        assert a.subject_code == "A1"
        assert a.room == "B-12"

    def test_missing_fields_default_to_empty(self):
        a = PeriodAssignment.from_document("1", {"teacherId": "T1"})
        assert a.subject_name == ""
        assert a.subject_code == ""
        assert a.room == ""

    def test_period_from_field_when_id_is_not_numeric(self):
        a = PeriodAssignment.from_document("abc", {"teacherId": "T1", "period": "6"})
        assert a.period == 6

    def test_no_period_returns_none(self):
        assert PeriodAssignment.from_document("abc", {"teacherId": "T1"}) is None
        assert PeriodAssignment.from_document("0", {"teacherId": "T1"}) is None

    def test_without_teacher_ref_is_not_indexable(self):
        a = PeriodAssignment.from_document("1", {"tname": "T1", "sname": "Maths"})
        assert not a.is_indexable
        assert not a.matches("T1")

    def test_matches_by_reference(self):
        a = PeriodAssignment.from_document("1", {"teacherId": "T1"})
        assert a.matches("T1")
        assert not a.matches("T2")

    def test_matches_by_legacy_name_field(self):
        """The legacy name field matches when it holds the teacher id."""
        a = PeriodAssignment.from_document("1", {"teacherId": "old-7", "tname": "T1"})
        assert a.matches("T1")
        assert a.matches("old-7")
        assert not a.matches("T2")


class TestRoutineAndEntry:
    """Tests for routine and schedule entry models."""

    def test_routine_name_falls_back_to_id(self):
        assert Routine.from_document("r1", {}).name == "r1"
        assert Routine.from_document("r1", {"name": ""}).name == "r1"
        assert Routine.from_document("r1", {"name": "CSE 2A"}).name == "CSE 2A"

    def test_entry_from_assignment(self):
        routine = Routine(id="r1", name="CSE 2A")
        assignment = PeriodAssignment.from_document("1", {"teacherId": "T1", "sname": "Maths", "scode": "M1"})
        entry = ScheduleEntry.from_assignment(routine, assignment)
        assert entry.routine_id == "r1"
        assert entry.routine_name == "CSE 2A"
        assert entry.subject == "Maths"
        assert entry.subject_code == "M1"
        assert entry.room == ""

    def test_entry_dump_uses_aliases(self):
        entry = ScheduleEntry(routineId="r1", routineName="CSE 2A", subject="Maths")
        dumped = entry.model_dump(by_alias=True)
        assert dumped["routineId"] == "r1"
        assert dumped["subjectCode"] == ""


class TestLoadModels:
    """Tests for load summary and limit models."""

    def test_summary_aliases(self):
        summary = LoadSummary(theory_count=3, lab_count=2, total_load=4.0)
        assert summary.class_count == 5
        assert summary.model_dump(by_alias=True) == {"theoryCount": 3, "labCount": 2, "totalLoad": 4.0}

    def test_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            LoadLimit(teacher_id="T1", limit=0)
        with pytest.raises(ValidationError):
            LoadLimit(teacher_id="T1", limit=-2)

    def test_limit_rejects_infinity(self):
        with pytest.raises(ValidationError):
            LoadLimit(teacher_id="T1", limit=float("inf"))

    def test_unset_limit(self):
        limit = LoadLimit(teacher_id="T1")
        assert limit.limit is None
        assert not limit.is_set


class TestTimeSlot:
    """Tests for grid time slots."""

    def test_label(self):
        slot = TimeSlot(period=1, start_minutes=540, end_minutes=600)
        assert slot.label == "09:00-10:00"

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            TimeSlot(period=1, start_minutes=600, end_minutes=600)

    def test_default_slots(self):
        assert len(DEFAULT_TIME_SLOTS) == 8
        assert DEFAULT_TIME_SLOTS[0].label == "09:00-10:00"
        assert DEFAULT_TIME_SLOTS[-1].label == "16:00-17:00"
        lunch = [s for s in DEFAULT_TIME_SLOTS if s.is_lunch]
        assert [s.label for s in lunch] == ["12:00-13:00"]
