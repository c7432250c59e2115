"""Presentation helpers for session snapshots."""

from .formatters import (
    TeacherWeekFormatter,
    entry_lines,
    format_summary,
    format_teacher_list,
    format_teacher_week,
    snapshot_to_json,
    summary_lines,
    teacher_table,
    warning_text,
)

__all__ = [
    "TeacherWeekFormatter",
    "entry_lines",
    "format_summary",
    "format_teacher_list",
    "format_teacher_week",
    "snapshot_to_json",
    "summary_lines",
    "teacher_table",
    "warning_text",
]
