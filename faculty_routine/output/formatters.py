"""
Output formatters for teacher weekly views.

This module provides formatters for:
- Weekly grid: rows are days, columns are time slots (lunch included)
- Load summary: theory/lab split, weighted total, limit and warning
- Teacher catalog listing
- JSON: the full session snapshot
"""

from __future__ import annotations

import json
from typing import Sequence

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from faculty_routine.data.models import (
    DAY_KEYS,
    DEFAULT_TIME_SLOTS,
    ScheduleEntry,
    Teacher,
    TimeSlot,
)
from faculty_routine.engine.load import LAB_WEIGHT, LoadCalculator, format_load
from faculty_routine.engine.session import SessionSnapshot


LUNCH_TEXT = "Lunch Break"
EMPTY_CELL = "-"


# =============================================================================
# Helpers
# =============================================================================

def entry_lines(entry: ScheduleEntry) -> list[str]:
    """Text lines describing one entry inside a grid cell."""
    header = entry.routine_name
    if entry.subject_code:
        header += f" [{entry.subject_code}]"
    lines = [header, entry.subject]
    if entry.room:
        lines.append(f"Room: {entry.room}")
    return lines


def summary_lines(snapshot: SessionSnapshot, lab_weight: float = LAB_WEIGHT) -> list[str]:
    """Plain-text load summary for the selected teacher."""
    summary = snapshot.summary
    if summary is None:
        return []

    lab_load = LoadCalculator(lab_weight=lab_weight).lab_load(summary)
    limit_text = format_load(snapshot.limit) if snapshot.limit is not None else "Not set"
    lines = [
        f"Total Weekly Load: {format_load(summary.total_load)}",
        f"Theory Classes: {summary.theory_count}",
        f"Lab Classes: {summary.lab_count} (counts as {format_load(lab_load)})",
        f"Limit: {limit_text}",
    ]
    if snapshot.exceeds:
        lines.append(warning_text(snapshot))
    return lines


def format_summary(snapshot: SessionSnapshot, lab_weight: float = LAB_WEIGHT) -> str:
    """Load summary block as text; empty when there is no summary yet."""
    return "\n".join(summary_lines(snapshot, lab_weight))


def warning_text(snapshot: SessionSnapshot) -> str:
    name = snapshot.selected_teacher.name if snapshot.selected_teacher else "Teacher"
    return (
        f"Warning: {name} exceeds the weekly load limit by "
        f"{format_load(snapshot.overage)}."
    )


# =============================================================================
# Teacher Week Formatter
# =============================================================================

class TeacherWeekFormatter:
    """Formats the selected teacher's week from a session snapshot."""

    def __init__(
        self,
        time_slots: Sequence[TimeSlot] = DEFAULT_TIME_SLOTS,
        use_colors: bool = True,
        lab_weight: float = LAB_WEIGHT,
        width: int = 160,
    ):
        """
        Initialize teacher week formatter.

        Args:
            time_slots: Grid columns, in display order
            use_colors: Use rich tables instead of plain text
            lab_weight: Lab weight shown in the "counts as" hint
            width: Console width for rich rendering
        """
        self.time_slots = tuple(time_slots)
        self.use_colors = use_colors
        self.lab_weight = lab_weight
        self.width = width

    def format(self, snapshot: SessionSnapshot) -> str:
        """
        Format a snapshot as text.

        Returns:
            Formatted string, or a short notice when no teacher is selected
        """
        if snapshot.selected_teacher is None:
            return "Select a teacher to view their weekly assignments"

        if self.use_colors:
            return self._format_rich(snapshot)
        else:
            return self._format_plain(snapshot)

    def renderables(self, snapshot: SessionSnapshot) -> list[RenderableType]:
        """Rich renderables for printing straight to a console."""
        teacher = snapshot.selected_teacher
        if teacher is None:
            return [Text("Select a teacher to view their weekly assignments", style="dim")]

        items: list[RenderableType] = [
            Panel(f"[bold]{escape(teacher.name)}[/bold] ({escape(teacher.id)})", title="Weekly View"),
        ]
        if snapshot.error_message:
            items.append(Text(snapshot.error_message, style="red"))
        if snapshot.summary is not None:
            items.append(self._summary_table(snapshot))
            if snapshot.exceeds:
                items.append(Text(warning_text(snapshot), style="bold yellow"))
        if snapshot.limit_error_message:
            items.append(Text(snapshot.limit_error_message, style="red"))
        if snapshot.index is not None:
            items.append(self._grid_table(snapshot))
        return items

    def _format_plain(self, snapshot: SessionSnapshot) -> str:
        """Format without colors."""
        teacher = snapshot.selected_teacher
        lines = []
        lines.append(f"{'=' * 50}")
        lines.append(f"TEACHER: {teacher.name} ({teacher.id}) - Weekly View")
        lines.append(f"{'=' * 50}")

        if snapshot.error_message:
            lines.append(snapshot.error_message)
        summary = format_summary(snapshot, self.lab_weight)
        if summary:
            lines.append(summary)
        if snapshot.limit_error_message:
            lines.append(snapshot.limit_error_message)

        if snapshot.index is None:
            return '\n'.join(lines)

        for day in DAY_KEYS:
            lines.append(f"\n{day.label}:")
            for slot in self.time_slots:
                if slot.is_lunch:
                    lines.append(f"  {slot.label}: {LUNCH_TEXT}")
                    continue
                cell = snapshot.index.cell(day, slot.period)
                if not cell:
                    continue
                for entry in cell:
                    lines.append(f"  {slot.label}: " + " | ".join(entry_lines(entry)))

        return '\n'.join(lines)

    def _format_rich(self, snapshot: SessionSnapshot) -> str:
        """Format with rich tables."""
        console = Console(record=True, width=self.width)
        for item in self.renderables(snapshot):
            console.print(item)
        return console.export_text()

    def _summary_table(self, snapshot: SessionSnapshot) -> Table:
        table = Table(title="Load Summary", show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")

        for line in summary_lines(snapshot, self.lab_weight):
            if line.startswith("Warning:"):
                continue
            label, _, value = line.partition(": ")
            table.add_row(label, value)
        return table

    def _grid_table(self, snapshot: SessionSnapshot) -> Table:
        table = Table(show_header=True, header_style="bold cyan", show_lines=True)
        table.add_column("Day / Time", style="cyan")
        for slot in self.time_slots:
            table.add_column(slot.label, justify="center", style="dim" if slot.is_lunch else None)

        for day in DAY_KEYS:
            row = [day.label]
            for slot in self.time_slots:
                if slot.is_lunch:
                    row.append(LUNCH_TEXT)
                    continue
                cell = snapshot.index.cell(day, slot.period)
                if not cell:
                    row.append(f"[dim]{EMPTY_CELL}[/dim]")
                    continue
                blocks = []
                for entry in cell:
                    head, subject, *rest = entry_lines(entry)
                    blocks.append("\n".join([f"[bold]{escape(head)}[/bold]", escape(subject), *map(escape, rest)]))
                row.append("\n\n".join(blocks))
            table.add_row(*row)
        return table


def format_teacher_week(snapshot: SessionSnapshot, use_colors: bool = True) -> str:
    """Format the selected teacher's weekly view."""
    return TeacherWeekFormatter(use_colors=use_colors).format(snapshot)


# =============================================================================
# Teacher List Formatter
# =============================================================================

def format_teacher_list(teachers: Sequence[Teacher], use_colors: bool = True) -> str:
    """Format the teacher catalog as a table."""
    if not use_colors:
        lines = ["ID".ljust(16) + "Name"]
        lines.append("-" * 40)
        for teacher in teachers:
            lines.append(teacher.id.ljust(16) + teacher.name)
        return '\n'.join(lines)

    console = Console(record=True, width=100)
    console.print(teacher_table(teachers))
    return console.export_text()


def teacher_table(teachers: Sequence[Teacher]) -> Table:
    table = Table(title="Teachers", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for teacher in teachers:
        table.add_row(teacher.id, teacher.name)
    return table


# =============================================================================
# JSON
# =============================================================================

def snapshot_to_json(snapshot: SessionSnapshot, indent: int = 2) -> str:
    """Serialize a session snapshot as JSON."""
    return json.dumps(snapshot.to_dict(), indent=indent, ensure_ascii=False)
