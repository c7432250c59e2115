"""
Command-line interface for faculty routines.

Usage:
    python -m faculty_routine teachers store.json
    python -m faculty_routine view store.json --teacher T001
    python -m faculty_routine set-limit store.json --teacher T001 12.5
    python -m faculty_routine clear-limit store.json --teacher T001
    python -m faculty_routine validate store.json
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import settings
from .data.loader import DataValidationError, load_store_snapshot, save_store_snapshot
from .data.models import DAY_KEYS, PeriodAssignment
from .data.store import InMemoryDocumentStore, join_path
from .engine.load import format_load
from .engine.session import AggregationSession, SessionSnapshot, SessionStatus
from .logging_config import setup_logging
from .output.formatters import (
    TeacherWeekFormatter,
    format_teacher_list,
    snapshot_to_json,
    teacher_table,
    warning_text,
)

# Create Typer app
app = typer.Typer(
    name="faculty-routine",
    help="Weekly teacher schedules and load limits from a routine store.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

OUTPUT_FORMATS = ("table", "plain", "json")


# =============================================================================
# Helper Functions
# =============================================================================

def load_store(store_file: Path) -> InMemoryDocumentStore:
    """Load and validate a store snapshot."""
    if not store_file.exists():
        console.print(f"[red]Error:[/red] Store file not found: {store_file}")
        raise typer.Exit(code=1)

    try:
        return load_store_snapshot(store_file)
    except (json.JSONDecodeError, DataValidationError) as e:
        console.print(f"[red]Error loading store:[/red] {e}")
        raise typer.Exit(code=1)


def run_selection(store: InMemoryDocumentStore, teacher_id: str, limit_value: Optional[object] = None, save: bool = False) -> tuple[SessionSnapshot, bool]:
    """
    Run a session for one teacher: load catalog, select, optionally save a limit.

    Returns:
        Final snapshot and whether a limit write went through
    """
    async def _run() -> tuple[SessionSnapshot, bool]:
        async with AggregationSession.from_settings(store, settings) as session:
            if session.snapshot.status is SessionStatus.ERROR:
                return session.snapshot, False
            _require_teacher(session.snapshot, teacher_id)
            await session.select_teacher(teacher_id)
            saved = False
            if save:
                saved = await session.save_limit(limit_value)
            return session.snapshot, saved

    return asyncio.run(_run())


def _require_teacher(snapshot: SessionSnapshot, teacher_id: str) -> None:
    if any(t.id == teacher_id for t in snapshot.teachers):
        return
    console.print(f"[red]Error:[/red] Teacher '{teacher_id}' not found")
    console.print(f"Available teachers: {', '.join(t.id for t in snapshot.teachers)}")
    raise typer.Exit(code=1)


def _exit_on_error(snapshot: SessionSnapshot) -> None:
    if snapshot.status is SessionStatus.ERROR:
        console.print(f"[red]Error:[/red] {snapshot.error_message}")
        raise typer.Exit(code=1)


# =============================================================================
# Commands
# =============================================================================

@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level", "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Faculty routine viewer and load-limit manager."""
    setup_logging(
        level=log_level or settings.log_level,
        to_file=settings.log_to_file,
        file_path=settings.log_file_path,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )


@app.command()
def teachers(
    store_file: Path = typer.Argument(
        ...,
        help="Path to the store snapshot JSON file",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Plain text output without colors",
    ),
) -> None:
    """
    List the teacher catalog.

    Example:
        python -m faculty_routine teachers store.json
    """
    store = load_store(store_file)

    async def _run() -> SessionSnapshot:
        async with AggregationSession.from_settings(store, settings) as session:
            return session.snapshot

    snapshot = asyncio.run(_run())
    _exit_on_error(snapshot)

    if not snapshot.teachers:
        console.print("[yellow]No teachers found[/yellow]")
        return

    if plain:
        typer.echo(format_teacher_list(snapshot.teachers, use_colors=False))
    else:
        console.print(teacher_table(snapshot.teachers))


@app.command()
def view(
    store_file: Path = typer.Argument(
        ...,
        help="Path to the store snapshot JSON file",
    ),
    teacher: str = typer.Option(
        ...,
        "--teacher", "-T",
        help="Teacher ID to show",
    ),
    format: str = typer.Option(
        "table",
        "--format", "-f",
        help="Output format: table, plain, or json",
    ),
) -> None:
    """
    Show a teacher's weekly schedule and load.

    Examples:
        python -m faculty_routine view store.json --teacher T001
        python -m faculty_routine view store.json -T T001 --format json
    """
    if format not in OUTPUT_FORMATS:
        console.print(f"[red]Error:[/red] Unknown format '{format}'. Use one of: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(code=1)

    store = load_store(store_file)
    snapshot, _ = run_selection(store, teacher)
    _exit_on_error(snapshot)

    if format == "json":
        typer.echo(snapshot_to_json(snapshot))
        return

    formatter = TeacherWeekFormatter(use_colors=format == "table", lab_weight=settings.lab_weight)
    if format == "plain":
        typer.echo(formatter.format(snapshot))
    else:
        for item in formatter.renderables(snapshot):
            console.print(item)


@app.command("set-limit")
def set_limit(
    store_file: Path = typer.Argument(
        ...,
        help="Path to the store snapshot JSON file",
    ),
    value: str = typer.Argument(
        ...,
        help="Weekly load limit, e.g. 12.5. Empty, zero, negative or non-numeric clears it (put -- before negative values).",
    ),
    teacher: str = typer.Option(
        ...,
        "--teacher", "-T",
        help="Teacher ID",
    ),
) -> None:
    """
    Save a weekly load limit for a teacher.

    Theory classes count as 1, lab classes as 0.5.

    Example:
        python -m faculty_routine set-limit store.json --teacher T001 12.5
    """
    _save_limit(store_file, teacher, value)


@app.command("clear-limit")
def clear_limit(
    store_file: Path = typer.Argument(
        ...,
        help="Path to the store snapshot JSON file",
    ),
    teacher: str = typer.Option(
        ...,
        "--teacher", "-T",
        help="Teacher ID",
    ),
) -> None:
    """
    Clear a teacher's weekly load limit.

    Example:
        python -m faculty_routine clear-limit store.json --teacher T001
    """
    _save_limit(store_file, teacher, None)


def _save_limit(store_file: Path, teacher_id: str, value: Optional[str]) -> None:
    store = load_store(store_file)
    snapshot, saved = run_selection(store, teacher_id, limit_value=value, save=True)

    if not saved:
        _exit_on_error(snapshot)
        console.print(f"[red]Error:[/red] {snapshot.limit_error_message or 'Could not save limit.'}")
        raise typer.Exit(code=1)

    # The write went through even if the schedule scan failed; keep it
    save_store_snapshot(store, store_file)

    name = snapshot.selected_teacher.name if snapshot.selected_teacher else teacher_id
    if snapshot.limit is None:
        console.print(f"[green]Limit cleared for[/green] {name}")
    else:
        console.print(f"[green]Limit saved for[/green] {name}: {format_load(snapshot.limit)}")

    _exit_on_error(snapshot)

    if snapshot.summary is not None:
        console.print(f"Total Weekly Load: {format_load(snapshot.summary.total_load)}")
    if snapshot.exceeds:
        console.print(f"[bold yellow]{warning_text(snapshot)}[/bold yellow]")


# =============================================================================
# Validation
# =============================================================================

@dataclass
class StoreStats:
    """Counts gathered while validating a store snapshot."""
    routines: int = 0
    subjects: int = 0
    catalog_teachers: int = 0
    period_records: int = 0
    attributed_records: int = 0
    warnings: list[str] = field(default_factory=list)


async def collect_store_stats(store: InMemoryDocumentStore) -> StoreStats:
    """Walk the routine hierarchy and report records the engine would skip."""
    stats = StoreStats()

    subjects = await store.list_collection(settings.subjects_collection)
    stats.subjects = len(subjects)
    teacher_ids: set[str] = set()
    for subject in subjects:
        records = await store.list_collection(join_path(settings.subjects_collection, subject.id, "teachers"))
        teacher_ids.update(r.id for r in records)
    stats.catalog_teachers = len(teacher_ids)

    routines = await store.list_collection(settings.routines_collection)
    stats.routines = len(routines)
    for routine in routines:
        for day in DAY_KEYS:
            path = join_path(settings.routines_collection, routine.id, day.value)
            for record in await store.list_collection(path):
                stats.period_records += 1
                assignment = PeriodAssignment.from_document(record.id, record.data)
                if assignment is None:
                    stats.warnings.append(f"{path}/{record.id}: no valid period number")
                    continue
                if not assignment.is_indexable:
                    stats.warnings.append(f"{path}/{record.id}: no teacher reference")
                    continue
                stats.attributed_records += 1
                if assignment.teacher_ref not in teacher_ids:
                    stats.warnings.append(
                        f"{path}/{record.id}: teacher '{assignment.teacher_ref}' is not in the catalog"
                    )

    return stats


@app.command()
def validate(
    store_file: Path = typer.Argument(
        ...,
        help="Path to the store snapshot JSON file to validate",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="List every warning",
    ),
) -> None:
    """
    Validate a store snapshot.

    Checks for:
    - Valid JSON structure
    - Snapshot layout (collections and documents are objects)
    - Period records the schedule scan would skip

    Example:
        python -m faculty_routine validate store.json
    """
    console.print(f"\n[bold]Validating:[/bold] {store_file}\n")

    if not store_file.exists():
        console.print(f"[red]Error:[/red] File not found: {store_file}")
        raise typer.Exit(code=1)

    # Step 1: JSON parsing
    console.print("[cyan]1. Checking JSON syntax...[/cyan]")
    try:
        with open(store_file, encoding="utf-8") as f:
            json.load(f)
        console.print("   [green]JSON syntax is valid[/green]")
    except json.JSONDecodeError as e:
        console.print(f"   [red]Invalid JSON:[/red] {e}")
        raise typer.Exit(code=1)

    # Step 2: Layout validation
    console.print("[cyan]2. Validating snapshot layout...[/cyan]")
    try:
        store = load_store_snapshot(store_file)
        console.print("   [green]Layout validation passed[/green]")
    except DataValidationError as e:
        console.print("   [red]Layout validation failed:[/red]")
        for line in str(e).split("; "):
            console.print(f"   {line}")
        raise typer.Exit(code=1)

    # Step 3: Routine records
    console.print("[cyan]3. Checking routine records...[/cyan]")
    stats = asyncio.run(collect_store_stats(store))

    if stats.warnings:
        console.print(f"   [yellow]{len(stats.warnings)} warnings found[/yellow]")
        shown = stats.warnings if verbose else stats.warnings[:10]
        for w in shown:
            console.print(f"   - {w}", markup=False)
        if len(shown) < len(stats.warnings):
            console.print(f"   ... {len(stats.warnings) - len(shown)} more (use --verbose)")
    else:
        console.print("   [green]No issues found[/green]")

    # Summary
    console.print("\n[bold]Summary:[/bold]")
    table = Table(show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")

    table.add_row("Routines", str(stats.routines))
    table.add_row("Subjects", str(stats.subjects))
    table.add_row("Catalog teachers", str(stats.catalog_teachers))
    table.add_row("Period records", str(stats.period_records))
    table.add_row("Attributed records", str(stats.attributed_records))

    console.print(table)
    console.print(Panel("[green]Validation complete.[/green]", expand=False))


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
