"""
Per-teacher weekly schedule index.

Scans routines/{routineId}/{dayKey}/{periodId} for every routine and every
weekday, keeping the period records that belong to one teacher. The result
is a sparse index: day -> period -> entries, where a cell may hold several
entries (co-taught or overlapping routines) in discovery order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Optional, Sequence

from faculty_routine.data.models import (
    DAY_KEYS,
    DayKey,
    PeriodAssignment,
    Routine,
    ScheduleEntry,
)
from faculty_routine.data.store import DocumentStore, join_path
from faculty_routine.errors import ScheduleLoadError
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

ScheduleCells = dict[DayKey, dict[int, list[ScheduleEntry]]]


# =============================================================================
# Index
# =============================================================================

class ScheduleIndex(Mapping):
    """
    Read-only day -> period -> entries mapping.

    Days iterate in weekday order and periods in ascending order. Cells are
    tuples; an index is never modified after construction.
    """

    __slots__ = ("_days",)

    def __init__(self, cells: Optional[Mapping[DayKey, Mapping[int, Sequence[ScheduleEntry]]]] = None):
        days: dict[DayKey, Mapping[int, tuple[ScheduleEntry, ...]]] = {}
        cells = cells or {}
        for day in DAY_KEYS:
            periods = cells.get(day) or {}
            filled = {
                period: tuple(periods[period])
                for period in sorted(periods)
                if periods[period]
            }
            if filled:
                days[day] = MappingProxyType(filled)
        self._days = days

    @classmethod
    def empty(cls) -> ScheduleIndex:
        return cls()

    def __getitem__(self, day: DayKey | str) -> Mapping[int, tuple[ScheduleEntry, ...]]:
        try:
            return self._days[DayKey(day)]
        except ValueError:
            raise KeyError(day) from None

    def __iter__(self) -> Iterator[DayKey]:
        return iter(self._days)

    def __len__(self) -> int:
        return len(self._days)

    def __repr__(self) -> str:
        return f"ScheduleIndex(days={len(self._days)}, entries={self.entry_count})"

    def cell(self, day: DayKey | str, period: int) -> tuple[ScheduleEntry, ...]:
        """Entries in one grid cell; empty tuple when the teacher is free."""
        periods = self.get(day)
        if periods is None:
            return ()
        return periods.get(period, ())

    def entries(self) -> Iterator[tuple[DayKey, int, ScheduleEntry]]:
        """Iterate every (day, period, entry) in day, period, discovery order."""
        for day, periods in self._days.items():
            for period, cell in periods.items():
                for entry in cell:
                    yield day, period, entry

    @property
    def entry_count(self) -> int:
        return sum(1 for _ in self.entries())

    @property
    def is_empty(self) -> bool:
        return not self._days

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            day.value: {
                str(period): [entry.model_dump(by_alias=True) for entry in cell]
                for period, cell in periods.items()
            }
            for day, periods in self._days.items()
        }


# =============================================================================
# Builder
# =============================================================================

class ScheduleIndexBuilder:
    """Builds a ScheduleIndex for one teacher by scanning all routines."""

    def __init__(
        self,
        store: DocumentStore,
        routines_collection: str = "routines",
        days: Sequence[DayKey] = DAY_KEYS,
    ):
        self.store = store
        self.routines_collection = routines_collection
        self.days = tuple(days)

    async def build(
        self,
        teacher_id: str,
        token: Optional[CancellationToken] = None,
    ) -> Optional[ScheduleIndex]:
        """
        Scan every routine/day for periods taught by teacher_id.

        Every routine is scanned; a teacher can appear in several routines.
        The token is checked before each routine and day and after each
        fetch.

        Args:
            teacher_id: Teacher to collect assignments for
            token: Cancellation token for this selection

        Returns:
            The index, or None if the token was cancelled during the scan.

        Raises:
            ScheduleLoadError: If any collection read fails. Entries gathered
                so far are discarded.
        """
        token = token or CancellationToken()
        cells: ScheduleCells = {}

        try:
            routine_docs = await self.store.list_collection(self.routines_collection)
            if token.cancelled:
                return self._abandon(teacher_id, token)
            if not routine_docs:
                logger.debug("No routines found; empty schedule for %s", teacher_id)
                return ScheduleIndex.empty()

            routines = [Routine.from_document(doc.id, doc.data) for doc in routine_docs]

            for routine in routines:
                if token.cancelled:
                    return self._abandon(teacher_id, token)

                for day in self.days:
                    if token.cancelled:
                        return self._abandon(teacher_id, token)

                    path = join_path(self.routines_collection, routine.id, day.value)
                    records = await self.store.list_collection(path)
                    if token.cancelled:
                        return self._abandon(teacher_id, token)

                    for record in records:
                        assignment = PeriodAssignment.from_document(record.id, record.data)
                        if assignment is None or not assignment.matches(teacher_id):
                            continue
                        if assignment.teacher_ref != teacher_id:
                            logger.debug(
                                "Matched %s/%s/%s for %s by legacy name field",
                                routine.id, day.value, record.id, teacher_id,
                            )
                        entry = ScheduleEntry.from_assignment(routine, assignment)
                        cells.setdefault(day, {}).setdefault(assignment.period, []).append(entry)

        except Exception as e:
            logger.exception("Error loading teacher schedule for %s", teacher_id)
            raise ScheduleLoadError(f"Schedule scan failed for {teacher_id}: {e}", cause=e) from e

        index = ScheduleIndex(cells)
        logger.info(
            "Built schedule for %s: %d entries across %d routines",
            teacher_id, index.entry_count, len(routines),
        )
        return index

    @staticmethod
    def _abandon(teacher_id: str, token: CancellationToken) -> None:
        logger.debug("Schedule scan for %s cancelled (%r)", teacher_id, token)
        return None
