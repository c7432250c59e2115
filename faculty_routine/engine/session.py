"""
Aggregation session: the state machine behind the faculty routine view.

One session serves one viewer. It loads the teacher catalog, and on every
teacher selection runs the schedule scan and the limit read concurrently,
publishing an immutable SessionSnapshot after each state change.

States:
    IDLE     no teacher selected
    LOADING  catalog or schedule fetch in flight
    READY    schedule index and summary available (the limit may still be
             loading, see SessionSnapshot.limit_loading)
    ERROR    catalog or schedule load failed; select again or retry()

Only results belonging to the current selection are ever published. A new
selection cancels the previous selection's token, and results arriving for a
stale token are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional

from faculty_routine.config import Settings
from faculty_routine.data.models import LoadSummary, Teacher
from faculty_routine.data.store import DocumentStore
from faculty_routine.errors import (
    CatalogLoadError,
    ErrorKind,
    LimitReadError,
    LimitWriteError,
    ScheduleLoadError,
    user_message,
)
from .cancellation import CancellationToken
from .catalog import TeacherCatalogResolver
from .index_builder import ScheduleIndex, ScheduleIndexBuilder
from .limits import LoadLimitStore
from .load import LoadCalculator, exceeds_limit, limit_overage

logger = logging.getLogger(__name__)

SnapshotListener = Callable[["SessionSnapshot"], None]


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


# =============================================================================
# Snapshot
# =============================================================================

@dataclass(frozen=True)
class SessionSnapshot:
    """Everything the presentation layer needs, as of one state transition."""
    status: SessionStatus = SessionStatus.IDLE
    teachers: tuple[Teacher, ...] = ()
    catalog_loading: bool = False
    selected_teacher: Optional[Teacher] = None
    index: Optional[ScheduleIndex] = None
    summary: Optional[LoadSummary] = None
    limit: Optional[float] = None
    limit_loading: bool = False
    limit_saving: bool = False
    error: Optional[ErrorKind] = None
    limit_error: Optional[ErrorKind] = None

    @property
    def exceeds(self) -> bool:
        """Whether the teacher's weekly load is above the configured limit."""
        if self.summary is None:
            return False
        return exceeds_limit(self.summary.total_load, self.limit)

    @property
    def overage(self) -> Optional[float]:
        """Load above the limit; None unless exceeds is True."""
        if self.summary is None:
            return None
        return limit_overage(self.summary.total_load, self.limit)

    @property
    def error_message(self) -> Optional[str]:
        return user_message(self.error) if self.error else None

    @property
    def limit_error_message(self) -> Optional[str]:
        return user_message(self.limit_error) if self.limit_error else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "status": self.status.value,
            "teachers": [t.model_dump() for t in self.teachers],
            "selectedTeacher": self.selected_teacher.model_dump() if self.selected_teacher else None,
            "index": self.index.to_dict() if self.index is not None else None,
            "summary": self.summary.model_dump(by_alias=True) if self.summary else None,
            "limit": self.limit,
            "limitLoading": self.limit_loading,
            "limitSaving": self.limit_saving,
            "exceeds": self.exceeds,
            "overage": self.overage,
            "error": self.error_message,
            "limitError": self.limit_error_message,
        }


# =============================================================================
# Session
# =============================================================================

class AggregationSession:
    """
    Orchestrates catalog, schedule, load and limit for one viewer.

    Usage:
        async with AggregationSession(store) as session:
            snapshot = await session.select_teacher("t1")
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        resolver: Optional[TeacherCatalogResolver] = None,
        builder: Optional[ScheduleIndexBuilder] = None,
        limit_store: Optional[LoadLimitStore] = None,
        calculator: Optional[LoadCalculator] = None,
    ):
        self.store = store
        self.resolver = resolver or TeacherCatalogResolver(store)
        self.builder = builder or ScheduleIndexBuilder(store)
        self.limit_store = limit_store or LoadLimitStore(store)
        self.calculator = calculator or LoadCalculator()

        self._snapshot = SessionSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._token: Optional[CancellationToken] = None
        self._generation = 0
        self._limit_version = 0
        self._disposed = False

    @classmethod
    def from_settings(cls, store: DocumentStore, config: Settings) -> AggregationSession:
        """Create a session wired with collection names and weights from config."""
        return cls(
            store,
            resolver=TeacherCatalogResolver(store, subjects_collection=config.subjects_collection),
            builder=ScheduleIndexBuilder(store, routines_collection=config.routines_collection),
            limit_store=LoadLimitStore(store, teachers_collection=config.teachers_collection),
            calculator=LoadCalculator(theory_weight=config.theory_weight, lab_weight=config.lab_weight),
        )

    async def __aenter__(self) -> AggregationSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.dispose()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener for new snapshots. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, **changes)
        for listener in list(self._listeners):
            listener(self._snapshot)

    def _ensure_active(self) -> None:
        if self._disposed:
            raise RuntimeError("Session has been disposed")

    def _is_current(self, token: CancellationToken) -> bool:
        return token is self._token and not token.cancelled

    def _find_teacher(self, teacher_id: str) -> Teacher:
        for teacher in self._snapshot.teachers:
            if teacher.id == teacher_id:
                return teacher
        return Teacher(id=teacher_id, name=teacher_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> SessionSnapshot:
        """Load the teacher catalog."""
        self._ensure_active()
        idle = self._snapshot.selected_teacher is None
        if idle:
            self._publish(status=SessionStatus.LOADING, catalog_loading=True, error=None)
        else:
            self._publish(catalog_loading=True)

        try:
            teachers = await self.resolver.resolve()
        except CatalogLoadError as e:
            if self._disposed:
                return self._snapshot
            if self._snapshot.selected_teacher is None:
                self._publish(
                    status=SessionStatus.ERROR,
                    catalog_loading=False,
                    teachers=(),
                    error=e.kind,
                )
            else:
                self._publish(catalog_loading=False, teachers=())
            return self._snapshot

        if self._disposed:
            return self._snapshot
        if self._snapshot.selected_teacher is None:
            self._publish(status=SessionStatus.IDLE, catalog_loading=False, teachers=tuple(teachers))
        else:
            self._publish(catalog_loading=False, teachers=tuple(teachers))
        return self._snapshot

    def cancel(self) -> None:
        """
        Invalidate in-flight selection work.

        A session caught mid-load falls back to IDLE since it has nothing
        consistent to show; a READY session keeps its schedule.
        """
        if self._token is not None:
            self._token.cancel()
        if self._snapshot.status is SessionStatus.LOADING and self._snapshot.selected_teacher is not None:
            self._reset_selection()
        elif self._snapshot.limit_loading:
            self._publish(limit_loading=False)

    def dispose(self) -> None:
        """Cancel everything and detach listeners. The session is unusable afterwards."""
        if self._disposed:
            return
        if self._token is not None:
            self._token.cancel()
        self._token = None
        self._listeners.clear()
        self._disposed = True
        logger.debug("Session disposed")

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def select_teacher(self, teacher_id: str) -> SessionSnapshot:
        """
        Select a teacher and load their schedule and limit concurrently.

        Returns once this selection's work has settled or been superseded;
        the returned snapshot is always the session's current one.
        """
        self._ensure_active()
        teacher = self._find_teacher(teacher_id)

        if self._token is not None:
            self._token.cancel()
        self._generation += 1
        token = CancellationToken(self._generation)
        self._token = token
        logger.info("Selected teacher %s (generation %d)", teacher.id, token.generation)

        self._publish(
            status=SessionStatus.LOADING,
            selected_teacher=teacher,
            index=None,
            summary=None,
            limit=None,
            limit_loading=True,
            error=None,
            limit_error=None,
        )

        await asyncio.gather(
            self._load_schedule(teacher, token),
            self._load_limit(teacher, token),
        )
        return self._snapshot

    def clear_selection(self) -> SessionSnapshot:
        """Drop the selection and cancel its in-flight work."""
        self._ensure_active()
        if self._token is not None:
            self._token.cancel()
        self._reset_selection()
        return self._snapshot

    async def save_limit(self, value: Any) -> bool:
        """
        Save a load limit for the selected teacher.

        Only one save runs at a time; a call made while another save is in
        flight is ignored. Garbage input clears the limit.

        Returns:
            True if the write went through
        """
        self._ensure_active()
        teacher = self._snapshot.selected_teacher
        if teacher is None:
            logger.warning("save_limit called with no teacher selected")
            return False
        if self._snapshot.limit_saving:
            logger.warning("Ignoring limit save for %s: another save is in flight", teacher.id)
            return False

        token = self._token
        self._publish(limit_saving=True, limit_error=None)
        try:
            stored = await self.limit_store.set(teacher.id, value, teacher.name)
        except LimitWriteError as e:
            if self._disposed:
                return False
            if token is not None and token is self._token:
                self._publish(limit_saving=False, limit_error=e.kind)
            else:
                self._publish(limit_saving=False)
            return False

        if self._disposed:
            return True
        if token is not None and token is self._token:
            self._limit_version += 1
            self._publish(limit_saving=False, limit=stored, limit_loading=False)
        else:
            self._publish(limit_saving=False)
        return True

    async def clear_limit(self) -> bool:
        """Clear the selected teacher's load limit."""
        return await self.save_limit(None)

    async def retry(self) -> SessionSnapshot:
        """Re-run whatever failed: the catalog, or the current selection."""
        self._ensure_active()
        snapshot = self._snapshot
        if snapshot.error is ErrorKind.CATALOG:
            return await self.start()
        if snapshot.selected_teacher is not None and (
            snapshot.status is SessionStatus.ERROR or snapshot.limit_error is ErrorKind.LIMIT_READ
        ):
            return await self.select_teacher(snapshot.selected_teacher.id)
        return snapshot

    # -------------------------------------------------------------------------
    # Selection work
    # -------------------------------------------------------------------------

    async def _load_schedule(self, teacher: Teacher, token: CancellationToken) -> None:
        try:
            index = await self.builder.build(teacher.id, token)
        except ScheduleLoadError as e:
            if not self._is_current(token):
                return
            # The limit read for this selection is now irrelevant
            token.cancel()
            self._publish(
                status=SessionStatus.ERROR,
                index=None,
                summary=None,
                limit=None,
                limit_loading=False,
                error=e.kind,
            )
            return

        if index is None or not self._is_current(token):
            logger.debug("Dropping stale schedule for %s", teacher.id)
            return

        summary = self.calculator.compute(index)
        self._publish(status=SessionStatus.READY, index=index, summary=summary)

    async def _load_limit(self, teacher: Teacher, token: CancellationToken) -> None:
        version = self._limit_version
        try:
            limit = await self.limit_store.get(teacher.id)
        except LimitReadError as e:
            if self._is_current(token) and version == self._limit_version:
                self._publish(limit_loading=False, limit_error=e.kind)
            return

        # A save that finished while the read was in flight wins
        if not self._is_current(token) or version != self._limit_version:
            logger.debug("Dropping stale limit for %s", teacher.id)
            return
        self._publish(limit=limit, limit_loading=False)

    def _reset_selection(self) -> None:
        self._token = None
        self._publish(
            status=SessionStatus.IDLE,
            selected_teacher=None,
            index=None,
            summary=None,
            limit=None,
            limit_loading=False,
            error=None,
            limit_error=None,
        )
