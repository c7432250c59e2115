"""
Per-teacher weekly load limits.

Limits live in teachers/{teacherId}.loadLimit. Writes merge into the teacher
document so other fields survive; clearing stores null and keeps the
document.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from faculty_routine.data.models import LoadLimit
from faculty_routine.data.store import DocumentStore, join_path
from faculty_routine.errors import LimitReadError, LimitWriteError

logger = logging.getLogger(__name__)

LIMIT_FIELD = "loadLimit"
NAME_FIELD = "name"


def parse_limit_input(value: Any) -> Optional[float]:
    """
    Normalize user input into a limit value.

    Empty, non-numeric, non-finite and non-positive inputs all mean "no
    limit"; they clear the limit rather than being rejected.

    Examples:
        "12.5" -> 12.5, " 20 " -> 20.0, "" / "0" / "-5" / "abc" -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        # float() accepts digit separators ("1_000"); treat them as garbage
        if not value or "_" in value:
            return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return parsed


def stored_limit(data: Optional[dict[str, Any]]) -> Optional[float]:
    """Read a limit out of a teacher document; invalid values read as absent."""
    if not data:
        return None
    value = data.get(LIMIT_FIELD)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


class LoadLimitStore:
    """Reads and writes load limits through the document store."""

    def __init__(self, store: DocumentStore, teachers_collection: str = "teachers"):
        self.store = store
        self.teachers_collection = teachers_collection

    def _path(self, teacher_id: str) -> str:
        return join_path(self.teachers_collection, teacher_id)

    async def get(self, teacher_id: str) -> Optional[float]:
        """
        Fetch the saved limit for a teacher.

        Raises:
            LimitReadError: If the document read fails
        """
        try:
            snapshot = await self.store.get_document(self._path(teacher_id))
        except Exception as e:
            logger.exception("Error fetching teacher load limit for %s", teacher_id)
            raise LimitReadError(f"Limit read failed for {teacher_id}: {e}", cause=e) from e

        if not snapshot.exists:
            return None
        return stored_limit(snapshot.data)

    async def get_limit(self, teacher_id: str) -> LoadLimit:
        return LoadLimit(teacher_id=teacher_id, limit=await self.get(teacher_id))

    async def set(self, teacher_id: str, value: Any, display_name: str) -> Optional[float]:
        """
        Upsert the limit for a teacher.

        Args:
            teacher_id: Teacher document id
            value: Raw input; normalized with parse_limit_input
            display_name: Stored alongside the limit as the document's name

        Returns:
            The value actually stored (None when the limit was cleared)

        Raises:
            LimitWriteError: If the write fails
        """
        limit = parse_limit_input(value)
        try:
            await self.store.set_document(
                self._path(teacher_id),
                {LIMIT_FIELD: limit, NAME_FIELD: display_name},
                merge=True,
            )
        except Exception as e:
            logger.exception("Error saving teacher load limit for %s", teacher_id)
            raise LimitWriteError(f"Limit write failed for {teacher_id}: {e}", cause=e) from e

        if limit is None:
            logger.info("Cleared load limit for %s", teacher_id)
        else:
            logger.info("Saved load limit %s for %s", limit, teacher_id)
        return limit

    async def clear(self, teacher_id: str, display_name: str) -> None:
        await self.set(teacher_id, None, display_name)
