"""Teacher catalog resolution from subjects/*/teachers."""

from __future__ import annotations

import logging

from faculty_routine.data.models import Teacher
from faculty_routine.data.store import DocumentStore, join_path
from faculty_routine.errors import CatalogLoadError

logger = logging.getLogger(__name__)


class TeacherCatalogResolver:
    """
    Builds the list of known teachers.

    Teachers are not stored in one place; every subject carries a 'teachers'
    sub-collection. The catalog is the union of those, keyed by teacher id.
    """

    def __init__(
        self,
        store: DocumentStore,
        subjects_collection: str = "subjects",
        teachers_subcollection: str = "teachers",
    ):
        self.store = store
        self.subjects_collection = subjects_collection
        self.teachers_subcollection = teachers_subcollection

    async def resolve(self) -> list[Teacher]:
        """
        Scan every subject's teacher sub-collection.

        Returns:
            Teachers in first-encounter order. A later record for the same id
            replaces the earlier name; a missing name falls back to the id.

        Raises:
            CatalogLoadError: If any collection read fails. No partial
                catalog is returned.
        """
        names: dict[str, str] = {}

        try:
            subjects = await self.store.list_collection(self.subjects_collection)
            for subject in subjects:
                path = join_path(self.subjects_collection, subject.id, self.teachers_subcollection)
                for record in await self.store.list_collection(path):
                    name = record.data.get("name")
                    names[record.id] = name if isinstance(name, str) and name else record.id
        except Exception as e:
            logger.exception("Failed loading teachers")
            raise CatalogLoadError(f"Teacher catalog scan failed: {e}", cause=e) from e

        teachers = [Teacher(id=teacher_id, name=name) for teacher_id, name in names.items()]
        logger.info("Resolved %d teachers from %d subjects", len(teachers), len(subjects))
        return teachers
