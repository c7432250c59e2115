"""Tests for teacher catalog resolution."""

from __future__ import annotations

import pytest

from faculty_routine.data.store import InMemoryDocumentStore, StoreError
from faculty_routine.engine.catalog import TeacherCatalogResolver
from faculty_routine.errors import CatalogLoadError, ErrorKind

from .helpers import ControlledStore


class TestCatalogResolver:
    """Tests for TeacherCatalogResolver."""

    @pytest.mark.asyncio
    async def test_union_of_subject_teachers(self, store):
        teachers = await TeacherCatalogResolver(store).resolve()
        assert [t.id for t in teachers] == ["T001", "T002", "T003"]

    @pytest.mark.asyncio
    async def test_name_falls_back_to_id(self, store):
        teachers = await TeacherCatalogResolver(store).resolve()
        names = {t.id: t.name for t in teachers}
        assert names["T001"] == "Alice Smith"
        assert names["T003"] == "T003"

    @pytest.mark.asyncio
    async def test_later_record_replaces_name_keeps_position(self):
        store = InMemoryDocumentStore.from_tree({
            "subjects": {
                "a": {"__collections__": {"teachers": {"T1": {"name": "Old"}, "T2": {"name": "Two"}}}},
                "b": {"__collections__": {"teachers": {"T1": {"name": "New"}}}},
            }
        })
        teachers = await TeacherCatalogResolver(store).resolve()
        assert [(t.id, t.name) for t in teachers] == [("T1", "New"), ("T2", "Two")]

    @pytest.mark.asyncio
    async def test_no_subjects(self):
        assert await TeacherCatalogResolver(InMemoryDocumentStore()).resolve() == []

    @pytest.mark.asyncio
    async def test_custom_collection_names(self):
        store = InMemoryDocumentStore.from_tree({
            "courses": {"c1": {"__collections__": {"staff": {"T1": {"name": "Alice"}}}}}
        })
        resolver = TeacherCatalogResolver(store, subjects_collection="courses", teachers_subcollection="staff")
        teachers = await resolver.resolve()
        assert [t.id for t in teachers] == ["T1"]

    @pytest.mark.asyncio
    async def test_read_failure_raises_catalog_error(self, tree):
        store = ControlledStore.from_tree(tree)
        store.fail_paths.add("subjects/phy/teachers")

        with pytest.raises(CatalogLoadError) as exc_info:
            await TeacherCatalogResolver(store).resolve()

        err = exc_info.value
        assert err.kind is ErrorKind.CATALOG
        assert isinstance(err.cause, StoreError)
        assert err.__cause__ is err.cause
        assert err.user_message == "Could not load teacher list."
