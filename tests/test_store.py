"""Tests for the in-memory document store."""

from __future__ import annotations

import pytest

from faculty_routine.data.store import (
    SUBCOLLECTIONS_KEY,
    DocumentStore,
    InMemoryDocumentStore,
    join_path,
    split_path,
)


class TestPaths:
    """Tests for path helpers."""

    def test_split_path(self):
        assert split_path("routines/r1/mon") == ("routines", "r1", "mon")
        assert split_path("/routines//r1/") == ("routines", "r1")
        assert split_path(("routines", "r1")) == ("routines", "r1")

    def test_split_path_rejects_empty(self):
        with pytest.raises(ValueError):
            split_path("")
        with pytest.raises(ValueError):
            split_path(("routines", ""))

    def test_join_path(self):
        assert join_path("subjects", "ds", "teachers") == "subjects/ds/teachers"

    def test_join_path_rejects_slash_in_segment(self):
        with pytest.raises(ValueError):
            join_path("teachers", "a/b")


class TestInMemoryStore:
    """Tests for the async store API."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryDocumentStore(), DocumentStore)

    @pytest.mark.asyncio
    async def test_list_keeps_insertion_order(self):
        store = InMemoryDocumentStore()
        store.put("routines/r2", {"name": "B"})
        store.put("routines/r1", {"name": "A"})
        records = await store.list_collection("routines")
        assert [r.id for r in records] == ["r2", "r1"]
        assert records[0].data == {"name": "B"}

    @pytest.mark.asyncio
    async def test_list_missing_collection_is_empty(self):
        assert await InMemoryDocumentStore().list_collection("routines") == []

    @pytest.mark.asyncio
    async def test_list_requires_collection_path(self):
        with pytest.raises(ValueError, match="Not a collection path"):
            await InMemoryDocumentStore().list_collection("routines/r1")

    @pytest.mark.asyncio
    async def test_get_document(self):
        store = InMemoryDocumentStore()
        store.put("teachers/T1", {"loadLimit": 4})
        snapshot = await store.get_document("teachers/T1")
        assert snapshot.exists
        assert snapshot.data == {"loadLimit": 4}

        missing = await store.get_document("teachers/T2")
        assert not missing.exists
        assert missing.data is None

    @pytest.mark.asyncio
    async def test_returned_data_is_a_copy(self):
        store = InMemoryDocumentStore()
        store.put("teachers/T1", {"tags": ["a"]})
        snapshot = await store.get_document("teachers/T1")
        snapshot.data["tags"].append("b")
        assert store.read("teachers/T1") == {"tags": ["a"]}

    @pytest.mark.asyncio
    async def test_set_merges_by_default(self):
        store = InMemoryDocumentStore()
        store.put("teachers/T1", {"name": "Alice", "dept": "CSE"})
        await store.set_document("teachers/T1", {"loadLimit": 5.0, "name": "Alice S"})
        assert store.read("teachers/T1") == {"name": "Alice S", "dept": "CSE", "loadLimit": 5.0}

    @pytest.mark.asyncio
    async def test_set_without_merge_replaces(self):
        store = InMemoryDocumentStore()
        store.put("teachers/T1", {"name": "Alice", "dept": "CSE"})
        await store.set_document("teachers/T1", {"loadLimit": 5.0}, merge=False)
        assert store.read("teachers/T1") == {"loadLimit": 5.0}

    @pytest.mark.asyncio
    async def test_set_creates_missing_document(self):
        store = InMemoryDocumentStore()
        await store.set_document("teachers/T9", {"loadLimit": None, "name": "Zed"})
        assert store.read("teachers/T9") == {"loadLimit": None, "name": "Zed"}

    @pytest.mark.asyncio
    async def test_calls_are_recorded(self):
        store = InMemoryDocumentStore()
        await store.list_collection("routines")
        await store.get_document("teachers/T1")
        await store.get_document("teachers/T1")
        assert store.calls[0] == ("list", "routines")
        assert store.count_calls("get") == 2
        assert store.count_calls("get", "teachers/T1") == 2
        assert store.count_calls("set") == 0


class TestTreeConversion:
    """Tests for nested snapshot conversion."""

    def test_from_tree_nested_collections(self, tree):
        store = InMemoryDocumentStore.from_tree(tree)
        assert store.read("routines/r1") == {"name": "CSE 2A"}
        assert store.read("routines/r1/mon/1")["sname"] == "Data Structures"
        assert store.read("subjects/phy/teachers/T003") == {}
        assert "routines/r2/fri" in store.collection_paths()

    def test_to_tree_restores_layout(self, tree):
        store = InMemoryDocumentStore.from_tree(tree)
        assert store.to_tree() == tree

    def test_to_tree_omits_empty_subcollection_key(self):
        store = InMemoryDocumentStore()
        store.put("teachers/T1", {"name": "Alice"})
        assert store.to_tree() == {"teachers": {"T1": {"name": "Alice"}}}
        assert SUBCOLLECTIONS_KEY not in store.to_tree()["teachers"]["T1"]
