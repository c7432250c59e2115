"""
Document store access.

The engine talks to a hierarchical document store (collections of documents,
documents holding fields and nested collections) through the async
DocumentStore protocol. InMemoryDocumentStore is the bundled implementation,
used by the CLI (fed from a JSON snapshot) and by the tests.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)

PathLike = Union[str, tuple[str, ...], list[str]]

# Snapshot key holding a document's nested collections
SUBCOLLECTIONS_KEY = "__collections__"


class StoreError(Exception):
    """Raised by store implementations on transport or permission failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class DocumentRecord:
    """A document returned from a collection listing."""
    id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentSnapshot:
    """Result of a single document read."""
    exists: bool
    data: Optional[dict[str, Any]] = None


# =============================================================================
# Path Helpers
# =============================================================================

def split_path(path: PathLike) -> tuple[str, ...]:
    """Normalize a slash-separated string or segment sequence into segments."""
    if isinstance(path, str):
        segments = tuple(s for s in path.split("/") if s)
    else:
        segments = tuple(str(s) for s in path)
    if not segments or any(not s or "/" in s for s in segments):
        raise ValueError(f"Invalid store path: {path!r}")
    return segments


def join_path(*segments: str) -> str:
    return "/".join(split_path(segments))


def _collection_path(path: PathLike) -> str:
    segments = split_path(path)
    if len(segments) % 2 != 1:
        raise ValueError(f"Not a collection path: {'/'.join(segments)}")
    return "/".join(segments)


def _document_path(path: PathLike) -> tuple[str, str]:
    segments = split_path(path)
    if len(segments) % 2 != 0:
        raise ValueError(f"Not a document path: {'/'.join(segments)}")
    return "/".join(segments[:-1]), segments[-1]


# =============================================================================
# Protocol
# =============================================================================

@runtime_checkable
class DocumentStore(Protocol):
    """Async collection/document API consumed by the engine."""

    async def list_collection(self, path: PathLike) -> list[DocumentRecord]:
        ...

    async def get_document(self, path: PathLike) -> DocumentSnapshot:
        ...

    async def set_document(self, path: PathLike, data: dict[str, Any], merge: bool = True) -> None:
        ...


# =============================================================================
# In-memory Implementation
# =============================================================================

class InMemoryDocumentStore:
    """
    Dictionary-backed DocumentStore.

    Collections are keyed by their full path ("routines/r1/mon") and keep
    document insertion order. Returned data is always a copy.
    """

    def __init__(self, latency: float = 0.0):
        """
        Initialize an empty store.

        Args:
            latency: Seconds to sleep on every call. Zero still yields to the
                event loop, so concurrent callers interleave.
        """
        self.latency = latency
        self.calls: list[tuple[str, str]] = []
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    # -------------------------------------------------------------------------
    # DocumentStore API
    # -------------------------------------------------------------------------

    async def list_collection(self, path: PathLike) -> list[DocumentRecord]:
        collection = _collection_path(path)
        await self._before_call("list", collection)
        docs = self._collections.get(collection, {})
        return [DocumentRecord(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in docs.items()]

    async def get_document(self, path: PathLike) -> DocumentSnapshot:
        collection, doc_id = _document_path(path)
        await self._before_call("get", f"{collection}/{doc_id}")
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return DocumentSnapshot(exists=False)
        return DocumentSnapshot(exists=True, data=copy.deepcopy(data))

    async def set_document(self, path: PathLike, data: dict[str, Any], merge: bool = True) -> None:
        collection, doc_id = _document_path(path)
        await self._before_call("set", f"{collection}/{doc_id}")
        logger.debug("set %s/%s (merge=%s)", collection, doc_id, merge)
        self.put(f"{collection}/{doc_id}", data, merge=merge)

    # -------------------------------------------------------------------------
    # Synchronous helpers
    # -------------------------------------------------------------------------

    def put(self, path: PathLike, data: dict[str, Any], merge: bool = False) -> None:
        """Write a document without going through the async API."""
        collection, doc_id = _document_path(path)
        docs = self._collections.setdefault(collection, {})
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    def read(self, path: PathLike) -> Optional[dict[str, Any]]:
        """Read a document's fields synchronously, or None if absent."""
        collection, doc_id = _document_path(path)
        data = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def collection_paths(self) -> list[str]:
        return list(self._collections)

    def count_calls(self, op: str, path: Optional[str] = None) -> int:
        return sum(1 for o, p in self.calls if o == op and (path is None or p == path))

    async def _before_call(self, op: str, path: str) -> None:
        self.calls.append((op, path))
        await asyncio.sleep(self.latency)

    # -------------------------------------------------------------------------
    # Tree conversion
    # -------------------------------------------------------------------------

    @classmethod
    def from_tree(cls, tree: dict[str, Any], latency: float = 0.0) -> InMemoryDocumentStore:
        """
        Build a store from a nested snapshot.

        A collection is a mapping of document id to document; a document is a
        mapping of fields plus an optional "__collections__" mapping holding
        its sub-collections.
        """
        store = cls(latency=latency)
        store._load_collections((), tree)
        return store

    def _load_collections(self, prefix: tuple[str, ...], collections: dict[str, Any]) -> None:
        for name, docs in collections.items():
            collection = prefix + (name,)
            self._collections.setdefault("/".join(collection), {})
            for doc_id, doc in docs.items():
                fields = {k: v for k, v in doc.items() if k != SUBCOLLECTIONS_KEY}
                self.put(collection + (doc_id,), fields)
                nested = doc.get(SUBCOLLECTIONS_KEY)
                if nested:
                    self._load_collections(collection + (doc_id,), nested)

    def to_tree(self) -> dict[str, Any]:
        """Inverse of from_tree."""
        tree: dict[str, Any] = {}
        for collection in sorted(self._collections, key=lambda p: p.count("/")):
            segments = collection.split("/")
            target = tree
            for i in range(0, len(segments) - 1, 2):
                docs = target.setdefault(segments[i], {})
                doc = docs.setdefault(segments[i + 1], {})
                target = doc.setdefault(SUBCOLLECTIONS_KEY, {})
            docs = target.setdefault(segments[-1], {})
            for doc_id, data in self._collections[collection].items():
                docs.setdefault(doc_id, {}).update(copy.deepcopy(data))
        return tree

