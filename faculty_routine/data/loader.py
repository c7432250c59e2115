"""Load and validate document store snapshots from JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from .store import SUBCOLLECTIONS_KEY, InMemoryDocumentStore

logger = logging.getLogger(__name__)


class DataValidationError(Exception):
    """Raised when a store snapshot fails validation."""
    pass


def load_store_snapshot(path: Union[str, Path], latency: float = 0.0) -> InMemoryDocumentStore:
    """
    Load a document store snapshot from a JSON file.

    Args:
        path: Path to the JSON file
        latency: Simulated per-call latency for the resulting store

    Returns:
        Store populated with the snapshot's collections

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file isn't valid JSON
        DataValidationError: If the data fails validation
    """
    path = Path(path)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    validate_store_snapshot(data)
    store = InMemoryDocumentStore.from_tree(data, latency=latency)
    logger.info("Loaded store snapshot %s (%d collections)", path, len(store.collection_paths()))
    return store


def save_store_snapshot(store: InMemoryDocumentStore, path: Union[str, Path]) -> None:
    """Write the store's contents back to a JSON snapshot file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(store.to_tree(), f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.info("Saved store snapshot %s", path)


def validate_store_snapshot(data: Any) -> None:
    """
    Validate snapshot structure.

    Args:
        data: Parsed snapshot

    Raises:
        DataValidationError: If validation fails
    """
    if not isinstance(data, dict):
        raise DataValidationError("Snapshot must be a JSON object of collections")

    errors: list[str] = []
    _check_collections(data, "", errors)

    if errors:
        raise DataValidationError("; ".join(errors))


def _check_collections(collections: Any, prefix: str, errors: list[str]) -> None:
    for name, docs in collections.items():
        collection = f"{prefix}{name}"
        if not name or "/" in name:
            errors.append(f"Invalid collection name: {collection!r}")
            continue
        if not isinstance(docs, dict):
            errors.append(f"Collection {collection} must be an object")
            continue

        for doc_id, doc in docs.items():
            doc_path = f"{collection}/{doc_id}"
            if not doc_id or "/" in doc_id:
                errors.append(f"Invalid document id in {collection}: {doc_id!r}")
                continue
            if not isinstance(doc, dict):
                errors.append(f"Document {doc_path} must be an object")
                continue

            nested = doc.get(SUBCOLLECTIONS_KEY)
            if nested is None:
                continue
            if not isinstance(nested, dict):
                errors.append(f"Document {doc_path} has non-object {SUBCOLLECTIONS_KEY}")
                continue
            _check_collections(nested, f"{doc_path}/", errors)
