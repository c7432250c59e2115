"""Shared fixtures: a sample routine store and its snapshot file."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import pytest
from rich.logging import RichHandler

from .helpers import ControlledStore


def sample_tree() -> dict[str, Any]:
    """
    Two routines, three catalog teachers.

    T001 teaches three theory classes and two labs (weekly load 4) and has
    a limit of 3. One of T001's classes is attributed only through the
    legacy 'tname' field.
    """
    return {
        "subjects": {
            "ds": {
                "name": "Data Structures",
                "__collections__": {
                    "teachers": {
                        "T001": {"name": "Alice Smith"},
                        "T002": {"name": "Bob Jones"},
                    }
                },
            },
            "phy": {
                "name": "Physics",
                "__collections__": {
                    "teachers": {
                        "T001": {"name": "Alice Smith"},
                        "T003": {},
                    }
                },
            },
        },
        "routines": {
            "r1": {
                "name": "CSE 2A",
                "__collections__": {
                    "mon": {
                        "1": {"teacherId": "T001", "sname": "Data Structures", "scode": "CS201", "room": "101"},
                        "2": {"teacherId": "T001", "sname": "Data Structures Lab", "room": "Lab 3"},
                    },
                    "tue": {
                        "3": {"teacher": "T002", "subject": "Physics"},
                    },
                },
            },
            "r2": {
                "name": "CSE 3B",
                "__collections__": {
                    "mon": {
                        "1": {"facultyId": "T001", "name": "Algorithms", "code": "CS301", "venue": "B-12"},
                    },
                    "wed": {
                        "5": {"teacherId": "legacy-9", "tname": "T001", "sname": "Networks"},
                        "6": {"sname": "Orphan Seminar"},
                    },
                    "fri": {
                        "x": {"teacherId": "T001", "period": 7, "sname": "Compilers Laboratory"},
                    },
                },
            },
        },
        "teachers": {
            "T001": {"loadLimit": 3, "name": "Alice Smith", "dept": "CSE"},
        },
    }


@pytest.fixture
def tree() -> dict[str, Any]:
    return sample_tree()


@pytest.fixture
def store(tree) -> ControlledStore:
    return ControlledStore.from_tree(tree)


@pytest.fixture
def store_file(tree, tmp_path) -> Path:
    """Sample tree written to a snapshot file."""
    filepath = tmp_path / "store.json"
    with open(filepath, "w") as f:
        json.dump(tree, f)
    return filepath


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging installs its own root handlers; drop them after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h, (RichHandler, RotatingFileHandler)):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
