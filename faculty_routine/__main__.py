"""
Entry point for running the package as a module.

Usage:
    python -m faculty_routine teachers store.json
    python -m faculty_routine view store.json --teacher T001
    python -m faculty_routine set-limit store.json --teacher T001 12.5
"""

from faculty_routine.cli import main

if __name__ == "__main__":
    main()
