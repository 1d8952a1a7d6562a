"""
errors.py — Exception types raised by the loader and the repositories.

Rows whose parent cannot be resolved are not errors: the seeder counts and
logs them as skips.
"""

from __future__ import annotations

from pathlib import Path


class ArgeoError(Exception):
    """Base class for argeo failures."""


class MissingFileError(ArgeoError):
    """A required input file is absent. Raised before any store write."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Required data file not found: {self.path}")


class StorageWriteError(ArgeoError):
    """A save against the store failed. Aborts the current phase and the run."""

    def __init__(self, table: str, message: str) -> None:
        self.table = table
        super().__init__(f"Write to {table} failed: {message}")


class UniqueViolationError(StorageWriteError):
    """A save collided with a UNIQUE constraint (e.g. re-seeding a seeded store)."""
