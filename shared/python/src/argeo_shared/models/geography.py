"""
models/geography.py — Pydantic models for the three location tables.

Parent links are plain integer ids; models never hold references to other
model instances.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

_DB_MANAGED = {"id", "created_at", "updated_at"}


class _Row(BaseModel):
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db_row(cls, row: dict[str, Any]):
        return cls(**row)

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude=_DB_MANAGED)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


class Country(_Row):
    """Matches the countries table row exactly."""

    code: str
    name: str


class Subdivision(_Row):
    """A province (no parent) or a department/partido/comuna (province parent)."""

    country_id: int
    parent_subdivision_id: int | None = None
    code: str
    name: str
    type: str
    is_metropolitan_area: bool = False
    metropolitan_area_code: str | None = None

    @property
    def is_top_level(self) -> bool:
        return self.parent_subdivision_id is None


class Locality(_Row):
    """A census locality attached to a department-level subdivision."""

    subdivision_id: int
    name: str
    type: str
    census_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
