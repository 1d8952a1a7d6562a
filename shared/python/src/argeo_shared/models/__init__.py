"""
argeo_shared.models — Pydantic models for stored rows and raw source rows.

Stored rows (one model per table) provide:
  .from_db_row(row: dict) -> Model
  .to_insert_dict() -> dict

Source rows mirror the datos.gob.ar CSV headers and the AMBA side-file.
"""

from argeo_shared.models.geography import Country, Locality, Subdivision
from argeo_shared.models.sources import (
    DepartmentRecord,
    LocalityRecord,
    MetroAreaConfig,
    MetroAreaEntry,
    ProvinceRecord,
)

__all__ = [
    "Country",
    "Subdivision",
    "Locality",
    "ProvinceRecord",
    "DepartmentRecord",
    "LocalityRecord",
    "MetroAreaConfig",
    "MetroAreaEntry",
]
