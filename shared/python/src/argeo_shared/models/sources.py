"""
models/sources.py — Raw rows of the datos.gob.ar CSVs and the AMBA side-file.

Field names follow the CSV headers. Only the columns the seeder reads are
required; the rest are kept for completeness and default to None.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _SourceRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    categoria: str = ""
    centroide_lat: str | None = None
    centroide_lon: str | None = None
    fuente: str | None = None
    id: str
    nombre: str

    @field_validator("categoria", mode="before")
    @classmethod
    def _null_category_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ProvinceRecord(_SourceRow):
    """One row of provincias.csv."""

    iso_id: str
    iso_nombre: str | None = None
    nombre_completo: str | None = None


class DepartmentRecord(_SourceRow):
    """One row of departamentos.csv."""

    provincia_id: str | None = None
    nombre_completo: str | None = None
    provincia_interseccion: str | None = None
    provincia_nombre: str | None = None


class LocalityRecord(_SourceRow):
    """One row of localidades.csv."""

    id: str | None = None  # type: ignore[assignment]
    departamento_id: str | None = None
    departamento_nombre: str | None = None
    localidad_censal_id: str | None = None
    localidad_censal_nombre: str | None = None
    municipio_id: str | None = None
    municipio_nombre: str | None = None
    provincia_id: str | None = None
    provincia_nombre: str | None = None


class MetroAreaEntry(BaseModel):
    id: str
    nombre: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class MetroAreaConfig(BaseModel):
    """amba-partidos.json: AMBA partidos plus the comunas of CABA."""

    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    source: str | None = None
    updated: str | None = None
    partidos: list[MetroAreaEntry] = Field(default_factory=list)
    comunas_caba: list[MetroAreaEntry] = Field(default_factory=list)

    @property
    def codes(self) -> set[str]:
        return {e.id for e in self.partidos} | {e.id for e in self.comunas_caba}
