"""
pipelines/export.py — Exports the seeded hierarchy to static JSON files.

Output (in export_dir):
  provincias.json     provinces, by name
  departamentos.json  departments/partidos/comunas with their province
  localidades.json    localities with their department and province
  amba.json           CABA plus every department flagged as metropolitan
  barrios-caba.json   localities of the CABA comunas
  index.json          description, generation time, count and URL per file

Each table is read once; ancestors are resolved through id -> row maps
rather than per-row queries. Keys are camelCase and absent optional values
are omitted.

Usage:
    from argeo_pipeline.pipelines.export import run
    result = await run()                          # settings.export_dir
    result = await run(export_dir="./out", conn=conn)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import duckdb
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from argeo_pipeline.loaders.repository import Repositories
from argeo_pipeline.utils.logging import get_logger
from argeo_shared.config import settings
from argeo_shared.constants import CABA_ISO_CODE, DATA_SOURCE_URL
from argeo_shared.db import get_duckdb_connection
from argeo_shared.models.geography import Subdivision

log = get_logger(__name__, pipeline="export")


# ---------------------------------------------------------------------------
# Exported row shapes
# ---------------------------------------------------------------------------


class _Exported(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExportedProvince(_Exported):
    code: str
    name: str
    type: str
    is_metropolitan_area: bool
    metropolitan_area_code: str | None = None


class ExportedDepartment(_Exported):
    code: str
    name: str
    type: str
    province_code: str
    province_name: str
    is_metropolitan_area: bool
    metropolitan_area_code: str | None = None


class ExportedLocality(_Exported):
    name: str
    type: str
    census_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    department_code: str
    department_name: str
    province_code: str
    province_name: str


@dataclass
class ExportViews:
    """Denormalized views, ready to be written."""

    provinces: list[ExportedProvince]
    departments: list[ExportedDepartment]
    localities: list[ExportedLocality]
    caba: ExportedProvince | None
    metro_departments: list[ExportedDepartment]
    caba_localities: list[ExportedLocality]

    @property
    def amba_count(self) -> int:
        return len(self.metro_departments) + (1 if self.caba is not None else 0)


@dataclass
class ExportResult:
    export_dir: Path
    counts: dict[str, int] = field(default_factory=dict)
    files: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# View building
# ---------------------------------------------------------------------------


def build_views(repos: Repositories) -> ExportViews:
    """Read every table once and resolve each row's ancestors."""
    subdivisions = repos.subdivisions.find(order_by="name")
    provinces = [s for s in subdivisions if s.is_top_level]
    departments = [s for s in subdivisions if not s.is_top_level]

    province_by_id: dict[int, Subdivision] = {p.id: p for p in provinces}  # type: ignore[misc]
    department_by_id: dict[int, Subdivision] = {d.id: d for d in departments}  # type: ignore[misc]

    exported_provinces = [
        ExportedProvince(
            code=p.code,
            name=p.name,
            type=p.type,
            is_metropolitan_area=p.is_metropolitan_area,
            metropolitan_area_code=p.metropolitan_area_code,
        )
        for p in provinces
    ]

    exported_departments: list[ExportedDepartment] = []
    for d in departments:
        province = province_by_id.get(d.parent_subdivision_id)  # type: ignore[arg-type]
        exported_departments.append(
            ExportedDepartment(
                code=d.code,
                name=d.name,
                type=d.type,
                province_code=province.code if province else "",
                province_name=province.name if province else "",
                is_metropolitan_area=d.is_metropolitan_area,
                metropolitan_area_code=d.metropolitan_area_code,
            )
        )

    exported_localities: list[ExportedLocality] = []
    caba_localities: list[ExportedLocality] = []
    for loc in repos.localities.find(order_by="name"):
        department = department_by_id.get(loc.subdivision_id)
        province = (
            province_by_id.get(department.parent_subdivision_id)  # type: ignore[arg-type]
            if department
            else None
        )
        exported = ExportedLocality(
            name=loc.name,
            type=loc.type,
            census_code=loc.census_code,
            latitude=loc.latitude,
            longitude=loc.longitude,
            department_code=department.code if department else "",
            department_name=department.name if department else "",
            province_code=province.code if province else "",
            province_name=province.name if province else "",
        )
        exported_localities.append(exported)
        if province is not None and province.code == CABA_ISO_CODE:
            caba_localities.append(exported)

    # CABA is part of AMBA whatever its stored flag says.
    caba = next((p for p in exported_provinces if p.code == CABA_ISO_CODE), None)

    return ExportViews(
        provinces=exported_provinces,
        departments=exported_departments,
        localities=exported_localities,
        caba=caba,
        metro_departments=[d for d in exported_departments if d.is_metropolitan_area],
        caba_localities=caba_localities,
    )


def _write_json(path: Path, payload: Any) -> Path:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def build_index(views: ExportViews, base_url: str, generated: datetime) -> dict[str, Any]:
    base = base_url.rstrip("/")
    entries = {
        "provincias": ("provincias.json", "24 provincias de Argentina con códigos ISO 3166-2", len(views.provinces)),
        "departamentos": ("departamentos.json", "Departamentos, partidos y comunas", len(views.departments)),
        "localidades": ("localidades.json", "Localidades con coordenadas lat/lon", len(views.localities)),
        "amba": ("amba.json", "Partidos del Área Metropolitana de Buenos Aires", views.amba_count),
        "barriosCaba": ("barrios-caba.json", "Barrios de la Ciudad de Buenos Aires", len(views.caba_localities)),
    }
    return {
        "description": "Datos geográficos de Argentina - ISO 3166-2",
        "source": DATA_SOURCE_URL,
        "generated": generated.isoformat(),
        "files": {
            key: {"description": description, "count": count, "url": f"{base}/{file_name}"}
            for key, (file_name, description, count) in entries.items()
        },
    }


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def run(
    *,
    export_dir: str | Path | None = None,
    conn: duckdb.DuckDBPyConnection | None = None,
    base_url: str | None = None,
) -> ExportResult:
    """
    Write all export files.

    Args:
        export_dir: Output directory, created if missing (default: settings.export_dir).
        conn:       DuckDB connection (default: the process singleton).
        base_url:   Public URL prefix recorded in index.json (default: settings.export_base_url).

    Returns:
        ExportResult with the written paths and per-file counts.
    """
    out = Path(export_dir) if export_dir is not None else Path(settings.export_dir)
    out.mkdir(parents=True, exist_ok=True)
    log.info("export_start", export_dir=str(out))

    repos = Repositories.from_connection(conn if conn is not None else get_duckdb_connection())
    views = build_views(repos)

    result = ExportResult(export_dir=out)
    amba = {
        "description": "Área Metropolitana de Buenos Aires (AMBA)",
        "count": views.amba_count,
        "caba": views.caba.to_json() if views.caba else None,
        "partidos": [d.to_json() for d in views.metro_departments],
    }
    outputs: list[tuple[str, Any, int]] = [
        ("provincias.json", [p.to_json() for p in views.provinces], len(views.provinces)),
        ("departamentos.json", [d.to_json() for d in views.departments], len(views.departments)),
        ("localidades.json", [loc.to_json() for loc in views.localities], len(views.localities)),
        ("amba.json", {k: v for k, v in amba.items() if v is not None}, views.amba_count),
        ("barrios-caba.json", [loc.to_json() for loc in views.caba_localities], len(views.caba_localities)),
    ]
    for file_name, payload, count in outputs:
        result.files.append(_write_json(out / file_name, payload))
        result.counts[file_name] = count
        log.info("export_file_written", file=file_name, count=count)

    index = build_index(
        views,
        base_url or settings.export_base_url,
        datetime.now(timezone.utc),
    )
    result.files.append(_write_json(out / "index.json", index))

    log.info("export_complete", export_dir=str(out), files=len(result.files))
    return result
