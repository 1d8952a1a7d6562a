"""
pipelines/seed.py — Seeds the location store from the datos.gob.ar CSVs.

Phases, strictly in this order:
  1. country       the single AR row (reused if already present)
  2. provinces     top-level subdivisions; CABA is flagged as AMBA
  3. departments   children of provinces, parent resolved by INDEC
                   province id; flagged when listed in amba-partidos.json
  4. localities    children of departments, inserted in batches

Each phase needs the complete lookup map built by the previous one, so a
phase only starts once the previous one has finished. Rows whose parent
cannot be resolved are skipped and counted. A storage error aborts the run;
rows committed by earlier phases (and earlier batches) stay in place.

Usage:
    from argeo_pipeline.pipelines.seed import run
    result = await run()                       # settings.data_dir, settings.duckdb_path
    result = await run(reset=True)             # drop and recreate tables first
    result = await run(batch_size=1000, conn=duckdb.connect(":memory:"))
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import duckdb

from argeo_pipeline.errors import MissingFileError
from argeo_pipeline.loaders.repository import LoadResult, Repositories
from argeo_pipeline.sources.datosgobar import (
    DatosGobArSource,
    count_by,
    load_metro_area_codes,
    verify_data_files,
)
from argeo_pipeline.transforms.normalize import (
    build_department_code,
    normalize_locality_type,
    normalize_province_code,
    normalize_subdivision_type,
    parse_coordinate,
)
from argeo_pipeline.utils.logging import get_logger
from argeo_shared.config import settings
from argeo_shared.constants import (
    CABA_PROVINCE_ID,
    COUNTRY_CODE,
    COUNTRY_NAME,
    DATASETS,
    METRO_AREA_CODE,
)
from argeo_shared.db import get_duckdb_connection
from argeo_shared.models.geography import Country, Locality, Subdivision
from argeo_shared.models.sources import DepartmentRecord, LocalityRecord, ProvinceRecord
from argeo_shared.schema import apply_schema, drop_schema

log = get_logger(__name__, pipeline="seed")


@dataclass
class SeedResult:
    """Outcome of a complete seeding run."""

    country: Country
    provinces: LoadResult
    departments: LoadResult
    localities: LoadResult
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def phases(self) -> dict[str, LoadResult]:
        return {
            "provinces": self.provinces,
            "departments": self.departments,
            "localities": self.localities,
        }

    @property
    def total_skipped(self) -> int:
        return sum(r.records_skipped for r in self.phases.values())


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


def seed_country(repos: Repositories) -> Country:
    """Insert Argentina, or return the row if a previous run created it."""
    existing = repos.countries.find_one(code=COUNTRY_CODE)
    if existing is not None:
        log.info("country_exists", code=existing.code, id=existing.id)
        return existing

    saved = repos.countries.save(repos.countries.create(code=COUNTRY_CODE, name=COUNTRY_NAME))
    log.info("country_inserted", code=saved.code, id=saved.id)
    return saved


def seed_provinces(
    repos: Repositories,
    country: Country,
    records: Sequence[ProvinceRecord],
) -> tuple[dict[str, Subdivision], LoadResult]:
    """
    Insert one top-level subdivision per provincias.csv row, in file order.

    Returns:
        ({normalized INDEC province id -> saved Subdivision}, LoadResult)
    """
    t0 = time.monotonic()
    result = LoadResult(table="provinces")
    phase_log = log.bind(phase="provinces")
    phase_log.info("phase_start", rows=len(records))

    province_map: dict[str, Subdivision] = {}
    for record in records:
        province_id = normalize_province_code(record.id)
        is_metro = province_id == CABA_PROVINCE_ID

        subdivision = repos.subdivisions.create(
            country_id=country.id,
            parent_subdivision_id=None,
            code=record.iso_id,
            name=record.nombre,
            type=normalize_subdivision_type(record.categoria),
            is_metropolitan_area=is_metro,
            metropolitan_area_code=METRO_AREA_CODE if is_metro else None,
        )
        province_map[province_id] = repos.subdivisions.save(subdivision)
        result.records_loaded += 1

    result.by_category = count_by(records, lambda r: r.categoria)
    phase_log.info(
        "phase_complete",
        inserted=result.records_loaded,
        by_category=result.by_category,
    )
    return province_map, result.finish(t0)


def seed_departments(
    repos: Repositories,
    country: Country,
    province_map: dict[str, Subdivision],
    metro_codes: set[str],
    records: Sequence[DepartmentRecord],
) -> tuple[dict[str, Subdivision], LoadResult]:
    """
    Insert departments/partidos/comunas under their province.

    Returns:
        ({raw INDEC department id -> saved Subdivision}, LoadResult)
    """
    t0 = time.monotonic()
    result = LoadResult(table="departments")
    phase_log = log.bind(phase="departments")
    phase_log.info("phase_start", rows=len(records), metro_codes=len(metro_codes))

    department_map: dict[str, Subdivision] = {}
    metro_count = 0
    for record in records:
        province_id = normalize_province_code(record.provincia_id or "")
        parent = province_map.get(province_id)
        if parent is None:
            phase_log.warning(
                "department_parent_not_found",
                provincia_id=province_id,
                department=record.nombre,
            )
            result.records_skipped += 1
            continue

        is_metro = record.id in metro_codes
        if is_metro:
            metro_count += 1

        subdivision = repos.subdivisions.create(
            country_id=country.id,
            parent_subdivision_id=parent.id,
            code=build_department_code(parent.code, record.id),
            name=record.nombre,
            type=normalize_subdivision_type(record.categoria),
            is_metropolitan_area=is_metro,
            metropolitan_area_code=METRO_AREA_CODE if is_metro else None,
        )
        department_map[record.id] = repos.subdivisions.save(subdivision)
        result.records_loaded += 1

    result.by_category = count_by(records, lambda r: r.categoria)
    phase_log.info(
        "phase_complete",
        inserted=result.records_loaded,
        skipped=result.records_skipped,
        metropolitan=metro_count,
        by_category=result.by_category,
    )
    return department_map, result.finish(t0)


def seed_localities(
    repos: Repositories,
    department_map: dict[str, Subdivision],
    records: Sequence[LocalityRecord],
    batch_size: int,
) -> LoadResult:
    """
    Insert localities under their department, batch_size rows per write.

    A full batch is written as soon as it fills up; the remainder is written
    after the last row.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    t0 = time.monotonic()
    result = LoadResult(table="localities")
    phase_log = log.bind(phase="localities")
    phase_log.info("phase_start", rows=len(records), batch_size=batch_size)

    batch: list[Locality] = []
    categories: dict[str, int] = {}

    def flush() -> None:
        repos.localities.save(batch)
        result.records_loaded += len(batch)
        result.batches_total += 1
        phase_log.debug(
            "locality_batch_saved",
            batch=result.batches_total,
            inserted=result.records_loaded,
            total=len(records),
        )
        batch.clear()

    for record in records:
        parent = department_map.get(record.departamento_id or "")
        if parent is None:
            result.records_skipped += 1
            continue

        categories[record.categoria] = categories.get(record.categoria, 0) + 1
        batch.append(
            repos.localities.create(
                subdivision_id=parent.id,
                name=record.nombre,
                type=normalize_locality_type(record.categoria),
                census_code=record.id or None,
                latitude=parse_coordinate(record.centroide_lat),
                longitude=parse_coordinate(record.centroide_lon),
            )
        )
        if len(batch) >= batch_size:
            flush()

    if batch:
        flush()

    result.by_category = dict(sorted(categories.items(), key=lambda kv: kv[1], reverse=True))
    if result.records_skipped:
        phase_log.warning("localities_skipped", skipped=result.records_skipped, reason="department not found")
    phase_log.info(
        "phase_complete",
        inserted=result.records_loaded,
        skipped=result.records_skipped,
        batches=result.batches_total,
        by_category=result.by_category,
    )
    return result.finish(t0)


def collect_stats(repos: Repositories) -> dict[str, int]:
    """Row counts of the seeded store."""
    subdivisions = repos.subdivisions.count()
    provinces = repos.subdivisions.count(parent_subdivision_id=None)
    return {
        "countries": repos.countries.count(),
        "subdivisions": subdivisions,
        "provinces": provinces,
        "departments": subdivisions - provinces,
        "localities": repos.localities.count(),
        "metropolitan_subdivisions": repos.subdivisions.count(is_metropolitan_area=True),
    }


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def run(
    *,
    data_dir: str | Path | None = None,
    metro_config_path: str | Path | None = None,
    batch_size: int | None = None,
    reset: bool = False,
    conn: duckdb.DuckDBPyConnection | None = None,
) -> SeedResult:
    """
    Seed country, provinces, departments and localities.

    Args:
        data_dir:          Directory holding the three CSVs (default: settings.data_dir).
        metro_config_path: AMBA side-file (default: <data_dir>/settings.metro_config_file).
        batch_size:        Localities per insert (default: settings.seed_batch_size).
        reset:             Drop and recreate the tables before seeding.
        conn:              DuckDB connection (default: the process singleton).

    Returns:
        SeedResult with per-phase LoadResults and final row counts.

    Raises:
        MissingFileError:  A CSV is absent; nothing has been written.
        StorageWriteError: A save failed; earlier phases remain committed.
    """
    data_path = Path(data_dir) if data_dir is not None else settings.data_path
    metro_path = (
        Path(metro_config_path)
        if metro_config_path is not None
        else data_path / settings.metro_config_file
    )
    size = batch_size if batch_size is not None else settings.seed_batch_size
    if size <= 0:
        raise ValueError(f"batch_size must be positive, got {size}")

    log.info("seed_pipeline_start", data_dir=str(data_path), batch_size=size, reset=reset)

    source = DatosGobArSource(data_path)
    if not verify_data_files(data_path):
        missing = next(
            source.path_for(d) for d in DATASETS if not source.path_for(d).is_file()
        )
        raise MissingFileError(missing)

    metro_codes = load_metro_area_codes(metro_path)
    province_records = await source.load_provinces()
    department_records = await source.load_departments()
    locality_records = await source.load_localities()

    conn = conn if conn is not None else get_duckdb_connection()
    if reset:
        drop_schema(conn)
    apply_schema(conn)
    repos = Repositories.from_connection(conn)

    phase = "country"
    try:
        country = seed_country(repos)

        phase = "provinces"
        province_map, provinces = seed_provinces(repos, country, province_records)

        phase = "departments"
        department_map, departments = seed_departments(
            repos, country, province_map, metro_codes, department_records
        )

        phase = "localities"
        localities = seed_localities(repos, department_map, locality_records, size)
    except Exception as exc:
        log.error("seed_pipeline_failed", phase=phase, error=str(exc))
        raise

    result = SeedResult(
        country=country,
        provinces=provinces,
        departments=departments,
        localities=localities,
        stats=collect_stats(repos),
    )
    log.info("seed_pipeline_complete", skipped=result.total_skipped, **result.stats)
    return result
