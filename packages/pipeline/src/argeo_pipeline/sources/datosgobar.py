"""
sources/datosgobar.py — datos.gob.ar "unidades territoriales" CSV source.

Three CSVs describe Argentina's administrative geography:
  provincias.csv      24 provinces + CABA, with ISO 3166-2 codes
  departamentos.csv   departments, partidos (Buenos Aires) and comunas (CABA)
  localidades.csv     census localities with centroid coordinates

They are read from a local data directory. `download()` / `download_all()`
refresh that directory from the open-data portal. A JSON side-file
(amba-partidos.json) lists the partidos and comunas that belong to the
Buenos Aires metropolitan area; it is optional.

Usage:
    source = DatosGobArSource("./data")

    if verify_data_files("./data"):
        provinces = await source.load_provinces()      # list[ProvinceRecord]
        departments = await source.load_departments()  # list[DepartmentRecord]

    metro_codes = load_metro_area_codes("./data/amba-partidos.json")

    await source.download_all()                        # {dataset: ok}
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

import httpx
import polars as pl
import structlog
from pydantic import BaseModel

from argeo_pipeline.errors import MissingFileError
from argeo_pipeline.sources.base import BaseSource
from argeo_pipeline.transforms.normalize import clean_string_columns, drop_all_null_rows
from argeo_pipeline.utils.retry import with_retry
from argeo_shared.config import settings
from argeo_shared.constants import DATA_SOURCE_URL, DATASET_FILES, DATASETS, Dataset
from argeo_shared.models.sources import (
    DepartmentRecord,
    LocalityRecord,
    MetroAreaConfig,
    ProvinceRecord,
)

log = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)
T = TypeVar("T")


def _size_kb(path: Path) -> float:
    return round(path.stat().st_size / 1024, 1)


class DatosGobArSource(BaseSource):
    """Reads (and downloads) the datos.gob.ar territorial-units CSVs."""

    name = "datos.gob.ar"

    def __init__(
        self,
        data_dir: str | Path | None = None,
        *,
        timeout: float | None = None,
        base_url: str | None = None,
    ) -> None:
        super().__init__()
        self.data_dir = Path(data_dir) if data_dir is not None else settings.data_path
        self._timeout = timeout if timeout is not None else settings.download_timeout
        self._base_url = (base_url or settings.datos_gob_ar_base_url).rstrip("/")

    # ------------------------------------------------------------------
    # Paths and URLs
    # ------------------------------------------------------------------

    def path_for(self, dataset: Dataset) -> Path:
        _, file_name, _ = DATASET_FILES[dataset]
        return self.data_dir / file_name

    def url_for(self, dataset: Dataset) -> str:
        distribution, file_name, _ = DATASET_FILES[dataset]
        return f"{self._base_url}/{distribution}/download/{file_name}"

    # ------------------------------------------------------------------
    # BaseSource interface
    # ------------------------------------------------------------------

    async def extract(self, dataset: Dataset) -> pl.DataFrame:  # type: ignore[override]
        """
        Read one CSV with the header row as column names, all values as strings.

        Raises:
            MissingFileError: the CSV is not in data_dir.
        """
        path = self.path_for(dataset)
        if not path.is_file():
            raise MissingFileError(path)
        return pl.read_csv(path, infer_schema_length=0)

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        df = clean_string_columns(raw)
        return drop_all_null_rows(df)

    async def get_metadata(self) -> dict[str, Any]:
        files: dict[str, float | None] = {}
        for dataset in DATASETS:
            path = self.path_for(dataset)
            files[dataset] = _size_kb(path) if path.is_file() else None
        return {
            "source_name": self.name,
            "source_url": DATA_SOURCE_URL,
            "data_dir": str(self.data_dir),
            "files_kb": files,
        }

    # ------------------------------------------------------------------
    # Typed loaders
    # ------------------------------------------------------------------

    async def _load(self, dataset: Dataset, model: type[RecordT]) -> list[RecordT]:
        df = await self.run(dataset=dataset)
        return [model.model_validate(row) for row in df.iter_rows(named=True)]

    async def load_provinces(self) -> list[ProvinceRecord]:
        return await self._load("provincias", ProvinceRecord)

    async def load_departments(self) -> list[DepartmentRecord]:
        return await self._load("departamentos", DepartmentRecord)

    async def load_localities(self) -> list[LocalityRecord]:
        return await self._load("localidades", LocalityRecord)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    @with_retry(max_attempts=3, base_delay=1.0, retry_on=(httpx.TransportError,))
    async def _download_url(self, url: str) -> bytes:
        """Download raw bytes, following the portal's redirects."""
        self._log.debug("resource_download", url=url)
        async with httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.content

    async def download(self, dataset: Dataset) -> Path:
        """
        Fetch one CSV into data_dir, replacing any existing copy.

        The body is written to a .part file first so a failed transfer never
        leaves a truncated CSV behind.
        """
        dest = self.path_for(dataset)
        dl_log = self._log.bind(dataset=dataset, path=str(dest))
        if dest.is_file():
            dl_log.info("existing_file_replaced", size_kb=_size_kb(dest))

        content = await self._download_url(self.url_for(dataset))

        self.data_dir.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_name(dest.name + ".part")
        tmp.write_bytes(content)
        tmp.replace(dest)
        dl_log.info("dataset_downloaded", size_kb=_size_kb(dest))
        return dest

    async def download_all(self) -> dict[str, bool]:
        """
        Download every dataset. A failure is logged and the next dataset is
        still attempted.

        Returns:
            {dataset: True if saved}
        """
        results: dict[str, bool] = {}
        for dataset in DATASETS:
            try:
                await self.download(dataset)
                results[dataset] = True
            except (httpx.HTTPError, OSError) as exc:
                self._log.error("dataset_download_failed", dataset=dataset, error=str(exc))
                results[dataset] = False
        return results


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def verify_data_files(data_dir: str | Path | None = None) -> bool:
    """
    Check that the three CSVs exist before seeding, logging each file size.

    Returns:
        False as soon as a file is missing; the caller must not seed.
    """
    source = DatosGobArSource(data_dir)
    for dataset in DATASETS:
        path = source.path_for(dataset)
        if not path.is_file():
            log.error("data_file_missing", dataset=dataset, path=str(path), hint="run: argeo download")
            return False
        log.info("data_file_found", dataset=dataset, size_kb=_size_kb(path))
    return True


def load_metro_area_codes(path: str | Path | None = None) -> set[str]:
    """
    Read the INDEC ids of AMBA partidos and CABA comunas.

    An absent side-file is not an error: nothing gets flagged as
    metropolitan and a warning is logged.
    """
    config_path = Path(path) if path is not None else settings.metro_config_path
    if not config_path.is_file():
        log.warning("metro_config_missing", path=str(config_path))
        return set()

    config = MetroAreaConfig.model_validate(
        json.loads(config_path.read_text(encoding="utf-8"))
    )
    log.info(
        "metro_config_loaded",
        partidos=len(config.partidos),
        comunas=len(config.comunas_caba),
    )
    return config.codes


def count_by(items: Iterable[T], key_fn: Callable[[T], str]) -> dict[str, int]:
    """Histogram of items by key, in first-seen order."""
    counts: dict[str, int] = {}
    for item in items:
        key = key_fn(item)
        counts[key] = counts.get(key, 0) + 1
    return counts
