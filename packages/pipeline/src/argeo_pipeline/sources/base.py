"""
sources/base.py — Contract for tabular input sources.

A source turns one named dataset into a cleaned polars DataFrame:

  extract(dataset)   read the raw table, every value as a string
  transform(raw)     clean it without adding, dropping or renaming columns
  get_metadata()     describe the source for logs and the CLI

Callers use run(), which chains the two steps and logs row counts and
timings under the source's name.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

import polars as pl
import structlog

log = structlog.get_logger(__name__)


class BaseSource(ABC):
    """A named producer of cleaned DataFrames."""

    name: str = "unknown"

    def __init__(self) -> None:
        self._log = log.bind(source_name=self.name)

    @abstractmethod
    async def extract(self, dataset: str) -> pl.DataFrame:
        """Read `dataset` as-is."""

    @abstractmethod
    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """Clean values of a raw frame; column set and row order are preserved."""

    @abstractmethod
    async def get_metadata(self) -> dict[str, Any]:
        ...

    async def run(self, dataset: str) -> pl.DataFrame:
        """
        Extract and transform one dataset.

        Raises:
            Whatever extract() or transform() raised, after logging it.
        """
        run_log = self._log.bind(dataset=dataset)
        t0 = time.perf_counter()
        try:
            raw = await self.extract(dataset)
            cleaned = self.transform(raw)
        except Exception as exc:
            run_log.error("dataset_read_failed", error=str(exc))
            raise

        run_log.info(
            "dataset_read",
            rows=len(cleaned),
            dropped=len(raw) - len(cleaned),
            columns=cleaned.width,
            duration_ms=int((time.perf_counter() - t0) * 1000),
        )
        return cleaned
