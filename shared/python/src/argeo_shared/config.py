"""
config.py — pydantic-settings Settings class.

All environment variables for argeo are declared here. The pipeline,
exporter and CLI import `settings` from this module.

Usage:
    from argeo_shared.config import settings
    print(settings.duckdb_path)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # DuckDB
    # -------------------------------------------------------------------------
    duckdb_path: str = Field(default="./data/argeo.duckdb")

    # -------------------------------------------------------------------------
    # Input data
    # -------------------------------------------------------------------------
    data_dir: str = Field(default="./data")
    metro_config_file: str = Field(default="amba-partidos.json")
    datos_gob_ar_base_url: str = Field(
        default="https://infra.datos.gob.ar/catalog/modernizacion/dataset/7/distribution"
    )
    download_timeout: float = Field(default=60.0)

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------
    seed_batch_size: int = Field(default=500, gt=0)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------
    export_dir: str = Field(default="./exports")
    export_base_url: str = Field(
        default="https://raw.githubusercontent.com/MacroxW/iso3166-countries-argentina/main/exports"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def metro_config_path(self) -> Path:
        return self.data_path / self.metro_config_file

    @field_validator("datos_gob_ar_base_url", "export_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
