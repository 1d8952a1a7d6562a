"""
constants.py — fixed reference data for the Argentina geography dataset.

Type-normalization tables, the capital-district code and the dataset
catalogue are defined here so the seeder, exporter and tests agree on them.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Country
# ---------------------------------------------------------------------------
COUNTRY_CODE: Final[str] = "AR"
COUNTRY_NAME: Final[str] = "Argentina"

# ---------------------------------------------------------------------------
# Metropolitan area
# ---------------------------------------------------------------------------
# INDEC code of the Ciudad Autónoma de Buenos Aires
CABA_PROVINCE_ID: Final[str] = "02"
CABA_ISO_CODE: Final[str] = "AR-C"
METRO_AREA_CODE: Final[str] = "AMBA"

# ---------------------------------------------------------------------------
# Category normalization
# ---------------------------------------------------------------------------
SUBDIVISION_TYPE_MAP: Final[dict[str, str]] = {
    "provincia": "province",
    "ciudad autónoma": "autonomous_city",
    "partido": "partido",
    "departamento": "department",
    "comuna": "comuna",
}

# Evaluated in order; the first substring found in the category wins.
LOCALITY_TYPE_RULES: Final[tuple[tuple[str, str], ...]] = (
    ("ciudad", "city"),
    ("entidad", "entity"),
    ("componente", "component"),
    ("localidad simple", "locality"),
    ("pueblo", "town"),
    ("barrio", "neighborhood"),
    ("paraje", "village"),
)

DEFAULT_LOCALITY_TYPE: Final[str] = "locality"

# ---------------------------------------------------------------------------
# datos.gob.ar "unidades territoriales" dataset
# ---------------------------------------------------------------------------
Dataset = Literal["provincias", "departamentos", "localidades"]

DATASETS: Final[tuple[Dataset, ...]] = ("provincias", "departamentos", "localidades")

# dataset -> (distribution id, file name, description)
DATASET_FILES: Final[dict[str, tuple[str, str, str]]] = {
    "provincias": ("7.7", "provincias.csv", "24 provincias y CABA con códigos ISO 3166-2"),
    "departamentos": ("7.8", "departamentos.csv", "~530 departamentos, partidos y comunas"),
    "localidades": ("7.10", "localidades.csv", "~4000 localidades con coordenadas y municipios"),
}

DATA_SOURCE_URL: Final[str] = "https://datos.gob.ar"
