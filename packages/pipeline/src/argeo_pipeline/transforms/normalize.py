"""
transforms/normalize.py — Normalization of datos.gob.ar categories and codes.

Maps the raw Spanish category strings and INDEC numeric ids found in the
CSVs to the canonical type tags and ISO-style codes stored in the database.
Every function here is pure and never raises on unexpected input: unknown
categories fall back to a default or pass through lowercased.

Usage:
    from argeo_pipeline.transforms.normalize import (
        build_department_code,
        normalize_locality_type,
        normalize_province_code,
        normalize_subdivision_type,
    )

    normalize_subdivision_type("Ciudad Autónoma")   # "autonomous_city"
    normalize_locality_type("Localidad simple")     # "locality"
    normalize_province_code("6")                    # "06"
    build_department_code("AR-B", "06490")          # "AR-B-490"
"""

from __future__ import annotations

import math

import polars as pl

from argeo_shared.constants import (
    DEFAULT_LOCALITY_TYPE,
    LOCALITY_TYPE_RULES,
    SUBDIVISION_TYPE_MAP,
)

DEPARTMENT_SUFFIX_LENGTH = 3


def normalize_subdivision_type(raw_category: str) -> str:
    """
    Map a provincias/departamentos category to a subdivision type tag.

    Unknown categories are returned lowercased.
    """
    category = raw_category.lower()
    return SUBDIVISION_TYPE_MAP.get(category, category)


def normalize_locality_type(raw_category: str) -> str:
    """
    Map a localidades category to a locality type tag.

    The rules are substring tests applied in order, so "Componente de
    localidad compuesta" is a component and not a locality.
    """
    category = raw_category.lower()
    for needle, locality_type in LOCALITY_TYPE_RULES:
        if needle in category:
            return locality_type
    return DEFAULT_LOCALITY_TYPE


def normalize_province_code(raw: str) -> str:
    """Left-pad an INDEC province id to two digits ("6" -> "06")."""
    return raw.rjust(2, "0")


def build_department_code(province_iso_code: str, raw_dept_id: str) -> str:
    """
    Build the unique code of a department: {province ISO}-{last 3 INDEC digits}.

    Ids shorter than three characters are used whole.
    """
    return f"{province_iso_code}-{raw_dept_id[-DEPARTMENT_SUFFIX_LENGTH:]}"


def parse_coordinate(raw: str | None) -> float | None:
    """Parse a centroid coordinate; empty or non-numeric values give None."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


# ---------------------------------------------------------------------------
# DataFrame helpers
# ---------------------------------------------------------------------------


def clean_string_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Strip whitespace (and a UTF-8 BOM) from column names and String values."""
    df = df.rename({c: c.lstrip("\ufeff").strip() for c in df.columns})
    string_cols = [c for c in df.columns if df[c].dtype == pl.String]
    if not string_cols:
        return df
    return df.with_columns([pl.col(c).str.strip_chars() for c in string_cols])


def drop_all_null_rows(df: pl.DataFrame) -> pl.DataFrame:
    """Remove rows where every column is null or an empty string."""
    if df.is_empty() or df.width == 0:
        return df
    blank = [
        (pl.col(c).is_null() | (pl.col(c).cast(pl.String) == "")) for c in df.columns
    ]
    return df.filter(~pl.all_horizontal(blank))
