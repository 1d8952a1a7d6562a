"""
schema.py — DDL for the three location tables.

    countries              ISO 3166-1 country rows
    country_subdivisions   ISO 3166-2 provinces and their departments
    localities             census localities, leaf level

Ids come from one sequence per table. `code` columns carry UNIQUE
constraints, so inserting an already-seeded code fails instead of
upserting. The self-reference country_subdivisions.parent_subdivision_id is
kept as a plain nullable id; the subdivision repository validates it on
save.

Usage:
    from argeo_shared.schema import apply_schema, drop_schema

    apply_schema(conn)   # idempotent
    drop_schema(conn)    # full reset before a re-seed
"""

from __future__ import annotations

from typing import Final

import duckdb
import structlog

logger = structlog.get_logger(__name__)

TABLES: Final[tuple[str, ...]] = ("countries", "country_subdivisions", "localities")

_CREATE_STATEMENTS: Final[tuple[str, ...]] = (
    "CREATE SEQUENCE IF NOT EXISTS seq_countries START 1",
    "CREATE SEQUENCE IF NOT EXISTS seq_country_subdivisions START 1",
    "CREATE SEQUENCE IF NOT EXISTS seq_localities START 1",
    """
    CREATE TABLE IF NOT EXISTS countries (
        id          INTEGER PRIMARY KEY DEFAULT nextval('seq_countries'),
        code        VARCHAR(2) NOT NULL UNIQUE,
        name        VARCHAR NOT NULL,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS country_subdivisions (
        id                      INTEGER PRIMARY KEY DEFAULT nextval('seq_country_subdivisions'),
        country_id              INTEGER NOT NULL REFERENCES countries (id),
        parent_subdivision_id   INTEGER,
        code                    VARCHAR NOT NULL UNIQUE,
        name                    VARCHAR NOT NULL,
        type                    VARCHAR NOT NULL,
        is_metropolitan_area    BOOLEAN NOT NULL DEFAULT FALSE,
        metropolitan_area_code  VARCHAR,
        created_at              TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at              TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS localities (
        id              INTEGER PRIMARY KEY DEFAULT nextval('seq_localities'),
        subdivision_id  INTEGER NOT NULL REFERENCES country_subdivisions (id),
        name            VARCHAR NOT NULL,
        type            VARCHAR NOT NULL,
        census_code     VARCHAR,
        latitude        DOUBLE,
        longitude       DOUBLE,
        created_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at      TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
)

# Children first so foreign keys never dangle.
_DROP_STATEMENTS: Final[tuple[str, ...]] = (
    "DROP TABLE IF EXISTS localities",
    "DROP TABLE IF EXISTS country_subdivisions",
    "DROP TABLE IF EXISTS countries",
    "DROP SEQUENCE IF EXISTS seq_localities",
    "DROP SEQUENCE IF EXISTS seq_country_subdivisions",
    "DROP SEQUENCE IF EXISTS seq_countries",
)


def apply_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create sequences and tables that do not exist yet."""
    for statement in _CREATE_STATEMENTS:
        conn.execute(statement)
    logger.info("schema_applied", tables=list(TABLES))


def drop_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Drop all location tables and their sequences."""
    for statement in _DROP_STATEMENTS:
        conn.execute(statement)
    logger.info("schema_dropped", tables=list(TABLES))


def schema_exists(conn: duckdb.DuckDBPyConnection) -> bool:
    """Return True when all three location tables are present."""
    rows = conn.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_name IN (?, ?, ?)",
        list(TABLES),
    ).fetchall()
    return {r[0] for r in rows} == set(TABLES)
