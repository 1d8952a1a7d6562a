"""
db.py — DuckDB connection singleton.

Usage:
    from argeo_shared.db import get_duckdb_connection

    duck = get_duckdb_connection()                  # settings.duckdb_path
    duck = get_duckdb_connection(":memory:")        # throwaway store (tests)
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import duckdb
import structlog

from argeo_shared.config import settings

logger = structlog.get_logger(__name__)

MEMORY_PATH = ":memory:"

# ---------------------------------------------------------------------------
# DuckDB — single connection per process
# ---------------------------------------------------------------------------
_duckdb_lock = threading.Lock()
_duckdb_conn: Optional[duckdb.DuckDBPyConnection] = None


def connect(path: str) -> duckdb.DuckDBPyConnection:
    """
    Open a new DuckDB connection, creating parent directories for file paths.

    Args:
        path: Database file path or ":memory:".

    Returns:
        duckdb.DuckDBPyConnection
    """
    if path != MEMORY_PATH:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(path)
    logger.info("duckdb_connected", path=path)
    return conn


def get_duckdb_connection(path: str | None = None) -> duckdb.DuckDBPyConnection:
    """
    Return the process-wide DuckDB connection to the location store.

    The file path is read from settings.duckdb_path unless overridden on the
    first call. Later calls return the same connection.

    Returns:
        duckdb.DuckDBPyConnection
    """
    global _duckdb_conn

    with _duckdb_lock:
        if _duckdb_conn is None:
            _duckdb_conn = connect(path or settings.duckdb_path)
        return _duckdb_conn


def reset_duckdb_connection() -> None:
    """Close and forget the DuckDB singleton (useful in tests)."""
    global _duckdb_conn
    with _duckdb_lock:
        if _duckdb_conn is not None:
            _duckdb_conn.close()
            _duckdb_conn = None
            logger.info("duckdb_closed")
