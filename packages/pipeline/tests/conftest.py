"""
tests/conftest.py — Shared pytest fixtures for the pipeline test suite.

Provides:
  fixture_path()   — resolves paths to tests/fixtures/
  conn             — in-memory DuckDB connection with the schema applied
  repos            — Repositories bound to that connection
  data_dir         — temp copy of the fixture CSVs and amba-partidos.json
  seeded_repos     — repos after a full seed of the fixture data
  mock_http        — configured respx router for faking HTTP responses
"""

from __future__ import annotations

import shutil
from pathlib import Path

import duckdb
import pytest
import pytest_asyncio
import respx

from argeo_pipeline.loaders.repository import Repositories
from argeo_shared.db import MEMORY_PATH, reset_duckdb_connection
from argeo_shared.schema import apply_schema

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FIXTURE_FILES = (
    "provincias.csv",
    "departamentos.csv",
    "localidades.csv",
    "amba-partidos.json",
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A writable data directory holding every fixture input file."""
    target = tmp_path / "data"
    target.mkdir()
    for name in FIXTURE_FILES:
        shutil.copy(FIXTURES_DIR / name, target / name)
    return target


# ---------------------------------------------------------------------------
# DuckDB
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_duckdb_singleton():
    """Never let one test's process-wide connection leak into the next."""
    reset_duckdb_connection()
    yield
    reset_duckdb_connection()


@pytest.fixture
def conn():
    connection = duckdb.connect(MEMORY_PATH)
    apply_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def repos(conn: duckdb.DuckDBPyConnection) -> Repositories:
    return Repositories.from_connection(conn)


@pytest_asyncio.fixture
async def seeded_repos(conn: duckdb.DuckDBPyConnection, data_dir: Path) -> Repositories:
    """Repositories over a store seeded from the fixture files."""
    from argeo_pipeline.pipelines.seed import run

    await run(data_dir=data_dir, conn=conn)
    return Repositories.from_connection(conn)


# ---------------------------------------------------------------------------
# respx HTTP mock router
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http():
    """
    Activate the respx mock router for all httpx requests.

    Usage in tests:
        def test_something(mock_http):
            mock_http.get("https://...").mock(return_value=httpx.Response(200, content=b"..."))
    """
    with respx.mock(assert_all_called=False) as router:
        yield router
