"""
argeo_pipeline — Argentina administrative geography loader.

Architecture:
  sources/     — datos.gob.ar CSV reader and downloader
  transforms/  — category / INDEC code normalization
  loaders/     — DuckDB repositories (create / save / find / count)
  pipelines/   — seed (CSV -> store) and export (store -> static JSON)
  queries.py   — example read queries over a seeded store
  utils/       — structlog configuration, exponential-backoff retry decorator

Quick start:
    import asyncio
    from argeo_pipeline.pipelines import seed, export

    result = asyncio.run(seed.run())
    asyncio.run(export.run())

CLI:
    argeo download
    argeo seed --reset
    argeo export --out ./exports
    argeo examples
"""

__version__ = "0.1.0"
