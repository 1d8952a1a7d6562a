"""
argeo_pipeline.pipelines — End-to-end pipeline orchestrators.

Each pipeline module exports a run() async function.

    from argeo_pipeline.pipelines import seed, export

    result = await seed.run(reset=True)     # CSV -> DuckDB
    files = await export.run()              # DuckDB -> static JSON
"""
