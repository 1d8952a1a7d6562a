"""
cli.py — Click CLI entrypoint.

Usage:
    argeo download                 fetch the datos.gob.ar CSVs into data/
    argeo verify                   check the CSVs are in place
    argeo seed [--reset]           load CSVs into DuckDB
    argeo export [--out DIR]       write static JSON files
    argeo examples                 run example queries
    argeo stats                    row counts of the store
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from argeo_pipeline.errors import ArgeoError
from argeo_pipeline.utils.logging import configure_logging
from argeo_shared.config import settings
from argeo_shared.constants import CABA_ISO_CODE
from argeo_shared.db import get_duckdb_connection
from argeo_shared.schema import schema_exists

_RULE = "━" * 50


def _connection(ctx: click.Context):
    return get_duckdb_connection(ctx.obj.get("db"))


def _seeded_connection(ctx: click.Context):
    """Connection to a store that has been seeded at least once."""
    conn = _connection(ctx)
    if not schema_exists(conn):
        raise click.ClickException("Store is empty. Run: argeo seed")
    return conn


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--log-format",
    default=settings.log_format,
    type=click.Choice(["console", "json"]),
    help="Log renderer",
)
@click.option(
    "--db",
    default=None,
    metavar="PATH",
    help="DuckDB file (default: DUCKDB_PATH setting)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str, log_format: str, db: str | None) -> None:
    """Argentina ISO 3166-2 location data loader."""
    configure_logging(log_level, log_format)
    ctx.ensure_object(dict)
    ctx.obj["db"] = db


@main.command()
@click.option("--data-dir", type=click.Path(path_type=Path), default=None)
def download(data_dir: Path | None) -> None:
    """Download the official CSVs from datos.gob.ar."""
    from argeo_pipeline.sources.datosgobar import DatosGobArSource

    source = DatosGobArSource(data_dir)
    click.echo(f"Downloading into {source.data_dir}")
    results = asyncio.run(source.download_all())
    for dataset, ok in results.items():
        click.echo(f"  {'✓' if ok else '✗'} {dataset}")
    if not all(results.values()):
        raise click.ClickException("Some datasets could not be downloaded")


@main.command()
@click.option("--data-dir", type=click.Path(path_type=Path), default=None)
def verify(data_dir: Path | None) -> None:
    """Check that the three CSVs are present."""
    from argeo_pipeline.sources.datosgobar import verify_data_files

    if not verify_data_files(data_dir):
        raise click.ClickException("Missing data files. Run: argeo download")
    click.echo("All data files present.")


@main.command()
@click.option("--data-dir", type=click.Path(path_type=Path), default=None)
@click.option("--metro-config", type=click.Path(path_type=Path), default=None,
              help="AMBA partidos JSON (default: <data-dir>/amba-partidos.json)")
@click.option("--batch-size", type=click.IntRange(min=1), default=None,
              help="Localities per insert (default: SEED_BATCH_SIZE setting)")
@click.option("--reset", is_flag=True, help="Drop and recreate the tables first")
@click.pass_context
def seed(
    ctx: click.Context,
    data_dir: Path | None,
    metro_config: Path | None,
    batch_size: int | None,
    reset: bool,
) -> None:
    """Seed country, provinces, departments and localities."""
    from argeo_pipeline.pipelines.seed import run

    try:
        result = asyncio.run(
            run(
                data_dir=data_dir,
                metro_config_path=metro_config,
                batch_size=batch_size,
                reset=reset,
                conn=_connection(ctx),
            )
        )
    except ArgeoError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(_RULE)
    click.echo("Seed complete")
    click.echo(_RULE)
    for name, phase in result.phases.items():
        click.echo(
            f"  {name:12s} {phase.records_loaded:6d} inserted  "
            f"{phase.records_skipped:5d} skipped  ({phase.duration_ms} ms)"
        )
        for category, count in phase.by_category.items():
            click.echo(f"      - {category}: {count}")
    _echo_stats(result.stats)


@main.command()
@click.option("--out", "export_dir", type=click.Path(path_type=Path), default=None,
              help="Output directory (default: EXPORT_DIR setting)")
@click.pass_context
def export(ctx: click.Context, export_dir: Path | None) -> None:
    """Export the seeded data to static JSON files."""
    from argeo_pipeline.pipelines.export import run

    result = asyncio.run(run(export_dir=export_dir, conn=_seeded_connection(ctx)))
    click.echo(f"Files written to {result.export_dir}:")
    for file_name, count in result.counts.items():
        click.echo(f"  • {file_name} ({count})")
    click.echo("  • index.json")


@main.command()
@click.pass_context
def examples(ctx: click.Context) -> None:
    """Run example queries against the seeded store."""
    from argeo_pipeline.queries import LocationQueries

    q = LocationQueries.from_connection(_seeded_connection(ctx))

    click.echo(f"{_RULE}\nCountries\n{_RULE}")
    for c in q.list_countries():
        click.echo(f"   {c.code}: {c.name}")

    click.echo(f"\n{_RULE}\nProvinces (first 10)\n{_RULE}")
    for p in q.list_provinces(limit=10):
        click.echo(f"   {p.code}: {p.name} ({p.type})")

    click.echo(f"\n{_RULE}\nAMBA subdivisions\n{_RULE}")
    click.echo(f"   {q.count_metro_subdivisions()} flagged as metropolitan, first 10:")
    for s in q.list_metro_subdivisions(limit=10):
        click.echo(f"   • {s.name} ({s.type})")

    click.echo(f"\n{_RULE}\nPartidos of Buenos Aires\n{_RULE}")
    province, partidos, total = q.children_of("AR-B", limit=10)
    if province is None:
        click.echo("   No data found. Run 'argeo seed' first.")
    else:
        click.echo(f"   {province.name} ({province.code}), showing {len(partidos)} of {total}:")
        for p in partidos:
            click.echo(f"   • {p.name}{' [AMBA]' if p.is_metropolitan_area else ''}")

    click.echo(f"\n{_RULE}\nLocalities in Lomas de Zamora\n{_RULE}")
    partido, localities = q.localities_of("Lomas de Zamora", limit=10)
    if partido is None:
        click.echo("   No data found. Run 'argeo seed' first.")
    else:
        click.echo(f"   {partido.name} (AMBA: {partido.is_metropolitan_area})")
        for loc in localities:
            click.echo(f"   • {loc.name} ({loc.type})")

    click.echo(f"\n{_RULE}\nLocalities named VILLA*\n{_RULE}")
    for loc in q.search_localities("VILLA%", limit=10):
        click.echo(f"   • {loc.name}")

    caba, comunas, _ = q.children_of(CABA_ISO_CODE)
    if caba is not None:
        click.echo(f"\n{_RULE}\n{caba.name}\n{_RULE}")
        click.echo(f"   {len(comunas)} comunas")

    _echo_stats(q.summary())


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show row counts of the store."""
    from argeo_pipeline.pipelines.seed import collect_stats
    from argeo_pipeline.loaders.repository import Repositories

    _echo_stats(collect_stats(Repositories.from_connection(_seeded_connection(ctx))))


def _echo_stats(counts: dict[str, int]) -> None:
    click.echo(f"\n{_RULE}\nDatabase summary\n{_RULE}")
    for name, count in counts.items():
        click.echo(f"   {name.replace('_', ' '):28s} {count}")


if __name__ == "__main__":
    main()
