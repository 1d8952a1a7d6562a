"""
tests/test_cli.py — Smoke tests for the argeo CLI.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from argeo_pipeline.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "store" / "argeo.duckdb")


class TestVerify:

    def test_all_present(self, runner, data_dir):
        result = runner.invoke(main, ["verify", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "All data files present." in result.output

    def test_missing_file(self, runner, data_dir):
        (data_dir / "provincias.csv").unlink()
        result = runner.invoke(main, ["verify", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "argeo download" in result.output


class TestDownload:

    def test_reports_each_dataset(self, runner, tmp_path):
        outcome = {"provincias": True, "departamentos": True, "localidades": True}
        with patch(
            "argeo_pipeline.sources.datosgobar.DatosGobArSource.download_all",
            new_callable=AsyncMock,
            return_value=outcome,
        ):
            result = runner.invoke(main, ["download", "--data-dir", str(tmp_path)])
        assert result.exit_code == 0
        assert "✓ localidades" in result.output

    def test_failure_exit_code(self, runner, tmp_path):
        outcome = {"provincias": True, "departamentos": False, "localidades": True}
        with patch(
            "argeo_pipeline.sources.datosgobar.DatosGobArSource.download_all",
            new_callable=AsyncMock,
            return_value=outcome,
        ):
            result = runner.invoke(main, ["download", "--data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "✗ departamentos" in result.output


class TestSeedAndExport:

    def test_seed_then_stats_and_export(self, runner, data_dir, db_path, tmp_path):
        seeded = runner.invoke(
            main, ["--db", db_path, "seed", "--data-dir", str(data_dir), "--batch-size", "2"]
        )
        assert seeded.exit_code == 0, seeded.output
        assert "Seed complete" in seeded.output
        assert "localities" in seeded.output

        stats = runner.invoke(main, ["--db", db_path, "stats"])
        assert stats.exit_code == 0
        assert "Database summary" in stats.output

        out = tmp_path / "exports"
        exported = runner.invoke(main, ["--db", db_path, "export", "--out", str(out)])
        assert exported.exit_code == 0, exported.output
        assert json.loads((out / "amba.json").read_text(encoding="utf-8"))["count"] == 3

        examples = runner.invoke(main, ["--db", db_path, "examples"])
        assert examples.exit_code == 0, examples.output
        assert "Lomas de Zamora" in examples.output
        assert "BANFIELD" in examples.output

    def test_reseed_without_reset_fails(self, runner, data_dir, db_path):
        args = ["--db", db_path, "seed", "--data-dir", str(data_dir)]
        assert runner.invoke(main, args).exit_code == 0

        again = runner.invoke(main, args)
        assert again.exit_code == 1
        assert "failed" in again.output

        reset = runner.invoke(main, [*args, "--reset"])
        assert reset.exit_code == 0, reset.output

    def test_seed_missing_file(self, runner, data_dir, db_path):
        (data_dir / "localidades.csv").unlink()
        result = runner.invoke(main, ["--db", db_path, "seed", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "Required data file not found" in result.output

    def test_invalid_batch_size(self, runner, data_dir, db_path):
        result = runner.invoke(
            main, ["--db", db_path, "seed", "--data-dir", str(data_dir), "--batch-size", "0"]
        )
        assert result.exit_code == 2

    def test_stats_on_empty_store(self, runner, db_path):
        result = runner.invoke(main, ["--db", db_path, "stats"])
        assert result.exit_code == 1
        assert "argeo seed" in result.output

    @pytest.mark.parametrize("command", [["export"], ["examples"]])
    def test_read_commands_on_empty_store(self, runner, db_path, tmp_path, command):
        args = [*command, "--out", str(tmp_path / "exports")] if command == ["export"] else command
        result = runner.invoke(main, ["--db", db_path, *args])
        assert result.exit_code == 1
        assert "argeo seed" in result.output
        assert not (tmp_path / "exports").exists()
