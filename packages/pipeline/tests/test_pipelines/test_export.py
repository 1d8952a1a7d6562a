"""
tests/test_pipelines/test_export.py — Tests for the JSON exporter.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from argeo_pipeline.pipelines.export import build_index, build_views, run

BASE_URL = "https://static.example.test/exports"


def _read(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestExportRun:

    @pytest.mark.asyncio
    async def test_writes_all_files(self, conn, seeded_repos, tmp_path):
        out = tmp_path / "exports"
        result = await run(export_dir=out, conn=conn, base_url=BASE_URL)

        names = sorted(p.name for p in result.files)
        assert names == [
            "amba.json",
            "barrios-caba.json",
            "departamentos.json",
            "index.json",
            "localidades.json",
            "provincias.json",
        ]
        assert result.counts == {
            "provincias.json": 3,
            "departamentos.json": 4,
            "localidades.json": 5,
            "amba.json": 3,
            "barrios-caba.json": 1,
        }

    @pytest.mark.asyncio
    async def test_provinces_sorted_with_camel_case_keys(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        provinces = _read(tmp_path / "provincias.json")

        assert [p["code"] for p in provinces] == ["AR-B", "AR-C", "AR-X"]
        caba = provinces[1]
        assert caba == {
            "code": "AR-C",
            "name": "Ciudad Autónoma de Buenos Aires",
            "type": "autonomous_city",
            "isMetropolitanArea": True,
            "metropolitanAreaCode": "AMBA",
        }
        assert "metropolitanAreaCode" not in provinces[0]

    @pytest.mark.asyncio
    async def test_departments_carry_province(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        departments = {d["code"]: d for d in _read(tmp_path / "departamentos.json")}

        lomas = departments["AR-B-490"]
        assert lomas["provinceCode"] == "AR-B"
        assert lomas["provinceName"] == "Buenos Aires"
        assert lomas["type"] == "partido"
        assert lomas["isMetropolitanArea"] is True

    @pytest.mark.asyncio
    async def test_localities_carry_ancestors(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        localities = {loc["name"]: loc for loc in _read(tmp_path / "localidades.json")}

        banfield = localities["BANFIELD"]
        assert banfield["censusCode"] == "06490010000"
        assert banfield["departmentCode"] == "AR-B-490"
        assert banfield["departmentName"] == "Lomas de Zamora"
        assert banfield["provinceCode"] == "AR-B"
        assert banfield["latitude"] == pytest.approx(-34.7473)

        harding = localities["VILLA HARDING GREEN"]
        assert "latitude" not in harding
        assert "longitude" not in harding

    @pytest.mark.asyncio
    async def test_amba_file(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        amba = _read(tmp_path / "amba.json")

        assert amba["count"] == 3
        assert amba["caba"]["code"] == "AR-C"
        assert [p["code"] for p in amba["partidos"]] == ["AR-C-007", "AR-B-490"]

    @pytest.mark.asyncio
    async def test_caba_localities(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        barrios = _read(tmp_path / "barrios-caba.json")
        assert [b["name"] for b in barrios] == ["FLORES"]
        assert barrios[0]["provinceCode"] == "AR-C"

    @pytest.mark.asyncio
    async def test_index(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL + "/")
        index = _read(tmp_path / "index.json")

        assert index["source"] == "https://datos.gob.ar"
        assert index["files"]["provincias"]["count"] == 3
        assert index["files"]["provincias"]["url"] == f"{BASE_URL}/provincias.json"
        assert index["files"]["barriosCaba"]["url"] == f"{BASE_URL}/barrios-caba.json"
        datetime.fromisoformat(index["generated"])

    @pytest.mark.asyncio
    async def test_non_ascii_written_verbatim(self, conn, seeded_repos, tmp_path):
        await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        raw = (tmp_path / "provincias.json").read_text(encoding="utf-8")
        assert "Córdoba" in raw
        assert '\n  {\n    "code"' in raw

    @pytest.mark.asyncio
    async def test_empty_store(self, conn, tmp_path):
        result = await run(export_dir=tmp_path, conn=conn, base_url=BASE_URL)
        assert _read(tmp_path / "provincias.json") == []
        amba = _read(tmp_path / "amba.json")
        assert "caba" not in amba
        assert amba["count"] == 0
        assert result.counts["amba.json"] == 0


class TestBuildViews:

    def test_caba_included_even_when_not_flagged(self, repos):
        country = repos.countries.save(repos.countries.create(code="AR", name="Argentina"))
        repos.subdivisions.save(
            repos.subdivisions.create(
                country_id=country.id,
                code="AR-C",
                name="Ciudad Autónoma de Buenos Aires",
                type="autonomous_city",
                is_metropolitan_area=False,
            )
        )

        views = build_views(repos)

        assert views.caba is not None
        assert views.caba.code == "AR-C"
        assert views.metro_departments == []
        assert views.amba_count == 1

    @pytest.mark.asyncio
    async def test_build_index_counts(self, seeded_repos):
        views = build_views(seeded_repos)
        generated = datetime(2024, 1, 1, tzinfo=timezone.utc)

        index = build_index(views, BASE_URL, generated)

        assert index["generated"] == "2024-01-01T00:00:00+00:00"
        assert index["files"]["amba"]["count"] == 3
        assert index["files"]["localidades"]["count"] == 5
