"""
tests/test_queries.py — Tests for the example read queries.
"""

from __future__ import annotations

import pytest

from argeo_pipeline.pipelines.seed import (
    seed_country,
    seed_departments,
    seed_localities,
    seed_provinces,
)
from argeo_pipeline.queries import LocationQueries
from argeo_shared.models.sources import DepartmentRecord, LocalityRecord, ProvinceRecord


@pytest.fixture
def queries(repos) -> LocationQueries:
    country = seed_country(repos)
    province_map, _ = seed_provinces(repos, country, [
        ProvinceRecord(id="02", categoria="Ciudad Autónoma",
                       nombre="Ciudad Autónoma de Buenos Aires", iso_id="AR-C"),
        ProvinceRecord(id="06", categoria="Provincia", nombre="Buenos Aires", iso_id="AR-B"),
    ])
    department_map, _ = seed_departments(repos, country, province_map, {"06490"}, [
        DepartmentRecord(id="06490", nombre="Lomas de Zamora", provincia_id="06", categoria="Partido"),
        DepartmentRecord(id="06056", nombre="Bahía Blanca", provincia_id="06", categoria="Partido"),
        DepartmentRecord(id="02007", nombre="Comuna 7", provincia_id="02", categoria="Comuna"),
    ])
    seed_localities(repos, department_map, [
        LocalityRecord(id="1", nombre="TEMPERLEY", departamento_id="06490",
                       categoria="Componente de localidad compuesta"),
        LocalityRecord(id="2", nombre="BANFIELD", departamento_id="06490",
                       categoria="Componente de localidad compuesta"),
        LocalityRecord(id="3", nombre="VILLA BORDEU", departamento_id="06056",
                       categoria="Localidad simple"),
    ], batch_size=500)
    return LocationQueries(repos)


class TestLocationQueries:

    def test_list_countries(self, queries):
        assert [c.code for c in queries.list_countries()] == ["AR"]

    def test_list_provinces_sorted(self, queries):
        assert [p.code for p in queries.list_provinces()] == ["AR-B", "AR-C"]
        assert len(queries.list_provinces(limit=1)) == 1

    def test_metro_subdivisions(self, queries):
        assert [s.code for s in queries.list_metro_subdivisions()] == ["AR-C", "AR-B-490"]
        assert queries.count_metro_subdivisions() == 2

    def test_children_of(self, queries):
        province, children, total = queries.children_of("AR-B", limit=1)
        assert province.name == "Buenos Aires"
        assert [c.name for c in children] == ["Bahía Blanca"]
        assert total == 2

    def test_children_of_unknown_code(self, queries):
        assert queries.children_of("AR-Z") == (None, [], 0)

    def test_localities_of(self, queries):
        partido, localities = queries.localities_of("Lomas de Zamora")
        assert partido.code == "AR-B-490"
        assert [loc.name for loc in localities] == ["BANFIELD", "TEMPERLEY"]

    def test_localities_of_unknown_name(self, queries):
        assert queries.localities_of("Atlantis") == (None, [])

    def test_search_localities(self, queries):
        assert [loc.name for loc in queries.search_localities("VILLA%")] == ["VILLA BORDEU"]

    def test_subdivisions_by_type(self, queries):
        assert [s.code for s in queries.subdivisions_by_type("comuna")] == ["AR-C-007"]

    def test_summary(self, queries):
        assert queries.summary() == {
            "countries": 1,
            "subdivisions": 5,
            "localities": 3,
            "metropolitan_subdivisions": 2,
        }
