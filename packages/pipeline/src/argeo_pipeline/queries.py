"""
queries.py — Example read queries over a seeded store.

Backs the `argeo examples` command and doubles as a reference for reading
the hierarchy: Country -> Province -> Department -> Locality.

Usage:
    from argeo_pipeline.queries import LocationQueries

    q = LocationQueries.from_connection(conn)
    q.children_of("AR-B", limit=10)         # partidos of Buenos Aires
    q.localities_of("Lomas de Zamora")      # Banfield, Temperley, ...
    q.summary()
"""

from __future__ import annotations

from dataclasses import dataclass

import duckdb

from argeo_pipeline.loaders.repository import Repositories
from argeo_shared.models.geography import Country, Locality, Subdivision


@dataclass
class LocationQueries:
    repos: Repositories

    @classmethod
    def from_connection(cls, conn: duckdb.DuckDBPyConnection) -> LocationQueries:
        return cls(Repositories.from_connection(conn))

    def list_countries(self) -> list[Country]:
        return self.repos.countries.find(order_by="code")

    def list_provinces(self, limit: int | None = None) -> list[Subdivision]:
        return self.repos.subdivisions.find(
            parent_subdivision_id=None, order_by="name", limit=limit
        )

    def list_metro_subdivisions(self, limit: int | None = None) -> list[Subdivision]:
        return self.repos.subdivisions.find(
            is_metropolitan_area=True, order_by="name", limit=limit
        )

    def count_metro_subdivisions(self) -> int:
        return self.repos.subdivisions.count(is_metropolitan_area=True)

    def children_of(
        self, code: str, limit: int | None = None
    ) -> tuple[Subdivision | None, list[Subdivision], int]:
        """
        Departments of the province with ISO code `code`.

        Returns:
            (province or None, first `limit` children by name, total children)
        """
        province = self.repos.subdivisions.find_one(code=code)
        if province is None:
            return None, [], 0
        children = self.repos.subdivisions.find(
            parent_subdivision_id=province.id, order_by="name", limit=limit
        )
        total = self.repos.subdivisions.count(parent_subdivision_id=province.id)
        return province, children, total

    def localities_of(
        self, subdivision_name: str, limit: int | None = None
    ) -> tuple[Subdivision | None, list[Locality]]:
        subdivision = self.repos.subdivisions.find_one(name=subdivision_name)
        if subdivision is None:
            return None, []
        localities = self.repos.localities.find(
            subdivision_id=subdivision.id, order_by="name", limit=limit
        )
        return subdivision, localities

    def search_localities(self, pattern: str, limit: int | None = None) -> list[Locality]:
        """SQL LIKE search on locality names, e.g. "VILLA%"."""
        return self.repos.localities.find(name_like=pattern, order_by="name", limit=limit)

    def subdivisions_by_type(self, subdivision_type: str) -> list[Subdivision]:
        return self.repos.subdivisions.find(type=subdivision_type, order_by="name")

    def summary(self) -> dict[str, int]:
        return {
            "countries": self.repos.countries.count(),
            "subdivisions": self.repos.subdivisions.count(),
            "localities": self.repos.localities.count(),
            "metropolitan_subdivisions": self.count_metro_subdivisions(),
        }
