"""
loaders/repository.py — DuckDB repositories for the three location tables.

Every write in the pipeline goes through a repository. The capability set
is small:

  create(**fields)     build an unsaved model (no I/O)
  save(model)          insert one row, return it with its id
  save([models])       insert a batch as one executemany in one transaction
  find(**filters)      equality filters (None means IS NULL), optional
                       order_by / limit / name_like
  find_one(**filters)  first match or None
  count(**filters)     number of matching rows

Rows are only ever inserted. Constraint violations are raised as
UniqueViolationError / StorageWriteError; nothing is retried or upserted.

Usage:
    from argeo_pipeline.loaders.repository import Repositories

    repos = Repositories.from_connection(conn)
    country = repos.countries.save(repos.countries.create(code="AR", name="Argentina"))
    provinces = repos.subdivisions.find(parent_subdivision_id=None, order_by="name")
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar, overload

import duckdb
import structlog

from argeo_pipeline.errors import StorageWriteError, UniqueViolationError
from argeo_shared.models.geography import Country, Locality, Subdivision

log = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", Country, Subdivision, Locality)


@dataclass
class LoadResult:
    """Summary of one seeding phase."""

    table: str
    records_loaded: int = 0
    records_skipped: int = 0
    batches_total: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def status(self) -> str:
        if self.records_skipped == 0:
            return "success"
        if self.records_loaded > 0:
            return "partial_skip"
        return "all_skipped"

    def finish(self, t0: float) -> LoadResult:
        self.duration_ms = int((time.monotonic() - t0) * 1000)
        return self


def _wrap_error(table: str, exc: duckdb.Error) -> StorageWriteError:
    message = str(exc)
    if "duplicate key" in message.lower():
        return UniqueViolationError(table, message)
    return StorageWriteError(table, message)


class Repository(Generic[ModelT]):
    """Generic insert/read access to one table."""

    table: ClassVar[str]
    sequence: ClassVar[str]
    model: type[ModelT]
    columns: ClassVar[tuple[str, ...]]

    _ORDERABLE: ClassVar[frozenset[str]] = frozenset({"id", "name", "code"})

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn
        self._log = log.bind(table=self.table)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, **fields: Any) -> ModelT:
        return self.model(**fields)

    @overload
    def save(self, entities: ModelT) -> ModelT: ...

    @overload
    def save(self, entities: Sequence[ModelT]) -> list[ModelT]: ...

    def save(self, entities: ModelT | Sequence[ModelT]) -> ModelT | list[ModelT]:
        if isinstance(entities, self.model):
            return self._insert([entities])[0]
        return self._insert(list(entities))  # type: ignore[arg-type]

    def _validate(self, entities: list[ModelT]) -> None:
        """Hook for checks the schema cannot express."""

    def _insert(self, entities: list[ModelT]) -> list[ModelT]:
        if not entities:
            return []
        for entity in entities:
            if entity.is_persisted:
                raise StorageWriteError(
                    self.table, f"row {entity.id} is already persisted; rows are insert-only"
                )
        self._validate(entities)

        placeholders = ", ".join("?" for _ in range(len(self.columns) + 1))
        sql = f"INSERT INTO {self.table} (id, {', '.join(self.columns)}) VALUES ({placeholders})"

        try:
            ids = [
                r[0]
                for r in self._conn.execute(
                    f"SELECT nextval('{self.sequence}') AS id FROM range({len(entities)}) ORDER BY id"
                ).fetchall()
            ]
            rows = []
            for id_, entity in zip(ids, entities):
                values = entity.to_insert_dict()
                rows.append([id_, *(values[c] for c in self.columns)])

            self._conn.begin()
            try:
                self._conn.executemany(sql, rows)
                self._conn.commit()
            except duckdb.Error:
                self._conn.rollback()
                raise
        except duckdb.Error as exc:
            self._log.error("save_failed", rows=len(entities), error=str(exc))
            raise _wrap_error(self.table, exc) from exc

        self._log.debug("rows_saved", rows=len(entities))
        return [e.model_copy(update={"id": id_}) for id_, e in zip(ids, entities)]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _where(
        self, filters: dict[str, Any], name_like: str | None
    ) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in filters.items():
            if column != "id" and column not in self.columns:
                raise ValueError(f"Unknown column for {self.table}: {column}")
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(value)
        if name_like is not None:
            clauses.append("name LIKE ?")
            params.append(name_like)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def find(
        self,
        *,
        order_by: str | None = None,
        limit: int | None = None,
        name_like: str | None = None,
        **filters: Any,
    ) -> list[ModelT]:
        """
        Return matching rows. order_by accepts id, name or code; prefix with
        "-" for descending.
        """
        where, params = self._where(filters, name_like)
        sql = f"SELECT * FROM {self.table}{where}"
        if order_by:
            column = order_by.lstrip("-")
            if column not in self._ORDERABLE:
                raise ValueError(f"Cannot order {self.table} by {column}")
            sql += f" ORDER BY {column} {'DESC' if order_by.startswith('-') else 'ASC'}, id"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        cursor = self._conn.execute(sql, params)
        names = [d[0] for d in cursor.description]
        return [self.model.from_db_row(dict(zip(names, row))) for row in cursor.fetchall()]

    def find_one(self, **filters: Any) -> ModelT | None:
        rows = self.find(limit=1, order_by="id", **filters)
        return rows[0] if rows else None

    def count(self, *, name_like: str | None = None, **filters: Any) -> int:
        where, params = self._where(filters, name_like)
        row = self._conn.execute(f"SELECT count(*) FROM {self.table}{where}", params).fetchone()
        return int(row[0]) if row else 0


class CountryRepository(Repository[Country]):
    table = "countries"
    sequence = "seq_countries"
    model = Country
    columns = ("code", "name")


class SubdivisionRepository(Repository[Subdivision]):
    table = "country_subdivisions"
    sequence = "seq_country_subdivisions"
    model = Subdivision
    columns = (
        "country_id",
        "parent_subdivision_id",
        "code",
        "name",
        "type",
        "is_metropolitan_area",
        "metropolitan_area_code",
    )

    def _validate(self, entities: list[Subdivision]) -> None:
        """Parents must already be stored and belong to the same country."""
        parent_ids = sorted(
            {e.parent_subdivision_id for e in entities if e.parent_subdivision_id is not None}
        )
        if not parent_ids:
            return
        placeholders = ", ".join("?" for _ in parent_ids)
        rows = self._conn.execute(
            f"SELECT id, country_id FROM {self.table} WHERE id IN ({placeholders})",
            parent_ids,
        ).fetchall()
        parent_country = {r[0]: r[1] for r in rows}
        for entity in entities:
            parent_id = entity.parent_subdivision_id
            if parent_id is None:
                continue
            if parent_id not in parent_country:
                raise StorageWriteError(
                    self.table, f"{entity.code}: parent subdivision {parent_id} does not exist"
                )
            if parent_country[parent_id] != entity.country_id:
                raise StorageWriteError(
                    self.table,
                    f"{entity.code}: country {entity.country_id} differs from parent's "
                    f"country {parent_country[parent_id]}",
                )


class LocalityRepository(Repository[Locality]):
    table = "localities"
    sequence = "seq_localities"
    model = Locality
    columns = (
        "subdivision_id",
        "name",
        "type",
        "census_code",
        "latitude",
        "longitude",
    )


@dataclass
class Repositories:
    """The three repositories sharing one connection."""

    countries: CountryRepository
    subdivisions: SubdivisionRepository
    localities: LocalityRepository

    @classmethod
    def from_connection(cls, conn: duckdb.DuckDBPyConnection) -> Repositories:
        return cls(
            countries=CountryRepository(conn),
            subdivisions=SubdivisionRepository(conn),
            localities=LocalityRepository(conn),
        )
