"""Entities and a generic CRUD repository over SQLite."""

from __future__ import annotations

import abc
from typing import Any, Generic, Mapping, Self, TypeVar

import aiosqlite

from pilipili.database.bindable import bind_values


class Entity(abc.ABC):
    """A record stored in one table with a text ``id`` column."""

    @classmethod
    @abc.abstractmethod
    def table_name(cls) -> str:
        """Name of the table holding this entity."""

    @abc.abstractmethod
    def to_values(self) -> list[tuple[str, Any]]:
        """Column names paired with their values, in column order."""

    @classmethod
    @abc.abstractmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """Build an entity from a column-to-value mapping."""

    @abc.abstractmethod
    def id(self) -> str:
        """Primary key of this entity."""


E = TypeVar("E", bound=Entity)


class CRUD(abc.ABC, Generic[E]):
    """Create, read, update and delete operations on entities."""

    @abc.abstractmethod
    async def create(self, entity: E) -> None: ...

    @abc.abstractmethod
    async def fetch(self, id: str) -> E | None: ...

    @abc.abstractmethod
    async def update(self, entity: E) -> None: ...

    @abc.abstractmethod
    async def delete(self, id: str, logical: bool) -> None: ...


class Repository(CRUD[E]):
    """CRUD operations for one entity type.

    The connection is expected to run in autocommit mode or inside an
    explicit transaction; no commit is issued here.
    """

    def __init__(self, db: aiosqlite.Connection, entity_type: type[E]):
        self._db = db
        self._entity_type = entity_type

    @property
    def _table(self) -> str:
        return self._entity_type.table_name()

    async def create(self, entity: E) -> None:
        values = entity.to_values()
        columns = ", ".join(column for column, _ in values)
        placeholders = ", ".join(f"?{index}" for index in range(1, len(values) + 1))
        query = f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})"
        await self._db.execute(query, bind_values(values))

    async def fetch(self, id: str) -> E | None:
        query = f"SELECT * FROM {self._table} WHERE id = ?"
        async with self._db.execute(query, (id,)) as cursor:
            row = await cursor.fetchone()
            names = [column[0] for column in cursor.description or ()]
        if row is None:
            return None
        return self._entity_type.from_row(dict(zip(names, row)))

    async def update(self, entity: E) -> None:
        values = entity.to_values()
        assignments = ", ".join(
            f"{column} = ?{index}" for index, (column, _) in enumerate(values, start=1)
        )
        query = f"UPDATE {self._table} SET {assignments} WHERE id = ?{len(values) + 1}"
        await self._db.execute(query, (*bind_values(values), entity.id()))

    async def delete(self, id: str, logical: bool) -> None:
        if logical:
            query = f"UPDATE {self._table} SET deleted = 1 WHERE id = ?"
        else:
            query = f"DELETE FROM {self._table} WHERE id = ?"
        await self._db.execute(query, (id,))