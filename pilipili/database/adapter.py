"""Asynchronous database adapters and a connection manager."""

from __future__ import annotations

import abc
import asyncio
import os
from typing import Any
from urllib.parse import quote

import aiosqlite

from pilipili.database.config import DatabaseConfig

Row = dict[str, Any]

_SQLITE_SCHEME = "sqlite://"
_MEMORY = ":memory:"


class DatabaseAdapter(abc.ABC):
    """Runs raw SQL against a database."""

    @abc.abstractmethod
    async def execute(self, query: str) -> int:
        """Run ``query`` and return the number of rows it affected."""

    @abc.abstractmethod
    async def fetch_all(self, query: str) -> list[Row]:
        """Run ``query`` and return every row as a column-to-value mapping."""


class SqliteAdapter(DatabaseAdapter):
    """Adapter over one SQLite database, connected lazily on first use.

    The connection runs in autocommit mode.  A missing database file is an
    error unless ``create_if_missing`` is set.
    """

    def __init__(self, database: str | os.PathLike, *, create_if_missing: bool = False):
        self._database = os.fspath(database)
        self._create_if_missing = create_if_missing
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def _connect(self) -> aiosqlite.Connection:
        async with self._lock:
            if self._connection is None:
                if self._database == _MEMORY or self._create_if_missing:
                    self._connection = await aiosqlite.connect(
                        self._database, isolation_level=None
                    )
                else:
                    uri = f"file:{quote(self._database)}?mode=rw"
                    self._connection = await aiosqlite.connect(
                        uri, uri=True, isolation_level=None
                    )
            return self._connection

    async def execute(self, query: str) -> int:
        connection = await self._connect()
        async with connection.execute(query) as cursor:
            return max(cursor.rowcount, 0)

    async def fetch_all(self, query: str) -> list[Row]:
        connection = await self._connect()
        async with connection.execute(query) as cursor:
            rows = await cursor.fetchall()
            names = [column[0] for column in cursor.description or ()]
        return [dict(zip(names, row)) for row in rows]

    async def close(self) -> None:
        """Close the connection if one was opened."""
        if self._connection is not None:
            connection, self._connection = self._connection, None
            await connection.close()

    async def __aenter__(self) -> SqliteAdapter:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class DatabaseConnectionManager:
    """Owns the adapter for the database described by a configuration."""

    def __init__(self, config: DatabaseConfig):
        url = config.get_db_url()
        if not url.startswith(_SQLITE_SCHEME):
            scheme = url.split("://", 1)[0]
            raise ValueError(
                f"Failed to create database pool: unsupported scheme {scheme!r}"
            )
        self._adapter = SqliteAdapter(url[len(_SQLITE_SCHEME):])

    def get_adapter(self) -> SqliteAdapter:
        return self._adapter

    async def execute_query(self, query: str) -> int:
        return await self._adapter.execute(query)

    async def fetch_all_query(self, query: str) -> list[Row]:
        return await self._adapter.fetch_all(query)

    async def close(self) -> None:
        await self._adapter.close()

    async def __aenter__(self) -> DatabaseConnectionManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()