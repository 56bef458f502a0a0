"""Table inspection and SQL migration files."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Iterable

import aiosqlite

_SCHEMA_QUERY = "SELECT sql FROM sqlite_master WHERE type='table' AND name = ?"


async def get_table_schema(db: aiosqlite.Connection, table_name: str) -> str | None:
    """Return the CREATE statement of ``table_name``, or None when it is absent."""
    try:
        async with db.execute(_SCHEMA_QUERY, (table_name,)) as cursor:
            row = await cursor.fetchone()
    except sqlite3.Error:
        return None
    if row is None or not isinstance(row[0], str):
        return None
    return row[0]


async def ensure_database(db: aiosqlite.Connection, tables: Iterable[str]) -> None:
    """Create each missing table with an ``id`` and a ``name`` column."""
    for table in tables:
        if await get_table_schema(db, table) is None:
            await db.execute(
                f"CREATE TABLE IF NOT EXISTS {table} (id TEXT PRIMARY KEY, name TEXT)"
            )


async def run_migrations(
    db: aiosqlite.Connection, migration_dir: str | os.PathLike
) -> list[Path]:
    """Run every ``.sql`` file in ``migration_dir`` in name order.

    The directory is created when missing.  Returns the files that were run.
    """
    directory = Path(migration_dir)
    directory.mkdir(parents=True, exist_ok=True)
    applied = []
    for path in sorted(directory.iterdir()):
        if path.suffix == ".sql" and path.is_file():
            await db.executescript(path.read_text(encoding="utf-8"))
            applied.append(path)
    return applied