"""Raw queries that log failures instead of raising them."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

DATABASE_MACROS_LOGGER_DOMAIN = "[DATABASE-MACROS]"


async def _fetch_rows(db: aiosqlite.Connection, query: str) -> list[dict[str, Any]]:
    async with db.execute(query) as cursor:
        rows = await cursor.fetchall()
        names = [column[0] for column in cursor.description or ()]
    return [dict(zip(names, row)) for row in rows]


async def execute_query(db: aiosqlite.Connection, query: str) -> list[dict[str, Any]]:
    """Return the rows of ``query``, or an empty list when it fails."""
    try:
        return await _fetch_rows(db, query)
    except sqlite3.Error as error:
        logger.error("%s Error executing query: %s", DATABASE_MACROS_LOGGER_DOMAIN, error)
        return []


async def execute_query_as(
    db: aiosqlite.Connection, query: str, entity_type: Any
) -> list[Any]:
    """Return the rows of ``query`` built with ``entity_type.from_row``.

    A failing query or a row that cannot be converted yields an empty list.
    """
    try:
        rows = await _fetch_rows(db, query)
        return [entity_type.from_row(row) for row in rows]
    except (sqlite3.Error, KeyError, TypeError, ValueError) as error:
        logger.error(
            "%s Error executing query_as: %s", DATABASE_MACROS_LOGGER_DOMAIN, error
        )
        return []


async def execute_insert(db: aiosqlite.Connection, query: str) -> bool:
    """Run a statement; report whether it succeeded."""
    try:
        await db.execute(query)
    except sqlite3.Error as error:
        logger.error("%s Error executing insert: %s", DATABASE_MACROS_LOGGER_DOMAIN, error)
        return False
    logger.info(
        "%s Successfully inserted query %s", DATABASE_MACROS_LOGGER_DOMAIN, query
    )
    return True