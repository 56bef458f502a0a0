from dataclasses import dataclass

import aiosqlite
import pytest
import pytest_asyncio

from pilipili.database.queries import execute_insert, execute_query, execute_query_as


@dataclass
class Item:
    item_id: str
    name: str

    @classmethod
    def from_row(cls, row):
        return cls(item_id=row["id"], name=row["name"])


@pytest_asyncio.fixture
async def db():
    connection = await aiosqlite.connect(":memory:", isolation_level=None)
    await connection.execute("CREATE TABLE items (id TEXT PRIMARY KEY, name TEXT)")
    try:
        yield connection
    finally:
        await connection.close()


@pytest.mark.asyncio
async def test_insert_then_query(db):
    assert await execute_insert(db, "INSERT INTO items (id, name) VALUES ('1', 'lamp')")
    assert await execute_query(db, "SELECT id, name FROM items") == [
        {"id": "1", "name": "lamp"}
    ]


@pytest.mark.asyncio
async def test_failed_insert_returns_false(db):
    assert await execute_insert(db, "INSERT INTO items (id, name) VALUES ('1', 'a')")
    assert not await execute_insert(db, "INSERT INTO items (id, name) VALUES ('1', 'b')")
    assert await execute_query(db, "SELECT name FROM items") == [{"name": "a"}]


@pytest.mark.asyncio
async def test_failed_query_returns_empty_list(db):
    assert await execute_query(db, "SELECT * FROM nowhere") == []


@pytest.mark.asyncio
async def test_query_as_builds_entities(db):
    await execute_insert(db, "INSERT INTO items (id, name) VALUES ('1', 'lamp'), ('2', 'desk')")
    items = await execute_query_as(db, "SELECT id, name FROM items ORDER BY id", Item)
    assert items == [Item("1", "lamp"), Item("2", "desk")]


@pytest.mark.asyncio
async def test_query_as_with_unconvertible_rows_returns_empty(db):
    await execute_insert(db, "INSERT INTO items (id, name) VALUES ('1', 'lamp')")
    assert await execute_query_as(db, "SELECT id FROM items", Item) == []


@pytest.mark.asyncio
async def test_query_as_with_bad_sql_returns_empty(db):
    assert await execute_query_as(db, "SELEC id FROM items", Item) == []