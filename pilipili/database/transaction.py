"""Explicit transactions on a SQLite connection."""

from __future__ import annotations

import aiosqlite


class TransactionManager:
    """An open transaction that ends with exactly one commit or rollback.

    Used as an async context manager it commits on success and rolls back
    when the block raises.
    """

    def __init__(self, connection: aiosqlite.Connection):
        self.connection = connection
        self._finished = False

    @classmethod
    async def begin(cls, db: aiosqlite.Connection) -> TransactionManager:
        """Start a transaction on ``db``."""
        await db.execute("BEGIN")
        return cls(db)

    async def _finish(self, statement: str) -> None:
        if self._finished:
            raise RuntimeError("transaction already finished")
        self._finished = True
        await self.connection.execute(statement)

    async def commit(self) -> None:
        await self._finish("COMMIT")

    async def rollback(self) -> None:
        await self._finish("ROLLBACK")

    async def __aenter__(self) -> TransactionManager:
        return self

    async def __aexit__(self, exc_type: object, *rest: object) -> None:
        if self._finished:
            return
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()