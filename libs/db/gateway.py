"""Database gateway: parameterized statements over a shared async engine.

Every call outside a transaction checks out one pooled connection, runs a
single statement and returns the connection, on success and on failure.

Usage:
    db = Database(create_engine(settings))
    user = await db.query_one(
        select(users).where(users.c.user_id == 1), map_row=map_user
    )

    async with db.transaction() as tx:
        await tx.execute_update(update(...))
        await tx.execute_insert(insert(...))
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Mapping, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import CursorResult, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql import Executable

from libs.common.errors import InfrastructureError
from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
RowMapper = Callable[[RowMapping], T]
Params = Optional[Mapping[str, Any]]


def _sql_text(statement: Executable) -> str:
    try:
        return " ".join(str(statement).split())
    except SQLAlchemyError:
        return type(statement).__name__


class Database:
    """Async query gateway bound to an engine, optionally to one connection."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        connection: Optional[AsyncConnection] = None,
        probe_query: str = "SELECT 1",
    ):
        self.engine = engine
        self.probe_query = probe_query
        self._connection = connection

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None

    # ------------------------------------------------------------------
    # Statement execution
    # ------------------------------------------------------------------

    async def _run(
        self,
        statement: Executable,
        params: Params,
        handle: Callable[[CursorResult], T],
        *,
        write: bool,
    ) -> T:
        try:
            if self._connection is not None:
                result = await self._connection.execute(statement, params)
                return handle(result)

            connect = self.engine.begin if write else self.engine.connect
            async with connect() as conn:
                result = await conn.execute(statement, params)
                return handle(result)
        except SQLAlchemyError as exc:
            logger.error(
                "Database operation failed (%s): %s",
                type(exc).__name__,
                _sql_text(statement),
            )
            raise InfrastructureError("Database operation failed") from exc

    async def query_one(
        self,
        statement: Executable,
        params: Params = None,
        *,
        map_row: RowMapper[T],
    ) -> Optional[T]:
        """Run a query and map the first row, or return None when empty."""

        def handle(result: CursorResult) -> Optional[T]:
            row = result.mappings().first()
            return map_row(row) if row is not None else None

        return await self._run(statement, params, handle, write=False)

    async def query_many(
        self,
        statement: Executable,
        params: Params = None,
        *,
        map_row: RowMapper[T],
    ) -> list[T]:
        def handle(result: CursorResult) -> list[T]:
            return [map_row(row) for row in result.mappings().all()]

        return await self._run(statement, params, handle, write=False)

    async def execute_update(self, statement: Executable, params: Params = None) -> int:
        """Run an UPDATE/DELETE and return the number of affected rows."""
        return await self._run(
            statement, params, lambda result: result.rowcount, write=True
        )

    async def execute_insert(self, statement: Executable, params: Params = None) -> Any:
        """Run a Core ``insert()`` and return the generated primary key."""
        return await self._run(
            statement,
            params,
            lambda result: result.inserted_primary_key[0],
            write=True,
        )

    # ------------------------------------------------------------------
    # Transactions and lifecycle
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Database"]:
        """Yield a gateway bound to one connection inside BEGIN/COMMIT.

        Rolls back when the block raises. A gateway that is already bound
        yields itself, so nested blocks share the outer transaction.
        """
        if self._connection is not None:
            yield self
            return

        try:
            async with self.engine.begin() as conn:
                yield Database(
                    self.engine, connection=conn, probe_query=self.probe_query
                )
        except SQLAlchemyError as exc:
            logger.error("Transaction failed (%s)", type(exc).__name__)
            raise InfrastructureError("Database operation failed") from exc

    async def ping(self) -> bool:
        """Run the probe query; True when the database answers."""
        await self._run(
            text(self.probe_query), None, lambda result: result.scalar(), write=False
        )
        return True

    async def close(self) -> None:
        """Dispose the engine's connection pool."""
        await self.engine.dispose()
