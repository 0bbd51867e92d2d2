"""Async database engine and the prepared-statement storage boundary."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

from sqlalchemy import DateTime, bindparam, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from miles_tracker_core.errors import DatabaseError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Coroutine, Iterator, Sequence

    from sqlalchemy import BindParameter, TextClause

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql+asyncpg://localhost:5432/miles_tracker",
)

_PLACEHOLDER_RE = re.compile(r"\?")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign keys switched on."""
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(url, echo=False, **kwargs)
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine
    return create_async_engine(
        url,
        echo=False,
        pool_size=20,
        max_overflow=10,
        **kwargs,
    )


engine = build_engine(DATABASE_URL)


class Statement(NamedTuple):
    """A SQL template with positional ``?`` placeholders and its values."""

    sql: str
    params: Sequence[Any] = ()


def _compile(sql: str, params: Sequence[Any]) -> TextClause:
    """Rewrite ``?`` placeholders as named binds and attach the values.

    Types are inferred from the Python values, so dates, datetimes and
    booleans are converted by the dialect rather than by string formatting.
    """
    expected = sql.count("?")
    if expected != len(params):
        msg = f"Statement expects {expected} params, got {len(params)}"
        raise ValueError(msg)

    counter = iter(range(expected))
    named = _PLACEHOLDER_RE.sub(lambda _m: f":p{next(counter)}", sql)
    return text(named).bindparams(
        *(_bind(f"p{i}", value) for i, value in enumerate(params))
    )


def _bind(name: str, value: Any) -> BindParameter[Any]:
    if isinstance(value, Enum):
        return bindparam(name, value.value)
    if isinstance(value, datetime) and value.tzinfo is not None:
        return bindparam(name, value, type_=DateTime(timezone=True))
    return bindparam(name, value)


class Database:
    """Prepared-statement interface over an :class:`AsyncEngine`.

    Each call checks out its own connection, so independent reads may run
    concurrently.  ``batch`` runs its statements in a single transaction;
    separate ``batch`` calls are not atomic with each other.
    """

    def __init__(self, async_engine: AsyncEngine) -> None:
        self._engine = async_engine

    async def fetch_all(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        async with self._engine.connect() as conn:
            result = await conn.execute(_compile(sql, params))
            return [dict(row) for row in result.mappings().all()]

    async def fetch_one(
        self, sql: str, params: Sequence[Any] = ()
    ) -> dict[str, Any] | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(_compile(sql, params))
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and return the affected row count."""
        async with self._engine.begin() as conn:
            result = await conn.execute(_compile(sql, params))
            return max(result.rowcount, 0)

    async def batch(self, statements: Sequence[Statement]) -> list[int]:
        """Run *statements* in order inside one transaction."""
        counts: list[int] = []
        async with self._engine.begin() as conn:
            for statement in statements:
                result = await conn.execute(_compile(statement.sql, statement.params))
                counts.append(max(result.rowcount, 0))
        return counts


async def run_concurrently(*reads: Coroutine[Any, Any, Any]) -> list[Any]:
    """Await independent reads side by side and return results in order.

    The first failure cancels the reads still pending and is re-raised on its
    own, so :func:`storage_errors` sees the store's exception directly.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(read) for read in reads]
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from eg
    return [task.result() for task in tasks]


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Log a store failure and re-raise it as an opaque :class:`DatabaseError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s: %s", message, exc)
        raise DatabaseError(message) from exc


async def get_db() -> AsyncGenerator[Database]:
    """FastAPI dependency that yields the storage boundary."""
    yield Database(engine)
