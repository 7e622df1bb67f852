# repositories/base_repo.py
from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence, TypeVar

import aiomysql

from db.pool import DbPool

T = TypeVar("T")


def to_json(v: Any) -> str | None:
    if v is None:
        return None
    return json.dumps(v, separators=(",", ":"), ensure_ascii=False)


def from_json(v: Any) -> Any:
    """JSON columns come back as str (or bytes) from aiomysql."""
    if v is None or isinstance(v, (dict, list)):
        return v
    if isinstance(v, (bytes, bytearray)):
        v = v.decode("utf-8")
    return json.loads(v) if v else None


class BaseRepo:
    """
    Thin SQL helpers shared by the concrete repos.
    Repos hold SQL only; rules live in services.
    """

    def __init__(self, db: DbPool) -> None:
        self._db = db

    async def fetch_one(self, sql: str, params: Sequence[Any] | None = None) -> Mapping[str, Any] | None:
        async with self._db.cursor() as cur:
            await cur.execute(sql, params or ())
            return await cur.fetchone()

    async def fetch_all(self, sql: str, params: Sequence[Any] | None = None) -> list[Mapping[str, Any]]:
        async with self._db.cursor() as cur:
            await cur.execute(sql, params or ())
            return list(await cur.fetchall() or [])

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        async with self._db.transaction(dict_rows=False) as (_conn, cur):
            await cur.execute(sql, params or ())
            return cur.rowcount

    async def execute_many(self, sql: str, params_seq: Iterable[Sequence[Any]]) -> int:
        rows = list(params_seq)
        if not rows:
            return 0
        async with self._db.transaction(dict_rows=False) as (_conn, cur):
            await cur.executemany(sql, rows)
            return cur.rowcount

    async def insert_returning_id(self, sql: str, params: Sequence[Any] | None = None) -> int:
        async with self._db.transaction(dict_rows=False) as (_conn, cur):
            await cur.execute(sql, params or ())
            return int(cur.lastrowid)

    async def in_tx(self, fn: Callable[[aiomysql.Connection, aiomysql.Cursor], Awaitable[T]]) -> T:
        """
        Run `fn(conn, cur)` inside one transaction (DictCursor).
        Anything `fn` raises rolls the whole thing back.
        """
        async with self._db.transaction() as (conn, cur):
            return await fn(conn, cur)
