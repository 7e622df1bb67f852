# db/pool.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple

import aiomysql

from config import MySqlConfig

log = logging.getLogger(__name__)


class DbPool:
    """
    Owns the aiomysql pool for the lifetime of the bot.

    Connections are autocommit; multi-statement work goes through
    `transaction()`, which is also where row locks (SELECT ... FOR UPDATE)
    are taken.
    """

    def __init__(self) -> None:
        self._pool: Optional[aiomysql.Pool] = None

    @property
    def pool(self) -> aiomysql.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call await DbPool.start() first.")
        return self._pool

    async def start(self, cfg: MySqlConfig) -> None:
        if self._pool is not None:
            return

        self._pool = await aiomysql.create_pool(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            db=cfg.database,
            minsize=cfg.minsize,
            maxsize=cfg.maxsize,
            connect_timeout=cfg.connect_timeout,
            autocommit=True,
            charset="utf8mb4",
        )
        await self.ping()
        log.info("MySQL pool ready (%s@%s:%s/%s, size %s-%s)", cfg.user, cfg.host, cfg.port, cfg.database, cfg.minsize, cfg.maxsize)

    async def ping(self) -> None:
        async with self.cursor(dict_rows=False) as cur:
            await cur.execute("SELECT 1;")
            await cur.fetchone()

    @asynccontextmanager
    async def cursor(self, *, dict_rows: bool = True) -> AsyncIterator[aiomysql.Cursor]:
        cursor_cls = aiomysql.DictCursor if dict_rows else aiomysql.Cursor
        async with self.pool.acquire() as conn:
            async with conn.cursor(cursor_cls) as cur:
                yield cur

    @asynccontextmanager
    async def transaction(
        self, *, dict_rows: bool = True
    ) -> AsyncIterator[Tuple[aiomysql.Connection, aiomysql.Cursor]]:
        """
        Commits on success, rolls back on any exception (and re-raises).

            async with db.transaction() as (conn, cur):
                await cur.execute("SELECT ... FOR UPDATE", ...)
        """
        cursor_cls = aiomysql.DictCursor if dict_rows else aiomysql.Cursor

        async with self.pool.acquire() as conn:
            await conn.begin()
            try:
                async with conn.cursor(cursor_cls) as cur:
                    yield conn, cur
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def close(self) -> None:
        if self._pool is None:
            return
        self._pool.close()
        await self._pool.wait_closed()
        self._pool = None
        log.info("MySQL pool closed")
