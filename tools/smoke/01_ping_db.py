from __future__ import annotations

import os, sys

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio
from config import load_config
from db.pool import DbPool

async def main() -> None:
    cfg = load_config()

    db = DbPool()
    await db.start(cfg.mysql)
    await db.ping()

    async with db.cursor() as cur:
        await cur.execute("SELECT COUNT(*) AS n FROM wc_match;")
        row = await cur.fetchone()

    await db.close()
    print(f"OK: DB pool ping succeeded. wc_match rows={row['n']}")

if __name__ == "__main__":
    asyncio.run(main())
