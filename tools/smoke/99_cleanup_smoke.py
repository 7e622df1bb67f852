from __future__ import annotations

import os, sys

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio
from config import load_config
from db.pool import DbPool

_SMOKE_ACCOUNTS = (
    "SELECT account_id FROM platform_account "
    "WHERE JSON_EXTRACT(metadata,'$.source')='smoke_test' AND JSON_EXTRACT(metadata,'$.run_id')=%s"
)

async def main() -> None:
    cfg = load_config()

    run_id = os.getenv("SMOKE_RUN_ID")
    if not run_id:
        raise RuntimeError("Set SMOKE_RUN_ID to the run_id you want to clean up.")

    db = DbPool()
    await db.start(cfg.mysql)

    # Delete in FK-safe order; league deletes cascade to members, invites and predictions
    statements = [
        (f"DELETE FROM prediction WHERE account_id IN ({_SMOKE_ACCOUNTS});", (run_id,)),
        (f"DELETE FROM league WHERE admin_account_id IN ({_SMOKE_ACCOUNTS});", (run_id,)),
        (f"DELETE FROM league_member WHERE account_id IN ({_SMOKE_ACCOUNTS});", (run_id,)),
        (f"DELETE FROM league_invite WHERE invited_by_account_id IN ({_SMOKE_ACCOUNTS});", (run_id,)),
        (f"DELETE FROM simulation WHERE account_id IN ({_SMOKE_ACCOUNTS});", (run_id,)),
        ("DELETE FROM platform_account WHERE JSON_EXTRACT(metadata,'$.source')='smoke_test' AND JSON_EXTRACT(metadata,'$.run_id')=%s;", (run_id,)),
    ]

    async with db.transaction(dict_rows=False) as (_conn, cur):
        for sql, params in statements:
            await cur.execute(sql, params)
            print(f"OK: {cur.rowcount} rows affected")

    await db.close()
    print(f"OK: cleanup done for run_id={run_id}")

if __name__ == "__main__":
    asyncio.run(main())
