from __future__ import annotations

import os, sys
from uuid import uuid4

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio
from config import load_config
from db.pool import DbPool
from repositories.identity_repo import IdentityRepo

async def main() -> None:
    cfg = load_config()

    run_id = os.getenv("SMOKE_RUN_ID") or f"smk_{uuid4().hex[:10]}"
    user_id = int(os.getenv("SMOKE_USER_ID") or "999000111222333666")
    email = f"{run_id}@smoke.invalid"

    db = DbPool()
    await db.start(cfg.mysql)
    repo = IdentityRepo(db)

    account_id = await repo.upsert_discord_account(discord_user_id=user_id, display_name=f"SMOKE_USER_{run_id}", metadata={"source": "smoke_test", "run_id": run_id})
    again = await repo.upsert_discord_account(discord_user_id=user_id, display_name=f"SMOKE_USER_{run_id}", metadata={"source": "smoke_test", "run_id": run_id})
    assert again == account_id, "upsert must be idempotent"

    await repo.set_email(account_id=account_id, email=email)
    assert await repo.get_email(account_id=account_id) == email
    assert await repo.find_account_by_email(email=email) == account_id

    acct = await repo.resolve_account(discord_user_id=user_id)
    assert acct and int(acct["account_id"]) == account_id

    names = await repo.display_names(account_ids=[account_id])
    assert names[account_id] == f"SMOKE_USER_{run_id}"

    await db.close()
    print(f"OK: identity smoke passed. run_id={run_id} account_id={account_id}")

if __name__ == "__main__":
    asyncio.run(main())
