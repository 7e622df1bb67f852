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
from repositories.league_repo import LeagueRepo
from services.league_service import LeagueService, MembershipStateError

async def main() -> None:
    cfg = load_config()

    run_id = os.getenv("SMOKE_RUN_ID") or f"smk_{uuid4().hex[:10]}"
    admin_user_id = int(os.getenv("SMOKE_USER_ID") or "999000111222333666")
    guest_user_id = int(os.getenv("SMOKE_USER2_ID") or "999000111222333777")

    db = DbPool()
    await db.start(cfg.mysql)
    identity = IdentityRepo(db)
    leagues = LeagueService(league_repo=LeagueRepo(db), identity_repo=identity)

    md = {"source": "smoke_test", "run_id": run_id}
    admin_id = await identity.upsert_discord_account(discord_user_id=admin_user_id, display_name=f"SMOKE_ADMIN_{run_id}", metadata=md)
    guest_id = await identity.upsert_discord_account(discord_user_id=guest_user_id, display_name=f"SMOKE_GUEST_{run_id}", metadata=md)

    league = await leagues.create_league(admin_account_id=admin_id, name=f"SMOKE {run_id}", is_private=True)
    assert league.participants == (admin_id,)

    after_join = await leagues.join_by_code(league_code=league.league_code, account_id=guest_id)
    assert guest_id in after_join.pending_requests and guest_id not in after_join.participants

    try:
        await leagues.join(league_id=league.id, account_id=guest_id)
        raise AssertionError("second join request should be refused")
    except MembershipStateError:
        pass

    approved = await leagues.approve(league_id=league.id, actor_account_id=admin_id, account_id=guest_id)
    assert guest_id in approved.participants and guest_id not in approved.pending_requests

    reloaded = await leagues.get_league(league_id=league.id)
    assert set(reloaded.participants) == {admin_id, guest_id}

    left = await leagues.remove_member(league_id=league.id, actor_account_id=guest_id, account_id=guest_id)
    assert left.participants == (admin_id,)

    await db.close()
    print(f"OK: league smoke passed. run_id={run_id} league_id={league.id} code={league.league_code}")

if __name__ == "__main__":
    asyncio.run(main())
