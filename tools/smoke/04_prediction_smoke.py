from __future__ import annotations

import os, sys
from datetime import datetime, timezone
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
from repositories.match_repo import MatchRepo
from repositories.prediction_repo import PredictionRepo
from services.bracket_service import BracketService
from services.league_service import LeagueService
from services.prediction_service import PredictionService
from services.scoring_service import ScoringService

# pinned before the opening match so nothing is locked
SMOKE_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

async def main() -> None:
    cfg = load_config()

    run_id = os.getenv("SMOKE_RUN_ID") or f"smk_{uuid4().hex[:10]}"
    user_id = int(os.getenv("SMOKE_USER_ID") or "999000111222333666")

    db = DbPool()
    await db.start(cfg.mysql)
    identity = IdentityRepo(db)
    match_repo = MatchRepo(db)
    league_repo = LeagueRepo(db)
    prediction_repo = PredictionRepo(db)

    brackets = BracketService(match_repo)
    inserted = await brackets.seed_schedule()

    leagues = LeagueService(league_repo=league_repo, identity_repo=identity)
    predictions = PredictionService(
        prediction_repo=prediction_repo,
        match_repo=match_repo,
        league_repo=league_repo,
        now=lambda: SMOKE_NOW,
    )
    scoring = ScoringService(league_repo=league_repo, prediction_repo=prediction_repo, bracket_service=brackets)

    account_id = await identity.upsert_discord_account(discord_user_id=user_id, display_name=f"SMOKE_USER_{run_id}", metadata={"source": "smoke_test", "run_id": run_id})
    league = await leagues.create_league(admin_account_id=account_id, name=f"SMOKE {run_id}")

    await predictions.submit(account_id=account_id, league_id=league.id, match_id="m-A1", home_score=2, away_score=1)
    await predictions.submit(account_id=account_id, league_id=league.id, match_id="m-A1", home_score=1, away_score=1)
    saved, skipped = await predictions.submit_many(
        account_id=account_id,
        league_id=league.id,
        scores={"m-A2": (0, 0), "m-NOPE": (1, 0)},
    )
    assert saved == ["m-A2"] and skipped == ["m-NOPE"]

    mine = await predictions.list_mine(account_id=account_id, league_id=league.id)
    by_id = {p.match_id: p for p in mine}
    assert (by_id["m-A1"].home_score, by_id["m-A1"].away_score) == (1, 1), "resubmission overwrites"

    board = await scoring.leaderboard(league_id=league.id)
    assert [e.user_id for e in board] == [account_id]

    await db.close()
    print(f"OK: prediction smoke passed. run_id={run_id} league_id={league.id} schedule_inserted={inserted} points={board[0].total_points}")

if __name__ == "__main__":
    asyncio.run(main())
