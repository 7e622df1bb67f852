# repositories/prediction_repo.py
from __future__ import annotations

from typing import Any, Iterable, Mapping

from domain.models import Prediction
from repositories.base_repo import BaseRepo

_UPSERT = """
    INSERT INTO prediction (league_id, account_id, match_id, home_score, away_score, updated_at)
    VALUES (%s, %s, %s, %s, %s, NOW(6))
    ON DUPLICATE KEY UPDATE
      home_score = VALUES(home_score),
      away_score = VALUES(away_score),
      updated_at = NOW(6);
"""


class PredictionRepo(BaseRepo):
    # prediction has UNIQUE(league_id, account_id, match_id): one guess per user per match per league

    async def upsert_prediction(self, *, prediction: Prediction) -> None:
        p = prediction
        await self.execute(_UPSERT, (p.league_id, p.user_id, p.match_id, p.home_score, p.away_score))

    async def upsert_many(self, *, predictions: Iterable[Prediction]) -> int:
        return await self.execute_many(
            _UPSERT,
            [(p.league_id, p.user_id, p.match_id, p.home_score, p.away_score) for p in predictions],
        )

    async def list_for_league(self, *, league_id: int) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT league_id, account_id, match_id, home_score, away_score
            FROM prediction
            WHERE league_id=%s;
            """,
            (league_id,),
        )

    async def list_for_user(self, *, league_id: int, account_id: int) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT p.league_id, p.account_id, p.match_id, p.home_score, p.away_score
            FROM prediction p
            JOIN wc_match m ON m.match_id = p.match_id
            WHERE p.league_id=%s AND p.account_id=%s
            ORDER BY m.kickoff_at ASC;
            """,
            (league_id, account_id),
        )
