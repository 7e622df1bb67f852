# repositories/match_repo.py
from __future__ import annotations

from datetime import timezone
from typing import Any, Iterable, Mapping

from domain.models import Match
from repositories.base_repo import BaseRepo


class MatchRepo(BaseRepo):
    """
    wc_match holds the fixture list exactly as scheduled: knockout rows keep
    their placeholder labels ("1º Grupo A", "Venc. R32-1"), only scores and
    status change. Concrete knockout teams are derived at read time.
    """

    async def list_matches(self) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT match_id, home_team_id, away_team_id, kickoff_at, phase, group_letter,
                   status, home_score, away_score, location
            FROM wc_match
            ORDER BY kickoff_at ASC, match_id ASC;
            """
        )

    async def get_match(self, *, match_id: str) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            """
            SELECT match_id, home_team_id, away_team_id, kickoff_at, phase, group_letter,
                   status, home_score, away_score, location
            FROM wc_match
            WHERE match_id=%s;
            """,
            (match_id,),
        )

    async def get_kickoffs(self, *, match_ids: Iterable[str]) -> dict[str, Any]:
        ids = sorted(set(match_ids))
        if not ids:
            return {}
        marks = ",".join(["%s"] * len(ids))
        rows = await self.fetch_all(
            f"SELECT match_id, kickoff_at FROM wc_match WHERE match_id IN ({marks});",
            ids,
        )
        return {str(r["match_id"]): r["kickoff_at"] for r in rows}

    async def insert_schedule(self, *, matches: Iterable[Match]) -> int:
        return await self.execute_many(
            """
            INSERT IGNORE INTO wc_match
              (match_id, home_team_id, away_team_id, kickoff_at, phase, group_letter, status, location)
            VALUES
              (%s, %s, %s, %s, %s, %s, %s, %s);
            """,
            [
                (
                    m.id,
                    m.home_team_id,
                    m.away_team_id,
                    m.date.astimezone(timezone.utc).replace(tzinfo=None),
                    m.phase.value,
                    m.group,
                    m.status.value,
                    m.location,
                )
                for m in matches
            ],
        )

    async def set_result(
        self,
        *,
        match_id: str,
        home_score: int | None,
        away_score: int | None,
        status: str,
        updated_by_account_id: int | None = None,
    ) -> int:
        return await self.execute(
            """
            UPDATE wc_match
            SET home_score=%s, away_score=%s, status=%s,
                updated_by_account_id=%s, updated_at=NOW(6)
            WHERE match_id=%s;
            """,
            (home_score, away_score, status, updated_by_account_id, match_id),
        )
