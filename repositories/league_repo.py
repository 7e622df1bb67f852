# repositories/league_repo.py
from __future__ import annotations

from typing import Any, Mapping

import aiomysql

from repositories.base_repo import BaseRepo, to_json


class LeagueRepo(BaseRepo):
    """
    league / league_member / league_invite.

    league_member has UNIQUE(league_id, account_id) and a status of
    'active' (participant) or 'pending' (join request), so a user is never
    both at once.

    Methods taking `cur` run on the caller's transaction (see LeagueService).
    """

    # -------------------------
    # League rows
    # -------------------------

    async def create_league(
        self,
        *,
        name: str,
        description: str | None,
        league_code: str,
        admin_account_id: int,
        is_private: bool,
        settings: Mapping[str, Any],
    ) -> int:
        async def _create(_conn, cur) -> int:
            await cur.execute(
                """
                INSERT INTO league
                  (name, description, league_code, admin_account_id, is_private, settings)
                VALUES
                  (%s, %s, %s, %s, %s, %s);
                """,
                (name, description, league_code, admin_account_id, 1 if is_private else 0, to_json(settings)),
            )
            league_id = int(cur.lastrowid)
            await self.upsert_member(cur, league_id=league_id, account_id=admin_account_id, status="active")
            return league_id

        return await self.in_tx(_create)

    async def get_league(self, *, league_id: int) -> Mapping[str, Any] | None:
        return await self.fetch_one("SELECT * FROM league WHERE league_id=%s;", (league_id,))

    async def get_league_by_code(self, *, league_code: str) -> Mapping[str, Any] | None:
        return await self.fetch_one("SELECT * FROM league WHERE league_code=%s;", (league_code,))

    async def code_exists(self, *, league_code: str) -> bool:
        row = await self.fetch_one("SELECT 1 AS x FROM league WHERE league_code=%s;", (league_code,))
        return row is not None

    async def update_settings(self, *, league_id: int, settings: Mapping[str, Any]) -> int:
        return await self.execute(
            "UPDATE league SET settings=%s WHERE league_id=%s;",
            (to_json(settings), league_id),
        )

    async def list_leagues_for_account(self, *, account_id: int) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT l.league_id, l.name, l.league_code, l.is_private, lm.status
            FROM league_member lm
            JOIN league l ON l.league_id = lm.league_id
            WHERE lm.account_id=%s
            ORDER BY l.name ASC;
            """,
            (account_id,),
        )

    # -------------------------
    # Members
    # -------------------------

    async def list_members(self, *, league_id: int) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT lm.account_id, lm.status, lm.joined_at, pa.display_name
            FROM league_member lm
            JOIN platform_account pa ON pa.account_id = lm.account_id
            WHERE lm.league_id=%s
            ORDER BY lm.joined_at ASC, lm.account_id ASC;
            """,
            (league_id,),
        )

    async def get_member_status(self, *, league_id: int, account_id: int) -> str | None:
        row = await self.fetch_one(
            "SELECT status FROM league_member WHERE league_id=%s AND account_id=%s;",
            (league_id, account_id),
        )
        return str(row["status"]) if row else None

    async def lock_league(
        self, cur: aiomysql.Cursor, *, league_id: int
    ) -> tuple[Mapping[str, Any] | None, list[Mapping[str, Any]]]:
        """
        Row-lock the league and read its members. Any other transaction
        touching this league's membership waits until ours commits.
        """
        await cur.execute("SELECT * FROM league WHERE league_id=%s FOR UPDATE;", (league_id,))
        league = await cur.fetchone()
        if not league:
            return None, []

        await cur.execute(
            """
            SELECT account_id, status
            FROM league_member
            WHERE league_id=%s
            ORDER BY joined_at ASC, account_id ASC;
            """,
            (league_id,),
        )
        return league, list(await cur.fetchall() or [])

    async def upsert_member(self, cur: aiomysql.Cursor, *, league_id: int, account_id: int, status: str) -> None:
        await cur.execute(
            """
            INSERT INTO league_member (league_id, account_id, status, joined_at)
            VALUES (%s, %s, %s, NOW(6))
            ON DUPLICATE KEY UPDATE status = VALUES(status);
            """,
            (league_id, account_id, status),
        )

    async def delete_member(self, cur: aiomysql.Cursor, *, league_id: int, account_id: int) -> None:
        await cur.execute(
            "DELETE FROM league_member WHERE league_id=%s AND account_id=%s;",
            (league_id, account_id),
        )

    # -------------------------
    # Invites
    # -------------------------

    async def create_invite(self, *, league_id: int, email: str, invited_by_account_id: int) -> int:
        return await self.insert_returning_id(
            """
            INSERT INTO league_invite (league_id, email, status, invited_by_account_id, created_at)
            VALUES (%s, %s, 'pending', %s, NOW(6));
            """,
            (league_id, email, invited_by_account_id),
        )

    async def get_invite(self, *, invite_id: int) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            "SELECT invite_id, league_id, email, status FROM league_invite WHERE invite_id=%s;",
            (invite_id,),
        )

    async def find_pending_invite(self, *, league_id: int, email: str) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            """
            SELECT invite_id, league_id, email, status
            FROM league_invite
            WHERE league_id=%s AND email=%s AND status='pending';
            """,
            (league_id, email),
        )

    async def list_pending_invites(self, *, email: str) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT i.invite_id, i.league_id, i.email, i.status, l.name AS league_name
            FROM league_invite i
            JOIN league l ON l.league_id = i.league_id
            WHERE i.email=%s AND i.status='pending'
            ORDER BY i.created_at ASC;
            """,
            (email,),
        )

    async def set_invite_status(self, cur: aiomysql.Cursor, *, invite_id: int, status: str) -> None:
        await cur.execute(
            "UPDATE league_invite SET status=%s WHERE invite_id=%s;",
            (status, invite_id),
        )
