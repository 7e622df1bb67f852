# repositories/identity_repo.py
from __future__ import annotations

from typing import Any, Iterable, Mapping

from repositories.base_repo import BaseRepo, to_json


class IdentityRepo(BaseRepo):
    """
    Discord users -> platform_account rows.

      - platform_account.external_user_id = Discord snowflake (string)
      - platform_account.username         = Discord snowflake (string), unique per platform
      - platform_account.display_name     = human friendly name
      - platform_account.email            = optional, lower-cased; used to match league invites
    """

    async def ensure_discord_platform(self) -> int:
        await self.execute(
            "INSERT INTO platform (name, metadata) VALUES ('discord', JSON_OBJECT('source','bot')) "
            "ON DUPLICATE KEY UPDATE name=VALUES(name);"
        )
        row = await self.fetch_one("SELECT platform_id FROM platform WHERE name='discord';")
        if not row:
            raise RuntimeError("Failed to resolve platform_id for discord")
        return int(row["platform_id"])

    async def upsert_discord_account(
        self,
        *,
        discord_user_id: int,
        display_name: str | None,
        metadata: Mapping[str, Any] | None = None,
    ) -> int:
        platform_id = await self.ensure_discord_platform()
        snowflake = str(discord_user_id)

        await self.execute(
            """
            INSERT INTO platform_account
              (platform_id, external_user_id, username, display_name, metadata, first_seen_at, last_seen_at)
            VALUES
              (%s, %s, %s, %s, %s, NOW(6), NOW(6))
            ON DUPLICATE KEY UPDATE
              display_name = VALUES(display_name),
              metadata     = COALESCE(VALUES(metadata), metadata),
              last_seen_at = NOW(6);
            """,
            (platform_id, snowflake, snowflake, display_name or snowflake, to_json(metadata)),
        )

        row = await self.fetch_one(
            "SELECT account_id FROM platform_account WHERE platform_id=%s AND username=%s;",
            (platform_id, snowflake),
        )
        if not row:
            raise RuntimeError("Failed to resolve account_id after upsert_discord_account()")
        return int(row["account_id"])

    async def resolve_account(self, *, discord_user_id: int) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            """
            SELECT pa.account_id, pa.external_user_id, pa.display_name, pa.email
            FROM platform_account pa
            JOIN platform p ON p.platform_id = pa.platform_id
            WHERE p.name='discord' AND pa.username=%s;
            """,
            (str(discord_user_id),),
        )

    async def get_email(self, *, account_id: int) -> str | None:
        row = await self.fetch_one("SELECT email FROM platform_account WHERE account_id=%s;", (account_id,))
        return str(row["email"]) if row and row.get("email") else None

    async def set_email(self, *, account_id: int, email: str | None) -> int:
        return await self.execute(
            "UPDATE platform_account SET email=%s WHERE account_id=%s;",
            (email, account_id),
        )

    async def find_account_by_email(self, *, email: str) -> int | None:
        row = await self.fetch_one("SELECT account_id FROM platform_account WHERE email=%s;", (email,))
        return int(row["account_id"]) if row else None

    async def display_names(self, *, account_ids: Iterable[int]) -> dict[int, str]:
        ids = sorted(set(account_ids))
        if not ids:
            return {}
        marks = ",".join(["%s"] * len(ids))
        rows = await self.fetch_all(
            f"SELECT account_id, display_name, external_user_id FROM platform_account WHERE account_id IN ({marks});",
            ids,
        )
        return {int(r["account_id"]): str(r["display_name"] or r["external_user_id"]) for r in rows}
