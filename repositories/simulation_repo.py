# repositories/simulation_repo.py
from __future__ import annotations

from typing import Any, Mapping

from repositories.base_repo import BaseRepo, from_json, to_json


class SimulationRepo(BaseRepo):
    """One JSON document per account: {match_id: {"home": int, "away": int}}."""

    async def get_simulation(self, *, account_id: int) -> Mapping[str, Any] | None:
        row = await self.fetch_one(
            "SELECT simulation_data FROM simulation WHERE account_id=%s;",
            (account_id,),
        )
        return from_json(row["simulation_data"]) if row else None

    async def save_simulation(self, *, account_id: int, data: Mapping[str, Any]) -> None:
        await self.execute(
            """
            INSERT INTO simulation (account_id, simulation_data, updated_at)
            VALUES (%s, %s, NOW(6))
            ON DUPLICATE KEY UPDATE
              simulation_data = VALUES(simulation_data),
              updated_at      = NOW(6);
            """,
            (account_id, to_json(data)),
        )

    async def delete_simulation(self, *, account_id: int) -> int:
        return await self.execute("DELETE FROM simulation WHERE account_id=%s;", (account_id,))
