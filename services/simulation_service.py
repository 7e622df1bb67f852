# services/simulation_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from domain.enums import MatchStatus
from domain.models import Match, Prediction
from repositories.prediction_repo import PredictionRepo
from repositories.simulation_repo import SimulationRepo
from services.prediction_service import PredictionService

log = logging.getLogger(__name__)

# match_id -> (home, away)
Overlay = dict[str, tuple[int, int]]


class SimulationServiceError(Exception):
    pass


def _is_goal_count(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def overlay_from_json(data: Mapping[str, Any] | None) -> Overlay:
    """
    Stored shape: {"m-A1": {"home": 2, "away": 1}, ...}
    Entries missing either side, or holding anything but non-negative ints,
    are dropped.
    """
    out: Overlay = {}
    for match_id, score in (data or {}).items():
        if not isinstance(score, Mapping):
            continue
        home, away = score.get("home"), score.get("away")
        if _is_goal_count(home) and _is_goal_count(away):
            out[str(match_id)] = (home, away)
    return out


def overlay_to_json(overlay: Mapping[str, tuple[int, int]]) -> dict[str, dict[str, int]]:
    return {mid: {"home": h, "away": a} for mid, (h, a) in sorted(overlay.items())}


def apply_overlay(matches: Iterable[Match], overlay: Mapping[str, tuple[int, int]]) -> list[Match]:
    """Simulated scores replace real ones; a simulated match counts as FINISHED."""
    out = []
    for m in matches:
        score = overlay.get(m.id)
        if score is not None:
            m = m.with_result(score[0], score[1], MatchStatus.FINISHED)
        out.append(m)
    return out


@dataclass(frozen=True)
class ExportResult:
    exported: tuple[str, ...]
    skipped_locked: tuple[str, ...]


class SimulationService:
    """
    A user's private "what if" scores. Never touches wc_match; the overlay is
    applied on read by BracketService.
    """

    def __init__(
        self,
        *,
        simulation_repo: SimulationRepo,
        prediction_repo: PredictionRepo,
        prediction_service: PredictionService,
    ) -> None:
        self._repo = simulation_repo
        self._predictions = prediction_repo
        self._prediction_service = prediction_service

    async def load(self, *, account_id: int) -> Overlay:
        return overlay_from_json(await self._repo.get_simulation(account_id=account_id))

    async def _save(self, *, account_id: int, overlay: Overlay) -> None:
        await self._repo.save_simulation(account_id=account_id, data=overlay_to_json(overlay))

    # -------------------------
    # Editing
    # -------------------------

    async def set_score(self, *, account_id: int, match_id: str, home_score: int, away_score: int) -> Overlay:
        if home_score < 0 or away_score < 0:
            raise SimulationServiceError("Scores must be >= 0.")
        overlay = await self.load(account_id=account_id)
        overlay[match_id] = (int(home_score), int(away_score))
        await self._save(account_id=account_id, overlay=overlay)
        return overlay

    async def clear_score(self, *, account_id: int, match_id: str) -> Overlay:
        overlay = await self.load(account_id=account_id)
        if overlay.pop(match_id, None) is not None:
            await self._save(account_id=account_id, overlay=overlay)
        return overlay

    async def reset(self, *, account_id: int) -> None:
        await self._repo.delete_simulation(account_id=account_id)

    async def sync_real_results(self, *, account_id: int, matches: Iterable[Match]) -> int:
        """Copy every FINISHED real score into the simulation. Returns how many were copied."""
        overlay = await self.load(account_id=account_id)
        count = 0
        for m in matches:
            if m.status == MatchStatus.FINISHED and m.has_score:
                overlay[m.id] = (m.home_score, m.away_score)
                count += 1
        await self._save(account_id=account_id, overlay=overlay)
        return count

    # -------------------------
    # League import / export
    # -------------------------

    async def import_from_league(self, *, account_id: int, league_id: int) -> int:
        rows = await self._predictions.list_for_user(league_id=league_id, account_id=account_id)
        overlay = await self.load(account_id=account_id)
        for r in rows:
            p = Prediction.from_row(r)
            overlay[p.match_id] = (p.home_score, p.away_score)
        await self._save(account_id=account_id, overlay=overlay)
        log.info("Simulation import: account=%s league=%s predictions=%s", account_id, league_id, len(rows))
        return len(rows)

    async def export_to_league(
        self,
        *,
        account_id: int,
        league_id: int,
        matches: Iterable[Match],
        group: Optional[str] = None,
    ) -> ExportResult:
        """
        Push simulated scores into the league as predictions.
        `group` limits the export to one group's matches. Locked matches are
        skipped, not failed.
        """
        overlay = await self.load(account_id=account_id)
        if group:
            in_group = {m.id for m in matches if m.group == group.upper()}
            overlay = {mid: s for mid, s in overlay.items() if mid in in_group}
        if not overlay:
            raise SimulationServiceError("Nothing to export: no simulated scores for that selection.")

        exported, skipped = await self._prediction_service.submit_many(
            account_id=account_id,
            league_id=league_id,
            scores=overlay,
        )
        return ExportResult(exported=tuple(exported), skipped_locked=tuple(skipped))
