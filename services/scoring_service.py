# services/scoring_service.py
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from domain.enums import Phase
from domain.models import LeaderboardEntry, LeagueSettings, Match, Prediction
from repositories.league_repo import LeagueRepo
from repositories.prediction_repo import PredictionRepo
from services.bracket_service import BracketService
from services.standings_service import match_round

log = logging.getLogger(__name__)

LEADERBOARD_VIEWS = ("total", "round_1", "round_2", "round_3", "group_phase", "knockout")


class ScoringServiceError(Exception):
    pass


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def calculate_points(
    pred_home: int,
    pred_away: int,
    actual_home: int,
    actual_away: int,
    settings: LeagueSettings,
) -> int:
    """
    exact score                         -> exact_score
    right winner + right goal diff      -> winner_and_diff
    right winner                        -> winner
    predicted a draw, it was a draw     -> draw
    anything else                       -> 0
    """
    if pred_home == actual_home and pred_away == actual_away:
        return settings.exact_score

    pred_diff = pred_home - pred_away
    actual_diff = actual_home - actual_away
    if _sign(pred_diff) != _sign(actual_diff):
        return 0
    if actual_diff == 0:
        return settings.draw
    if pred_diff == actual_diff:
        return settings.winner_and_diff
    return settings.winner


def score_prediction(prediction: Prediction, match: Match, settings: LeagueSettings) -> int:
    if not match.is_played or not match.has_score:
        return 0
    return calculate_points(
        prediction.home_score,
        prediction.away_score,
        match.home_score,
        match.away_score,
        settings,
    )


def _in_view(match: Match, view: str, matches: Sequence[Match]) -> bool:
    if view == "total":
        return True
    if view == "group_phase":
        return match.phase == Phase.GROUP
    if view == "knockout":
        return match.phase != Phase.GROUP
    if view.startswith("round_"):
        return match_round(match, matches) == int(view.split("_", 1)[1])
    raise ScoringServiceError(f"Unknown leaderboard view: {view}")


def build_leaderboard(
    participants: Iterable[int],
    predictions: Iterable[Prediction],
    matches: Sequence[Match],
    settings: LeagueSettings,
    view: str = "total",
) -> list[LeaderboardEntry]:
    """
    Points per participant, best first (points, then exact scores, then user id).
    Predictions from non-participants are ignored.
    """
    if view not in LEADERBOARD_VIEWS:
        raise ScoringServiceError(f"Unknown leaderboard view: {view}")

    by_id = {m.id: m for m in matches}
    totals = {uid: [0, 0] for uid in participants}

    for p in predictions:
        acc = totals.get(p.user_id)
        match = by_id.get(p.match_id)
        if acc is None or match is None or not _in_view(match, view, matches):
            continue
        acc[0] += score_prediction(p, match, settings)
        if match.is_played and match.home_score == p.home_score and match.away_score == p.away_score:
            acc[1] += 1

    entries = [LeaderboardEntry(user_id=uid, total_points=t[0], exact_scores=t[1]) for uid, t in totals.items()]
    entries.sort(key=lambda e: (-e.total_points, -e.exact_scores, e.user_id))
    return entries


class ScoringService:
    def __init__(
        self,
        *,
        league_repo: LeagueRepo,
        prediction_repo: PredictionRepo,
        bracket_service: BracketService,
    ) -> None:
        self._leagues = league_repo
        self._predictions = prediction_repo
        self._bracket = bracket_service

    async def leaderboard(self, *, league_id: int, view: str = "total") -> list[LeaderboardEntry]:
        league = await self._leagues.get_league(league_id=league_id)
        if not league:
            raise ScoringServiceError(f"League not found: {league_id}")

        settings = LeagueSettings.from_json(league.get("settings"))
        members = await self._leagues.list_members(league_id=league_id)
        participants = [int(r["account_id"]) for r in members if r["status"] == "active"]

        rows = await self._predictions.list_for_league(league_id=league_id)
        predictions = [Prediction.from_row(r) for r in rows]
        matches = await self._bracket.get_matches()

        board = build_leaderboard(participants, predictions, matches, settings, view)
        log.debug("Leaderboard league=%s view=%s entries=%s", league_id, view, len(board))
        return board

    async def points_by_match(self, *, league_id: int, account_id: int) -> Mapping[str, int]:
        """Points earned so far by one user, per predicted match."""
        league = await self._leagues.get_league(league_id=league_id)
        if not league:
            raise ScoringServiceError(f"League not found: {league_id}")
        settings = LeagueSettings.from_json(league.get("settings"))

        rows = await self._predictions.list_for_user(league_id=league_id, account_id=account_id)
        matches = {m.id: m for m in await self._bracket.get_matches()}
        out: dict[str, int] = {}
        for r in rows:
            p = Prediction.from_row(r)
            m = matches.get(p.match_id)
            out[p.match_id] = score_prediction(p, m, settings) if m else 0
        return out
