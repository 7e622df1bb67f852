# services/prediction_service.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

from domain.enums import MemberStatus
from domain.models import Prediction, as_utc
from repositories.league_repo import LeagueRepo
from repositories.match_repo import MatchRepo
from repositories.prediction_repo import PredictionRepo

log = logging.getLogger(__name__)

DEFAULT_LOCK_MINUTES = 5


class PredictionServiceError(Exception):
    pass


class InvalidPredictionError(PredictionServiceError):
    pass


class PredictionLockedError(PredictionServiceError):
    pass


class NotLeagueMemberError(PredictionServiceError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_prediction_locked(kickoff: datetime, now: datetime, lock_minutes: int = DEFAULT_LOCK_MINUTES) -> bool:
    """Predictions close `lock_minutes` before kickoff, inclusive."""
    return now >= kickoff - timedelta(minutes=lock_minutes)


def validate_score(value: Any) -> int:
    # bool is an int subclass; True is not a score
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPredictionError(f"Score must be an integer, got {value!r}")
    if value < 0:
        raise InvalidPredictionError(f"Score must be >= 0, got {value}")
    return value


class PredictionService:
    """
    Guards writes to `prediction`: scores valid, user is an active member of
    the league, match not yet locked. Resubmitting overwrites.
    """

    def __init__(
        self,
        *,
        prediction_repo: PredictionRepo,
        match_repo: MatchRepo,
        league_repo: LeagueRepo,
        lock_minutes: int = DEFAULT_LOCK_MINUTES,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._predictions = prediction_repo
        self._matches = match_repo
        self._leagues = league_repo
        self._lock_minutes = lock_minutes
        self._now = now

    async def _require_member(self, *, league_id: int, account_id: int) -> None:
        status = await self._leagues.get_member_status(league_id=league_id, account_id=account_id)
        if status != MemberStatus.ACTIVE.value:
            raise NotLeagueMemberError("You are not a participant of this league.")

    async def submit(
        self,
        *,
        account_id: int,
        league_id: int,
        match_id: str,
        home_score: Any,
        away_score: Any,
    ) -> Prediction:
        home = validate_score(home_score)
        away = validate_score(away_score)

        await self._require_member(league_id=league_id, account_id=account_id)

        row = await self._matches.get_match(match_id=match_id)
        if not row:
            raise InvalidPredictionError(f"Unknown match: {match_id}")
        if is_prediction_locked(as_utc(row["kickoff_at"]), self._now(), self._lock_minutes):
            raise PredictionLockedError(f"Predictions for {match_id} are closed.")

        prediction = Prediction(
            user_id=account_id,
            match_id=match_id,
            league_id=league_id,
            home_score=home,
            away_score=away,
        )
        await self._predictions.upsert_prediction(prediction=prediction)
        log.info("Prediction saved: league=%s account=%s match=%s %s-%s", league_id, account_id, match_id, home, away)
        return prediction

    async def submit_many(
        self,
        *,
        account_id: int,
        league_id: int,
        scores: Mapping[str, tuple[int, int]],
    ) -> tuple[list[str], list[str]]:
        """
        Bulk upsert (simulation export). Returns (saved match ids, skipped
        match ids). Locked or unknown matches are skipped rather than failing
        the batch.
        """
        await self._require_member(league_id=league_id, account_id=account_id)

        kickoffs = await self._matches.get_kickoffs(match_ids=scores.keys())
        now = self._now()

        to_save: list[Prediction] = []
        skipped: list[str] = []
        for match_id in sorted(scores):
            home, away = scores[match_id]
            kickoff = kickoffs.get(match_id)
            if kickoff is None or is_prediction_locked(as_utc(kickoff), now, self._lock_minutes):
                skipped.append(match_id)
                continue
            to_save.append(
                Prediction(
                    user_id=account_id,
                    match_id=match_id,
                    league_id=league_id,
                    home_score=validate_score(home),
                    away_score=validate_score(away),
                )
            )

        await self._predictions.upsert_many(predictions=to_save)
        log.info("Bulk predictions: league=%s account=%s saved=%s skipped=%s", league_id, account_id, len(to_save), len(skipped))
        return [p.match_id for p in to_save], skipped

    async def list_mine(self, *, account_id: int, league_id: int) -> list[Prediction]:
        rows = await self._predictions.list_for_user(league_id=league_id, account_id=account_id)
        return [Prediction.from_row(r) for r in rows]
