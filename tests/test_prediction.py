"""
Prediction lock window, score validation and PredictionService guards.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from services.prediction_service import (
    InvalidPredictionError,
    NotLeagueMemberError,
    PredictionLockedError,
    PredictionService,
    is_prediction_locked,
    validate_score,
)


KICKOFF = datetime(2026, 6, 11, 19, 0, tzinfo=timezone.utc)
# wc_match stores naive UTC
KICKOFF_ROW = KICKOFF.replace(tzinfo=None)


class TestLockWindow:
    """Predictions close 5 minutes before kickoff."""

    def test_open_one_second_before_cutoff(self):
        now = KICKOFF - timedelta(minutes=5, seconds=1)
        assert is_prediction_locked(KICKOFF, now) is False

    def test_locked_exactly_at_cutoff(self):
        assert is_prediction_locked(KICKOFF, KICKOFF - timedelta(minutes=5)) is True

    def test_locked_after_kickoff(self):
        assert is_prediction_locked(KICKOFF, KICKOFF + timedelta(hours=2)) is True

    def test_custom_window(self):
        now = KICKOFF - timedelta(minutes=20)
        assert is_prediction_locked(KICKOFF, now, lock_minutes=30) is True
        assert is_prediction_locked(KICKOFF, now, lock_minutes=10) is False

    def test_timezones_compared_as_instants(self):
        brasilia = timezone(timedelta(hours=-3))
        now = datetime(2026, 6, 11, 15, 50, tzinfo=brasilia)   # 18:50Z
        assert is_prediction_locked(KICKOFF, now) is False


class TestValidateScore:
    @pytest.mark.parametrize("value", [0, 1, 7, 30])
    def test_accepts_non_negative_ints(self, value):
        assert validate_score(value) == value

    @pytest.mark.parametrize("value", [-1, 1.5, "2", None, True])
    def test_rejects_everything_else(self, value):
        with pytest.raises(InvalidPredictionError):
            validate_score(value)


def _service(*, member_status="active", match_row=None, kickoffs=None, now=KICKOFF - timedelta(days=1)):
    prediction_repo = AsyncMock()
    match_repo = AsyncMock()
    match_repo.get_match.return_value = match_row
    match_repo.get_kickoffs.return_value = kickoffs or {}
    league_repo = AsyncMock()
    league_repo.get_member_status.return_value = member_status
    svc = PredictionService(
        prediction_repo=prediction_repo,
        match_repo=match_repo,
        league_repo=league_repo,
        now=lambda: now,
    )
    return svc, prediction_repo


def _row(match_id="m-A1", kickoff=KICKOFF_ROW):
    return {
        "match_id": match_id,
        "home_team_id": "México",
        "away_team_id": "África do Sul",
        "kickoff_at": kickoff,
        "phase": "Grupos",
        "group_letter": "A",
        "status": "SCHEDULED",
    }


class TestPredictionService:
    """submit / submit_many against mocked repositories."""

    @pytest.mark.asyncio
    async def test_submit_saves(self):
        svc, repo = _service(match_row=_row())
        p = await svc.submit(account_id=7, league_id=3, match_id="m-A1", home_score=2, away_score=1)

        assert (p.user_id, p.league_id, p.match_id, p.home_score, p.away_score) == (7, 3, "m-A1", 2, 1)
        repo.upsert_prediction.assert_awaited_once_with(prediction=p)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [None, "pending"])
    async def test_submit_requires_active_membership(self, status):
        svc, repo = _service(member_status=status, match_row=_row())
        with pytest.raises(NotLeagueMemberError):
            await svc.submit(account_id=7, league_id=3, match_id="m-A1", home_score=2, away_score=1)
        repo.upsert_prediction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_unknown_match(self):
        svc, _repo = _service(match_row=None)
        with pytest.raises(InvalidPredictionError):
            await svc.submit(account_id=7, league_id=3, match_id="m-ZZ1", home_score=0, away_score=0)

    @pytest.mark.asyncio
    async def test_submit_locked(self):
        svc, repo = _service(match_row=_row(), now=KICKOFF - timedelta(minutes=4))
        with pytest.raises(PredictionLockedError):
            await svc.submit(account_id=7, league_id=3, match_id="m-A1", home_score=2, away_score=1)
        repo.upsert_prediction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_validates_before_touching_the_db(self):
        svc, _repo = _service(match_row=_row())
        with pytest.raises(InvalidPredictionError):
            await svc.submit(account_id=7, league_id=3, match_id="m-A1", home_score=-1, away_score=1)
        svc._leagues.get_member_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_many_skips_locked_and_unknown(self):
        kickoffs = {
            "m-A1": KICKOFF_ROW,
            "m-B1": (KICKOFF + timedelta(days=1)).replace(tzinfo=None),
        }
        svc, repo = _service(kickoffs=kickoffs, now=KICKOFF - timedelta(minutes=1))

        saved, skipped = await svc.submit_many(
            account_id=7,
            league_id=3,
            scores={"m-A1": (1, 0), "m-B1": (2, 2), "m-NOPE": (0, 0)},
        )

        assert saved == ["m-B1"]
        assert skipped == ["m-A1", "m-NOPE"]
        (written,) = repo.upsert_many.await_args.kwargs["predictions"]
        assert (written.match_id, written.home_score, written.away_score) == ("m-B1", 2, 2)

    @pytest.mark.asyncio
    async def test_submit_many_requires_membership(self):
        svc, repo = _service(member_status=None)
        with pytest.raises(NotLeagueMemberError):
            await svc.submit_many(account_id=7, league_id=3, scores={"m-A1": (1, 0)})
        repo.upsert_many.assert_not_awaited()
