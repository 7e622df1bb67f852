"""
Per-user simulation overlay: storage shape, application, import/export.
"""

from unittest.mock import AsyncMock

import pytest

from domain.enums import MatchStatus
from domain.tournament import initial_matches
from services.simulation_service import (
    SimulationService,
    SimulationServiceError,
    apply_overlay,
    overlay_from_json,
    overlay_to_json,
)

from conftest import set_score


class TestOverlayJson:
    def test_parses_stored_shape(self):
        data = {"m-A1": {"home": 2, "away": 1}, "m-B3": {"home": 0, "away": 0}}
        assert overlay_from_json(data) == {"m-A1": (2, 1), "m-B3": (0, 0)}

    @pytest.mark.parametrize(
        "junk",
        [
            {"m-A1": {"home": 2}},
            {"m-A1": {"home": None, "away": 1}},
            {"m-A1": {"home": -1, "away": 1}},
            {"m-A1": {"home": "x", "away": 1}},
            {"m-A1": {"home": "2", "away": 1}},
            {"m-A1": {"home": 1.7, "away": 1}},
            {"m-A1": {"home": True, "away": 0}},
            {"m-A1": [2, 1]},
        ],
    )
    def test_drops_malformed_entries(self, junk):
        assert overlay_from_json(junk) == {}

    def test_empty(self):
        assert overlay_from_json(None) == {}

    def test_writes_sorted_objects(self):
        assert list(overlay_to_json({"m-B1": (0, 0), "m-A1": (1, 2)}).items()) == [
            ("m-A1", {"home": 1, "away": 2}),
            ("m-B1", {"home": 0, "away": 0}),
        ]


class TestApplyOverlay:
    def test_simulated_match_counts_as_finished(self):
        matches = apply_overlay(initial_matches(), {"m-A1": (3, 3)})
        a1 = next(m for m in matches if m.id == "m-A1")
        assert (a1.home_score, a1.away_score, a1.status) == (3, 3, MatchStatus.FINISHED)

    def test_overrides_real_result_and_leaves_the_rest(self):
        real = set_score(initial_matches(), "m-A1", 1, 0)
        matches = apply_overlay(real, {"m-A1": (0, 2)})

        by_id = {m.id: m for m in matches}
        assert (by_id["m-A1"].home_score, by_id["m-A1"].away_score) == (0, 2)
        assert by_id["m-A2"].home_score is None
        assert len(matches) == len(real)


def _service(stored=None, rows=()):
    sim_repo = AsyncMock()
    sim_repo.get_simulation.return_value = stored
    prediction_repo = AsyncMock()
    prediction_repo.list_for_user.return_value = list(rows)
    prediction_service = AsyncMock()
    svc = SimulationService(
        simulation_repo=sim_repo,
        prediction_repo=prediction_repo,
        prediction_service=prediction_service,
    )
    return svc, sim_repo, prediction_service


class TestSimulationService:
    @pytest.mark.asyncio
    async def test_set_score(self):
        svc, repo, _ = _service(stored={"m-A1": {"home": 1, "away": 0}})
        overlay = await svc.set_score(account_id=4, match_id="m-A2", home_score=2, away_score=2)

        assert overlay == {"m-A1": (1, 0), "m-A2": (2, 2)}
        repo.save_simulation.assert_awaited_once_with(
            account_id=4,
            data={"m-A1": {"home": 1, "away": 0}, "m-A2": {"home": 2, "away": 2}},
        )

    @pytest.mark.asyncio
    async def test_set_score_rejects_negative(self):
        svc, repo, _ = _service()
        with pytest.raises(SimulationServiceError):
            await svc.set_score(account_id=4, match_id="m-A1", home_score=-1, away_score=0)
        repo.save_simulation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_score(self):
        svc, repo, _ = _service(stored={"m-A1": {"home": 1, "away": 0}})
        assert await svc.clear_score(account_id=4, match_id="m-A1") == {}
        repo.save_simulation.assert_awaited_once_with(account_id=4, data={})

    @pytest.mark.asyncio
    async def test_clear_missing_score_writes_nothing(self):
        svc, repo, _ = _service(stored={"m-A1": {"home": 1, "away": 0}})
        await svc.clear_score(account_id=4, match_id="m-B1")
        repo.save_simulation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset(self):
        svc, repo, _ = _service()
        await svc.reset(account_id=4)
        repo.delete_simulation.assert_awaited_once_with(account_id=4)

    @pytest.mark.asyncio
    async def test_sync_copies_finished_only(self):
        matches = set_score(initial_matches(), "m-A1", 2, 0)
        matches = set_score(matches, "m-A2", 1, 1, MatchStatus.IN_PROGRESS)
        svc, repo, _ = _service()

        assert await svc.sync_real_results(account_id=4, matches=matches) == 1
        repo.save_simulation.assert_awaited_once_with(account_id=4, data={"m-A1": {"home": 2, "away": 0}})

    @pytest.mark.asyncio
    async def test_import_from_league(self):
        rows = [
            {"league_id": 9, "account_id": 4, "match_id": "m-A1", "home_score": 3, "away_score": 1},
            {"league_id": 9, "account_id": 4, "match_id": "m-C1", "home_score": 0, "away_score": 0},
        ]
        svc, repo, _ = _service(stored={"m-A1": {"home": 0, "away": 0}}, rows=rows)

        assert await svc.import_from_league(account_id=4, league_id=9) == 2
        data = repo.save_simulation.await_args.kwargs["data"]
        assert data == {"m-A1": {"home": 3, "away": 1}, "m-C1": {"home": 0, "away": 0}}

    @pytest.mark.asyncio
    async def test_export_whole_simulation(self):
        svc, _, predictions = _service(stored={"m-A1": {"home": 1, "away": 0}, "m-B1": {"home": 2, "away": 2}})
        predictions.submit_many.return_value = (["m-B1"], ["m-A1"])

        result = await svc.export_to_league(account_id=4, league_id=9, matches=initial_matches())

        assert result.exported == ("m-B1",)
        assert result.skipped_locked == ("m-A1",)
        predictions.submit_many.assert_awaited_once_with(
            account_id=4,
            league_id=9,
            scores={"m-A1": (1, 0), "m-B1": (2, 2)},
        )

    @pytest.mark.asyncio
    async def test_export_one_group(self):
        svc, _, predictions = _service(stored={"m-A1": {"home": 1, "away": 0}, "m-B1": {"home": 2, "away": 2}})
        predictions.submit_many.return_value = (["m-B1"], [])

        await svc.export_to_league(account_id=4, league_id=9, matches=initial_matches(), group="b")

        assert predictions.submit_many.await_args.kwargs["scores"] == {"m-B1": (2, 2)}

    @pytest.mark.asyncio
    async def test_export_nothing(self):
        svc, _, predictions = _service(stored={"m-A1": {"home": 1, "away": 0}})
        with pytest.raises(SimulationServiceError):
            await svc.export_to_league(account_id=4, league_id=9, matches=initial_matches(), group="L")
        predictions.submit_many.assert_not_awaited()
