"""
Knockout resolution: group slots, best-third assignment, winner/loser propagation.
"""

import logging
import random
from datetime import datetime, timezone
from itertools import combinations
from unittest.mock import AsyncMock

import pytest

from domain.enums import MatchStatus, Phase
from domain.models import THIRD_PLACE_CONFLICT, Match, ThirdPlaceEntry, is_placeholder
from domain.tournament import (
    FINAL_MATCH_ID,
    GROUPS,
    KNOCKOUT_ORDER,
    SCHEDULE,
    THIRD_PLACE_ELIGIBILITY,
    THIRD_PLACE_MATCH_ID,
    initial_matches,
)
from services.bracket_service import (
    BracketService,
    InvalidResultError,
    MatchNotFoundError,
    assign_third_places,
    champion,
    resolve_bracket,
)
from services.standings_service import calculate_standings, rank_third_places

from conftest import set_score


def _by_id(matches):
    return {m.id: m for m in matches}


def _third(group, points=4, gd=0, gf=3):
    return ThirdPlaceEntry(group=group, team_id=f"3º de {group}", points=points, gd=gd, gf=gf)


def _play_group_stage(seed):
    rng = random.Random(seed)
    return [
        m.with_result(rng.randint(0, 4), rng.randint(0, 4)) if m.phase == Phase.GROUP else m
        for m in initial_matches()
    ]


def _play_knockouts(matches):
    """Resolve phase by phase, home side always wins 2-1."""
    for phase in KNOCKOUT_ORDER:
        matches = resolve_bracket(matches)
        matches = [m.with_result(2, 1) if m.phase == phase else m for m in matches]
    return resolve_bracket(matches)


def _knockout(match_id, home, away, phase, home_score=None, away_score=None):
    status = MatchStatus.FINISHED if home_score is not None else MatchStatus.SCHEDULED
    return Match(
        id=match_id,
        home_team_id=home,
        away_team_id=away,
        date=datetime(2026, 7, 14, 20, 0, tzinfo=timezone.utc),
        phase=phase,
        status=status,
        home_score=home_score,
        away_score=away_score,
    )


class TestScheduleData:
    """The fixed 2026 fixture list."""

    def test_104_unique_matches(self):
        ids = [row[0] for row in SCHEDULE]
        assert len(ids) == 104
        assert len(set(ids)) == 104

    def test_phase_sizes(self):
        matches = initial_matches()
        counts = {phase: sum(1 for m in matches if m.phase == phase) for phase in Phase}
        assert counts == {
            Phase.GROUP: 72,
            Phase.ROUND_32: 16,
            Phase.ROUND_16: 8,
            Phase.QUARTER: 4,
            Phase.SEMI: 2,
            Phase.FINAL: 2,
        }

    def test_every_third_place_slot_has_an_eligibility_entry(self):
        slots = {m.id for m in initial_matches() if m.away_team_id.startswith("3º Grupo")}
        assert slots == set(THIRD_PLACE_ELIGIBILITY)

    def test_kickoffs_are_timezone_aware(self):
        assert all(m.date.tzinfo is not None for m in initial_matches())


class TestAssignThirdPlaces:
    """Backtracking assignment of the 8 best third-placed teams."""

    def test_every_qualifying_combination_is_assignable(self):
        """All 495 ways of picking 8 groups out of 12 give a complete, valid assignment."""
        combos = list(combinations(GROUPS, 8))
        assert len(combos) == 495

        for combo in combos:
            qualified = [_third(g) for g in combo]
            assignment = assign_third_places(qualified, THIRD_PLACE_ELIGIBILITY)

            assert set(assignment) == set(THIRD_PLACE_ELIGIBILITY), f"incomplete for {''.join(combo)}"
            groups_used = [e.group for e in assignment.values()]
            assert len(set(groups_used)) == 8, f"group reused for {''.join(combo)}"
            for match_id, entry in assignment.items():
                assert entry.group in THIRD_PLACE_ELIGIBILITY[match_id]

    def test_groups_a_to_h(self):
        """Deterministic result: table order for equal-size sets, ranking order for candidates."""
        assignment = assign_third_places([_third(g) for g in "ABCDEFGH"], THIRD_PLACE_ELIGIBILITY)
        assert {mid: e.group for mid, e in assignment.items()} == {
            "m-R32-1": "A",
            "m-R32-2": "C",
            "m-R32-7": "B",
            "m-R32-8": "E",
            "m-R32-11": "F",
            "m-R32-12": "H",
            "m-R32-15": "G",
            "m-R32-16": "D",
        }

    def test_better_ranked_team_tried_first(self):
        assignment = assign_third_places([_third("B"), _third("A")], {"x": ("A", "B")})
        assert assignment["x"].group == "B"

    def test_excluded_groups_are_skipped(self):
        assignment = assign_third_places([_third("A"), _third("B")], {"x": ("A", "B")}, excluded_groups={"A"})
        assert assignment["x"].group == "B"

    def test_impossible_table_returns_largest_partial(self):
        assignment = assign_third_places([_third("A"), _third("B")], {"x": ("A",), "y": ("A",)})
        assert len(assignment) == 1
        assert next(iter(assignment.values())).group == "A"

    def test_backtracks_out_of_greedy_dead_end(self):
        """Greedy would give A to x and leave y empty."""
        assignment = assign_third_places(
            [_third("A"), _third("B")],
            {"x": ("A", "B"), "y": ("A", "C")},
        )
        assert {mid: e.group for mid, e in assignment.items()} == {"x": "B", "y": "A"}


class TestResolveBracket:
    """resolve_bracket over the real schedule."""

    def test_group_slots_follow_standings(self):
        matches = _play_group_stage(seed=11)
        standings = calculate_standings(matches)
        resolved = _by_id(resolve_bracket(matches))

        assert resolved["m-R32-1"].home_team_id == standings["E"][0].team_id
        assert resolved["m-R32-3"].home_team_id == standings["A"][1].team_id
        assert resolved["m-R32-3"].away_team_id == standings["B"][1].team_id

    def test_third_place_slots_use_the_best_eight(self):
        matches = _play_group_stage(seed=3)
        standings = calculate_standings(matches)
        qualified = {e.team_id for e in rank_third_places(standings)[:8]}
        resolved = _by_id(resolve_bracket(matches))

        placed = {resolved[mid].away_team_id for mid in THIRD_PLACE_ELIGIBILITY}
        assert placed == qualified

    def test_idempotent(self):
        once = resolve_bracket(_play_group_stage(seed=5))
        assert resolve_bracket(once) == once

    def test_idempotent_before_any_result(self):
        once = resolve_bracket(initial_matches())
        assert resolve_bracket(once) == once

    def test_fully_concrete_list_unchanged(self):
        matches = [
            _knockout("m-SF-1", "X", "Y", Phase.SEMI, 1, 0),
            _knockout("m-SF-2", "Z", "W", Phase.SEMI, 0, 2),
            _knockout(FINAL_MATCH_ID, "X", "W", Phase.FINAL),
        ]
        assert resolve_bracket(matches, {}) == matches

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 6, 7, 8])
    def test_full_tournament_has_no_placeholders(self, seed):
        """Random group results, decisive knockouts: every slot filled, one champion."""
        matches = _play_knockouts(_play_group_stage(seed))

        assert not [m.id for m in matches if not m.is_resolved]
        r32_teams = [t for m in matches if m.phase == Phase.ROUND_32 for t in (m.home_team_id, m.away_team_id)]
        assert len(set(r32_teams)) == 32

        winner = champion(matches)
        final = _by_id(matches)[FINAL_MATCH_ID]
        assert winner == final.home_team_id
        assert not is_placeholder(winner)

    def test_draw_does_not_propagate(self):
        matches = resolve_bracket(initial_matches())
        r32_1 = _by_id(matches)["m-R32-1"]

        drawn = resolve_bracket(set_score(matches, "m-R32-1", 1, 1))
        assert _by_id(drawn)["m-R16-1"].home_team_id == "Venc. R32-1"

        decided = resolve_bracket(set_score(matches, "m-R32-1", 0, 2))
        assert _by_id(decided)["m-R16-1"].home_team_id == r32_1.away_team_id

    def test_winner_and_loser_of_semis(self):
        matches = [
            _knockout("m-SF-1", "X", "Y", Phase.SEMI, 2, 1),
            _knockout("m-SF-2", "Z", "W", Phase.SEMI, 0, 3),
            _knockout(THIRD_PLACE_MATCH_ID, "Perd. SF-1", "Perd. SF-2", Phase.FINAL),
            _knockout(FINAL_MATCH_ID, "Venc. SF-1", "Venc. SF-2", Phase.FINAL),
        ]
        resolved = _by_id(resolve_bracket(matches, {}))

        assert (resolved[THIRD_PLACE_MATCH_ID].home_team_id, resolved[THIRD_PLACE_MATCH_ID].away_team_id) == ("Y", "Z")
        assert (resolved[FINAL_MATCH_ID].home_team_id, resolved[FINAL_MATCH_ID].away_team_id) == ("X", "W")
        assert champion(resolved.values()) is None

        played = resolve_bracket(set_score(list(resolved.values()), FINAL_MATCH_ID, 0, 1), {})
        assert champion(played) == "W"

    def test_unresolved_source_is_not_propagated(self):
        """A scored match whose own slots are still placeholders passes nothing on."""
        matches = [
            _knockout("m-SF-1", "Venc. QF-1", "Y", Phase.SEMI, 2, 1),
            _knockout(FINAL_MATCH_ID, "Venc. SF-1", "Venc. SF-2", Phase.FINAL),
        ]
        resolved = _by_id(resolve_bracket(matches, {}))
        assert resolved[FINAL_MATCH_ID].home_team_id == "Venc. SF-1"

    @pytest.mark.parametrize("status", [MatchStatus.IN_PROGRESS, MatchStatus.SCHEDULED])
    def test_undecided_semi_is_not_propagated(self, status):
        matches = [
            _knockout("m-SF-1", "Brasil", "França", Phase.SEMI, 1, 0).with_result(1, 0, status),
            _knockout("m-SF-2", "Z", "W", Phase.SEMI, 0, 3),
            _knockout(THIRD_PLACE_MATCH_ID, "Perd. SF-1", "Perd. SF-2", Phase.FINAL),
            _knockout(FINAL_MATCH_ID, "Venc. SF-1", "Venc. SF-2", Phase.FINAL),
        ]
        resolved = _by_id(resolve_bracket(matches, {}))

        assert (resolved[FINAL_MATCH_ID].home_team_id, resolved[FINAL_MATCH_ID].away_team_id) == ("Venc. SF-1", "W")
        assert resolved[THIRD_PLACE_MATCH_ID].home_team_id == "Perd. SF-1"

    def test_live_final_has_no_champion(self):
        final = _knockout(FINAL_MATCH_ID, "X", "W", Phase.FINAL, 2, 0)
        assert champion([final.with_result(2, 0, MatchStatus.IN_PROGRESS)]) is None
        assert champion([final]) == "X"

    def test_inconsistent_table_marks_conflict_and_keeps_going(self, caplog):
        caplog.set_level(logging.WARNING, logger="services.bracket_service")
        eligibility = {"m-R32-1": ("A",), "m-R32-2": ("A",)}
        matches = initial_matches()
        standings = calculate_standings(matches)

        resolved = _by_id(resolve_bracket(matches, eligibility=eligibility))

        assert resolved["m-R32-1"].away_team_id == standings["A"][2].team_id
        assert resolved["m-R32-2"].away_team_id == THIRD_PLACE_CONFLICT
        # the rest of the bracket still resolves
        assert resolved["m-R32-3"].home_team_id == standings["A"][1].team_id
        assert "third-place" in caplog.text

        again = resolve_bracket(list(resolved.values()), eligibility=eligibility)
        assert _by_id(again)["m-R32-2"].away_team_id == THIRD_PLACE_CONFLICT


class TestBracketService:
    """BracketService against mocked repositories."""

    @pytest.mark.asyncio
    async def test_empty_table_falls_back_to_schedule(self):
        match_repo = AsyncMock()
        match_repo.list_matches.return_value = []
        svc = BracketService(match_repo)

        matches = await svc.get_matches()
        assert len(matches) == 104

    @pytest.mark.asyncio
    async def test_rows_are_mapped(self):
        match_repo = AsyncMock()
        match_repo.list_matches.return_value = [
            {
                "match_id": "m-A1",
                "home_team_id": "México",
                "away_team_id": "África do Sul",
                "kickoff_at": datetime(2026, 6, 11, 19, 0),
                "phase": "Grupos",
                "group_letter": "A",
                "status": "FINISHED",
                "home_score": 1,
                "away_score": 0,
                "location": None,
            }
        ]
        svc = BracketService(match_repo)

        (m,) = await svc.get_matches()
        assert m.date == datetime(2026, 6, 11, 19, 0, tzinfo=timezone.utc)
        assert (m.home_score, m.away_score, m.status) == (1, 0, MatchStatus.FINISHED)

        table = (await svc.standings())["A"]
        assert table[0].team_id == "México"

    @pytest.mark.asyncio
    async def test_simulation_overlay_applied(self):
        match_repo = AsyncMock()
        match_repo.list_matches.return_value = []
        sim_repo = AsyncMock()
        sim_repo.get_simulation.return_value = {"m-A1": {"home": 3, "away": 0}}
        svc = BracketService(match_repo, sim_repo)

        real = _by_id(await svc.get_matches())
        sim_repo.get_simulation.assert_not_awaited()
        assert real["m-A1"].home_score is None

        simulated = _by_id(await svc.get_matches(simulation_for=7))
        sim_repo.get_simulation.assert_awaited_once_with(account_id=7)
        a1 = simulated["m-A1"]
        assert (a1.home_score, a1.away_score, a1.status) == (3, 0, MatchStatus.FINISHED)

    @pytest.mark.asyncio
    async def test_seed_schedule(self):
        match_repo = AsyncMock()
        match_repo.insert_schedule.return_value = 104
        svc = BracketService(match_repo)

        assert await svc.seed_schedule() == 104
        assert len(match_repo.insert_schedule.await_args.kwargs["matches"]) == 104

    @pytest.mark.asyncio
    @pytest.mark.parametrize("home, away", [(1, None), (None, 2), (-1, 0), (True, 1), (1.5, 0)])
    async def test_record_result_rejects_bad_scores(self, home, away):
        match_repo = AsyncMock()
        svc = BracketService(match_repo)

        with pytest.raises(InvalidResultError):
            await svc.record_result(match_id="m-A1", home_score=home, away_score=away)
        match_repo.set_result.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_record_result_unknown_match(self):
        match_repo = AsyncMock()
        match_repo.get_match.return_value = None
        svc = BracketService(match_repo)

        with pytest.raises(MatchNotFoundError):
            await svc.record_result(match_id="m-ZZ9", home_score=1, away_score=0)

    @pytest.mark.asyncio
    async def test_record_result(self):
        match_repo = AsyncMock()
        match_repo.get_match.return_value = {
            "match_id": "m-A1",
            "home_team_id": "México",
            "away_team_id": "África do Sul",
            "kickoff_at": datetime(2026, 6, 11, 19, 0),
            "phase": "Grupos",
            "group_letter": "A",
            "status": "SCHEDULED",
        }
        match_repo.set_result.return_value = 1
        svc = BracketService(match_repo)

        m = await svc.record_result(match_id="m-A1", home_score=2, away_score=1, reported_by_account_id=5)

        assert (m.home_score, m.away_score, m.status) == (2, 1, MatchStatus.FINISHED)
        match_repo.set_result.assert_awaited_once_with(
            match_id="m-A1",
            home_score=2,
            away_score=1,
            status="FINISHED",
            updated_by_account_id=5,
        )
