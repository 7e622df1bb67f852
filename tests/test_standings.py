"""
Group tables: points, ordering, and which matches count.
"""

import random

import pytest

from domain.enums import MatchStatus, Phase
from domain.tournament import GROUPS, initial_matches
from services.standings_service import calculate_standings, match_round, rank_third_places

from conftest import group_match


MEX, RSA, KOR, EUD = GROUPS["A"]


class TestCalculateStandings:
    """calculate_standings over hand-built group A results."""

    def test_every_team_listed_before_any_result(self):
        """All 48 teams appear with zeroed records when nothing is played."""
        standings = calculate_standings(initial_matches())
        assert set(standings) == set(GROUPS)
        for letter, rows in standings.items():
            assert {r.team_id for r in rows} == set(GROUPS[letter])
            assert all(r.played == 0 and r.points == 0 for r in rows)

    def test_group_a_full_round_robin(self):
        """México wins all three 2-0; table and goal difference follow."""
        matches = [
            group_match("m-A1", MEX, RSA, 2, 0),
            group_match("m-A2", KOR, EUD, 1, 1),
            group_match("m-A3", MEX, KOR, 2, 0, day=6),
            group_match("m-A4", EUD, RSA, 0, 1, day=6),
            group_match("m-A5", EUD, MEX, 0, 2, day=12),
            group_match("m-A6", RSA, KOR, 0, 0, day=12),
        ]
        table = calculate_standings(matches)["A"]

        assert [r.team_id for r in table] == [MEX, RSA, KOR, EUD]
        top = table[0]
        assert (top.points, top.played, top.won, top.gf, top.ga, top.gd) == (9, 3, 3, 6, 0, 6)
        assert (table[1].points, table[1].gd) == (4, -1)
        assert (table[2].points, table[2].drawn) == (2, 2)
        assert (table[3].points, table[3].lost) == (1, 2)

    def test_points_conservation(self):
        """A decisive match hands out 3 points in total, a draw 2."""
        rng = random.Random(2026)
        for _ in range(50):
            h, a = rng.randint(0, 5), rng.randint(0, 5)
            table = calculate_standings([group_match("m-A1", MEX, RSA, h, a)])["A"]
            total = sum(r.points for r in table)
            assert total == (2 if h == a else 3), f"{h}-{a} gave {total}"

    def test_scheduled_matches_ignored(self):
        """Only FINISHED or IN_PROGRESS matches count."""
        matches = [group_match("m-A1", MEX, RSA, 3, 0, status=MatchStatus.SCHEDULED)]
        table = calculate_standings(matches)["A"]
        assert all(r.played == 0 for r in table)

    def test_live_match_with_null_score_counts_as_goalless(self):
        """A live match without a score yet is a 0-0 in the table."""
        matches = [group_match("m-A1", MEX, RSA, status=MatchStatus.IN_PROGRESS)]
        table = {r.team_id: r for r in calculate_standings(matches)["A"]}
        assert table[MEX].drawn == 1 and table[RSA].drawn == 1
        assert table[MEX].points == 1

    def test_unknown_team_skipped(self):
        """A match naming a team outside its group does not corrupt the table."""
        matches = [group_match("m-A1", MEX, "Atlântida", 5, 0)]
        table = calculate_standings(matches)["A"]
        assert all(r.played == 0 for r in table)

    def test_tie_break_order(self):
        """Points, goal difference, goals for, then team id."""
        groups = {"X": ("Delta", "Alpha", "Charlie", "Bravo")}
        matches = [
            group_match("m-X1", "Delta", "Alpha", 3, 2, group="X"),
            group_match("m-X2", "Charlie", "Bravo", 1, 0, group="X"),
        ]
        table = calculate_standings(matches, groups)["X"]
        # Delta and Charlie: 3 pts, gd +1; Delta scored more
        # Alpha and Bravo: 0 pts, gd -1; Alpha scored more
        assert [r.team_id for r in table] == ["Delta", "Charlie", "Alpha", "Bravo"]

        untouched = calculate_standings([], groups)["X"]
        assert [r.team_id for r in untouched] == ["Alpha", "Bravo", "Charlie", "Delta"]

    def test_deterministic_regardless_of_match_order(self):
        """Same results in a different order give the same tables."""
        matches = [m.with_result(i % 3, (i + 1) % 2) for i, m in enumerate(initial_matches()) if m.phase == Phase.GROUP]
        shuffled = list(matches)
        random.Random(7).shuffle(shuffled)
        assert calculate_standings(matches) == calculate_standings(shuffled)


class TestRankThirdPlaces:
    """Global ranking of the twelve 3rd-placed teams."""

    def test_one_entry_per_group_letter_order_on_full_tie(self):
        ranked = rank_third_places(calculate_standings(initial_matches()))
        assert [e.group for e in ranked] == list("ABCDEFGHIJKL")

    def test_points_then_goal_difference(self):
        groups = {
            "A": ("a1", "a2", "a3", "a4"),
            "B": ("b1", "b2", "b3", "b4"),
        }
        matches = [
            # b2 finishes third on 3 points (gd -1)
            group_match("m-B1", "b1", "b3", 0, 1, group="B"),
            group_match("m-B2", "b1", "b2", 5, 0, group="B"),
            group_match("m-B3", "b2", "b4", 4, 0, group="B"),
        ]
        standings = calculate_standings(matches, groups)
        ranked = rank_third_places(standings)
        assert [e.group for e in ranked] == ["B", "A"]
        assert ranked[0].points == 3


class TestMatchRound:
    """Group-stage round number from kickoff order."""

    def test_rounds_of_group_a(self):
        matches = initial_matches()
        by_id = {m.id: m for m in matches}
        assert match_round(by_id["m-A1"], matches) == 1
        assert match_round(by_id["m-A2"], matches) == 1
        # A4 kicks off before A3
        assert match_round(by_id["m-A4"], matches) == 2
        assert match_round(by_id["m-A3"], matches) == 2
        assert match_round(by_id["m-A5"], matches) == 3
        assert match_round(by_id["m-A6"], matches) == 3

    def test_knockout_has_no_round(self):
        matches = initial_matches()
        final = next(m for m in matches if m.id == "m-FINAL")
        assert match_round(final, matches) is None

    @pytest.mark.parametrize("letter", list(GROUPS))
    def test_two_matches_per_round(self, letter):
        matches = initial_matches()
        rounds = [match_round(m, matches) for m in matches if m.group == letter]
        assert sorted(rounds) == [1, 1, 2, 2, 3, 3]
