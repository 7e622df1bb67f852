"""
Text and PNG renderers.
"""

from domain.enums import MatchStatus
from domain.models import GroupStanding, LeaderboardEntry, ThirdPlaceEntry, normalize_match_id
from domain.tournament import initial_matches
from renderers.bracket_diagram import BracketDiagramRenderer
from renderers.bracket_view import BracketView
from renderers.leaderboard_view import LeaderboardOptions, LeaderboardView
from renderers.standings_view import StandingsView

from conftest import set_score


class TestLeaderboardView:
    def test_ties_share_a_position(self):
        entries = [
            LeaderboardEntry(user_id=1, total_points=20, exact_scores=2),
            LeaderboardEntry(user_id=2, total_points=20, exact_scores=2),
            LeaderboardEntry(user_id=3, total_points=20, exact_scores=1),
        ]
        out = LeaderboardView().render(entries, {1: "Ana", 2: "Bia", 3: "Caio"})
        rows = out.splitlines()[4:7]

        assert [r.split()[0] for r in rows] == ["1", "1", "3"]
        assert out.startswith("```text\n=== Ranking · Geral ===")
        assert out.endswith("\n```")

    def test_missing_name_falls_back_to_account_id(self):
        out = LeaderboardView().render([LeaderboardEntry(user_id=77, total_points=0, exact_scores=0)], {})
        assert "acct:77" in out

    def test_empty_board(self):
        out = LeaderboardView().render([], {}, view="knockout")
        assert "Mata-mata" in out
        assert "(sem participantes)" in out

    def test_max_rows(self):
        entries = [LeaderboardEntry(user_id=i, total_points=100 - i, exact_scores=0) for i in range(30)]
        out = LeaderboardView().render(entries, {}, opts=LeaderboardOptions(max_rows=5))
        assert "acct:4" in out
        assert "acct:5" not in out


class TestStandingsView:
    def test_group_table(self):
        rows = [
            GroupStanding(team_id="México", points=9, played=3, won=3, gf=7, ga=1, gd=6),
            GroupStanding(team_id="África do Sul", points=0, played=3, lost=3, gf=1, ga=7, gd=-6),
        ]
        out = StandingsView().render({"A": rows, "B": []}, groups=["A"])

        assert "Grupo A" in out
        assert "Grupo B" not in out
        assert "+6" in out
        assert "-6" in out

    def test_third_places_mark_qualifiers(self):
        ranked = [ThirdPlaceEntry(group=g, team_id=f"T{g}", points=4, gd=0, gf=2) for g in "ABCDEFGHIJKL"]
        out = StandingsView().render_third_places(ranked)
        lines = out.splitlines()

        marked = [line for line in lines if line.rstrip().endswith("*")]
        assert len(marked) == 8
        assert "* classificados (8)" in out


class TestBracketView:
    def test_phases_and_champion(self):
        out = BracketView().render(initial_matches(), champion="Brasil", max_lines=500)

        assert "-- 16-avos de Final --" in out
        assert "R32-1" in out
        assert "🏆 Campeão: Brasil" in out

    def test_scores_and_status(self):
        matches = set_score(initial_matches(), "m-R32-1", 2, 1)
        out = BracketView().render(matches, max_lines=500)
        line = next(l for l in out.splitlines() if "R32-1 " in l)
        assert " 2x1 " in line
        assert line.endswith("✅")

    def test_truncation_keeps_the_final(self):
        out = BracketView().render(initial_matches(), max_lines=12)
        assert "..." in out
        assert "FINAL" in out
        assert "R32-1 " not in out


class TestBracketDiagram:
    def test_renders_png(self):
        matches = set_score(initial_matches(), "m-R32-1", 1, 0, MatchStatus.FINISHED)
        data = BracketDiagramRenderer().render_png(matches, title="Copa 2026")
        assert data[:4] == b"\x89PNG"


class TestNormalizeMatchId:
    def test_variants(self):
        assert normalize_match_id("A1") == "m-A1"
        assert normalize_match_id(" m-a1 ") == "m-A1"
        assert normalize_match_id("r32-3") == "m-R32-3"
        assert normalize_match_id("M-final") == "m-FINAL"
