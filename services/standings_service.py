# services/standings_service.py
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from domain.enums import Phase
from domain.models import GroupStanding, Match, ThirdPlaceEntry
from domain.tournament import GROUPS

log = logging.getLogger(__name__)


def _standing_sort_key(s: GroupStanding) -> tuple[int, int, int, str]:
    return (-s.points, -s.gd, -s.gf, s.team_id)


def calculate_standings(
    matches: Iterable[Match],
    groups: Mapping[str, Sequence[str]] = GROUPS,
) -> dict[str, list[GroupStanding]]:
    """
    Group tables from scratch: every configured team starts at zero, then every
    group match that is FINISHED or IN_PROGRESS is applied.

    Order: points, goal difference, goals for (all desc), then team id asc.
    Null scores on a live match count as 0.
    """
    tables: dict[str, dict[str, GroupStanding]] = {
        letter: {team: GroupStanding(team_id=team) for team in teams}
        for letter, teams in groups.items()
    }

    for m in matches:
        if m.phase != Phase.GROUP or not m.is_played or not m.group:
            continue

        table = tables.get(m.group)
        home = table.get(m.home_team_id) if table is not None else None
        away = table.get(m.away_team_id) if table is not None else None
        if home is None or away is None:
            log.debug("Skipping match %s: %s vs %s not in group %s", m.id, m.home_team_id, m.away_team_id, m.group)
            continue

        h = m.home_score or 0
        a = m.away_score or 0
        home.record(h, a)
        away.record(a, h)

    return {
        letter: sorted(table.values(), key=_standing_sort_key)
        for letter, table in tables.items()
    }


def rank_third_places(standings: Mapping[str, Sequence[GroupStanding]]) -> list[ThirdPlaceEntry]:
    """
    Every group's 3rd-placed team, best first.
    Ties past goals-for fall back to group letter (fair play is not tracked).
    """
    entries: list[ThirdPlaceEntry] = []
    for letter, rows in standings.items():
        if len(rows) < 3:
            continue
        s = rows[2]
        entries.append(ThirdPlaceEntry(group=letter, team_id=s.team_id, points=s.points, gd=s.gd, gf=s.gf))

    entries.sort(key=lambda e: (-e.points, -e.gd, -e.gf, e.group))
    return entries


def match_round(match: Match, matches: Sequence[Match]) -> Optional[int]:
    """
    Group-stage round (1, 2 or 3): matches of a group ordered by kickoff, two per round.
    """
    if match.phase != Phase.GROUP or not match.group:
        return None
    group_matches = sorted(
        (m for m in matches if m.phase == Phase.GROUP and m.group == match.group),
        key=lambda m: (m.date, m.id),
    )
    for idx, m in enumerate(group_matches):
        if m.id == match.id:
            return idx // 2 + 1
    return None
