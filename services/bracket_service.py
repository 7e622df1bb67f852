# services/bracket_service.py
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from domain.enums import MatchStatus, Phase
from domain.models import (
    MATCH_ID_PREFIX,
    THIRD_PLACE_CONFLICT,
    GroupStanding,
    Match,
    ThirdPlaceEntry,
    parse_group_slot,
    parse_result_ref,
)
from domain.tournament import (
    FINAL_MATCH_ID,
    GROUPS,
    KNOCKOUT_ORDER,
    THIRD_PLACE_ELIGIBILITY,
    THIRD_PLACE_QUALIFIERS,
    initial_matches,
)
from repositories.match_repo import MatchRepo
from repositories.simulation_repo import SimulationRepo
from services.simulation_service import apply_overlay, overlay_from_json
from services.standings_service import calculate_standings, rank_third_places

log = logging.getLogger(__name__)


class BracketServiceError(Exception):
    pass


class MatchNotFoundError(BracketServiceError):
    pass


class InvalidResultError(BracketServiceError):
    pass


# -------------------------
# Pure resolution
# -------------------------


def _is_third_place_slot(team_id: str) -> bool:
    if team_id == THIRD_PLACE_CONFLICT:
        return True
    slot = parse_group_slot(team_id)
    return slot is not None and slot.rank == 3


def _resolve_group_slot(team_id: str, standings: Mapping[str, Sequence[GroupStanding]]) -> str:
    slot = parse_group_slot(team_id)
    if slot is None or slot.is_third_place_pool:
        return team_id
    rows = standings.get(slot.groups[0])
    if not rows or len(rows) < slot.rank:
        return team_id
    return rows[slot.rank - 1].team_id


def assign_third_places(
    qualified: Sequence[ThirdPlaceEntry],
    eligibility: Mapping[str, Sequence[str]],
    *,
    excluded_groups: Iterable[str] = (),
) -> dict[str, ThirdPlaceEntry]:
    """
    Match each slot in `eligibility` (match id -> allowed groups) with one
    qualified third-placed team, no team used twice.

    Backtracking, most constrained match first; within a match candidates are
    tried in ranking order. Returns a complete assignment when one exists,
    otherwise the largest partial assignment reached.
    """
    excluded = set(excluded_groups)
    candidates = [q for q in qualified if q.group not in excluded]
    # sorted() is stable: equal-size sets keep table order
    order = sorted(eligibility, key=lambda mid: len(eligibility[mid]))

    assignment: dict[str, ThirdPlaceEntry] = {}
    used: set[str] = set()
    best: dict[str, ThirdPlaceEntry] = {}

    def search(i: int) -> bool:
        nonlocal best
        if len(assignment) > len(best):
            best = dict(assignment)
        if i == len(order):
            return True

        match_id = order[i]
        allowed = eligibility[match_id]
        for entry in candidates:
            if entry.group in used or entry.group not in allowed:
                continue
            assignment[match_id] = entry
            used.add(entry.group)
            if search(i + 1):
                return True
            del assignment[match_id]
            used.discard(entry.group)
        return False

    if search(0):
        return dict(assignment)
    return best


def _resolve_third_places(
    matches: list[Match],
    standings: Mapping[str, Sequence[GroupStanding]],
    eligibility: Mapping[str, Sequence[str]],
    qualifiers: int,
) -> list[Match]:
    pending = {
        m.id: eligibility[m.id]
        for m in matches
        if m.id in eligibility and _is_third_place_slot(m.away_team_id)
    }
    if not pending:
        return matches

    group_of = {s.team_id: letter for letter, rows in standings.items() for s in rows}
    already_placed = {
        group_of[m.away_team_id]
        for m in matches
        if m.id in eligibility and m.id not in pending and m.away_team_id in group_of
    }

    qualified = rank_third_places(standings)[:qualifiers]
    assignment = assign_third_places(qualified, pending, excluded_groups=already_placed)

    if len(assignment) < len(pending):
        missing = sorted(set(pending) - set(assignment))
        log.warning(
            "No complete third-place assignment (qualified groups=%s); marking %s as %r",
            "".join(q.group for q in qualified),
            ", ".join(missing),
            THIRD_PLACE_CONFLICT,
        )

    out: list[Match] = []
    for m in matches:
        if m.id in pending:
            entry = assignment.get(m.id)
            m = m.with_teams(m.home_team_id, entry.team_id if entry else THIRD_PLACE_CONFLICT)
        out.append(m)
    return out


def _find_match(ref: str, by_id: Mapping[str, Match]) -> Optional[Match]:
    return by_id.get(ref) or by_id.get(MATCH_ID_PREFIX + ref)


def _resolve_result_ref(team_id: str, by_id: Mapping[str, Match]) -> str:
    ref = parse_result_ref(team_id)
    if ref is None:
        return team_id
    source = _find_match(ref.match_ref, by_id)
    # a live leader is not a winner yet
    if source is None or source.status != MatchStatus.FINISHED or not source.is_resolved:
        return team_id
    team = source.winner() if ref.winner else source.loser()
    return team if team is not None else team_id


def _propagate_results(matches: list[Match]) -> list[Match]:
    out = list(matches)
    by_id = {m.id: m for m in out}

    # a phase only reads matches of earlier phases, so one pass per phase suffices
    for phase in KNOCKOUT_ORDER:
        for i, m in enumerate(out):
            if m.phase != phase:
                continue
            resolved = m.with_teams(
                _resolve_result_ref(m.home_team_id, by_id),
                _resolve_result_ref(m.away_team_id, by_id),
            )
            if resolved is not m:
                out[i] = resolved
                by_id[m.id] = resolved
    return out


def resolve_bracket(
    matches: Iterable[Match],
    standings: Mapping[str, Sequence[GroupStanding]] | None = None,
    *,
    groups: Mapping[str, Sequence[str]] = GROUPS,
    eligibility: Mapping[str, Sequence[str]] = THIRD_PLACE_ELIGIBILITY,
    qualifiers: int = THIRD_PLACE_QUALIFIERS,
) -> list[Match]:
    """
    Replace knockout placeholders with concrete teams wherever the current
    results allow it:

      1) "1º Grupo A" / "2º Grupo B"     -> group standings
      2) "3º Grupo A/B/C/D/F"            -> best 3rd places, matched to R32 slots
      3) "Venc. R32-1" / "Perd. SF-1"    -> winner/loser of a decided match

    Pure: returns a new list, never raises on inconsistent data. Running it
    on its own output is a no-op.
    """
    resolved = list(matches)
    if standings is None:
        standings = calculate_standings(resolved, groups)

    resolved = [
        m if m.phase == Phase.GROUP else m.with_teams(
            _resolve_group_slot(m.home_team_id, standings),
            _resolve_group_slot(m.away_team_id, standings),
        )
        for m in resolved
    ]
    resolved = _resolve_third_places(resolved, standings, eligibility, qualifiers)
    return _propagate_results(resolved)


def champion(matches: Iterable[Match]) -> Optional[str]:
    for m in matches:
        if m.id == FINAL_MATCH_ID and m.status == MatchStatus.FINISHED and m.is_resolved:
            return m.winner()
    return None


# -------------------------
# Service
# -------------------------


class BracketService:
    """
    Loads the tournament from MySQL and produces standings / resolved brackets.

    Nothing derived is stored: every call recomputes from the match table
    (optionally overlaid with one user's simulated scores).
    """

    def __init__(self, match_repo: MatchRepo, simulation_repo: SimulationRepo | None = None) -> None:
        self._matches = match_repo
        self._simulations = simulation_repo

    async def get_matches(self, *, simulation_for: int | None = None) -> list[Match]:
        rows = await self._matches.list_matches()
        matches = [Match.from_row(r) for r in rows] if rows else initial_matches()

        if simulation_for is not None and self._simulations is not None:
            data = await self._simulations.get_simulation(account_id=simulation_for)
            matches = apply_overlay(matches, overlay_from_json(data))
        return matches

    async def standings(self, *, simulation_for: int | None = None) -> dict[str, list[GroupStanding]]:
        return calculate_standings(await self.get_matches(simulation_for=simulation_for))

    async def resolved_matches(self, *, simulation_for: int | None = None) -> list[Match]:
        matches = await self.get_matches(simulation_for=simulation_for)
        return resolve_bracket(matches, calculate_standings(matches))

    async def seed_schedule(self) -> int:
        """Insert the fixed 2026 fixture list; existing rows are left alone."""
        inserted = await self._matches.insert_schedule(matches=initial_matches())
        log.info("Schedule seeded (%s new matches)", inserted)
        return inserted

    async def record_result(
        self,
        *,
        match_id: str,
        home_score: Optional[int],
        away_score: Optional[int],
        status: MatchStatus = MatchStatus.FINISHED,
        reported_by_account_id: Optional[int] = None,
    ) -> Match:
        """
        Admin entry of a real result. Scores may be cleared (None) together.
        """
        if (home_score is None) != (away_score is None):
            raise InvalidResultError("Provide both scores or neither.")
        for v in (home_score, away_score):
            if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 0):
                raise InvalidResultError("Scores must be non-negative integers.")

        row = await self._matches.get_match(match_id=match_id)
        if not row:
            raise MatchNotFoundError(f"Match not found: {match_id}")

        changed = await self._matches.set_result(
            match_id=match_id,
            home_score=home_score,
            away_score=away_score,
            status=status.value,
            updated_by_account_id=reported_by_account_id,
        )
        log.info("Result recorded for %s: %s-%s (%s), rows=%s", match_id, home_score, away_score, status.value, changed)

        return Match.from_row(row).with_result(home_score, away_score, status)
