# domain/models.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from domain.enums import LeaguePlan, MatchStatus, Phase


THIRD_PLACE_CONFLICT = "A Definir (3º)"
MATCH_ID_PREFIX = "m-"

_GROUP_SLOT_RE = re.compile(r"^([123])º Grupo ([A-Z](?:/[A-Z])*)$")
_RESULT_REF_RE = re.compile(r"^(Venc|Perd)\. (\S+)$")


@dataclass(frozen=True)
class GroupSlot:
    """
    "1º Grupo A"          -> GroupSlot(rank=1, groups=("A",))
    "3º Grupo A/B/C/D/F"  -> GroupSlot(rank=3, groups=("A","B","C","D","F"))
    """

    rank: int
    groups: tuple[str, ...]

    @property
    def is_third_place_pool(self) -> bool:
        return len(self.groups) > 1


@dataclass(frozen=True)
class ResultRef:
    """`Venc. R32-3` (winner of) / `Perd. SF-1` (loser of)."""

    winner: bool
    match_ref: str


def parse_group_slot(team_id: str) -> Optional[GroupSlot]:
    m = _GROUP_SLOT_RE.match((team_id or "").strip())
    if not m:
        return None
    return GroupSlot(rank=int(m.group(1)), groups=tuple(m.group(2).split("/")))


def parse_result_ref(team_id: str) -> Optional[ResultRef]:
    m = _RESULT_REF_RE.match((team_id or "").strip())
    if not m:
        return None
    return ResultRef(winner=m.group(1) == "Venc", match_ref=m.group(2))


def is_placeholder(team_id: Optional[str]) -> bool:
    if not team_id or team_id == "TBD" or team_id == THIRD_PLACE_CONFLICT:
        return True
    return parse_group_slot(team_id) is not None or parse_result_ref(team_id) is not None


def as_utc(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))
    # MySQL DATETIME comes back naive; we always store UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _int_or_none(v: Any) -> Optional[int]:
    return int(v) if v is not None else None


@dataclass(frozen=True)
class Match:
    id: str
    home_team_id: str
    away_team_id: str
    date: datetime
    phase: Phase
    status: MatchStatus = MatchStatus.SCHEDULED
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    group: Optional[str] = None
    location: Optional[str] = None

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def is_resolved(self) -> bool:
        return not is_placeholder(self.home_team_id) and not is_placeholder(self.away_team_id)

    @property
    def is_played(self) -> bool:
        return self.status in (MatchStatus.FINISHED, MatchStatus.IN_PROGRESS)

    def winner(self) -> Optional[str]:
        if not self.has_score or self.home_score == self.away_score:
            return None
        return self.home_team_id if self.home_score > self.away_score else self.away_team_id

    def loser(self) -> Optional[str]:
        if not self.has_score or self.home_score == self.away_score:
            return None
        return self.away_team_id if self.home_score > self.away_score else self.home_team_id

    def with_teams(self, home_team_id: str, away_team_id: str) -> "Match":
        if home_team_id == self.home_team_id and away_team_id == self.away_team_id:
            return self
        return replace(self, home_team_id=home_team_id, away_team_id=away_team_id)

    def with_result(
        self,
        home_score: Optional[int],
        away_score: Optional[int],
        status: MatchStatus | None = None,
    ) -> "Match":
        if status is None:
            status = MatchStatus.FINISHED if home_score is not None and away_score is not None else self.status
        return replace(self, home_score=home_score, away_score=away_score, status=status)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Match":
        return cls(
            id=str(row["match_id"]),
            home_team_id=str(row["home_team_id"]),
            away_team_id=str(row["away_team_id"]),
            date=as_utc(row["kickoff_at"]),
            phase=Phase(str(row["phase"])),
            status=MatchStatus(str(row.get("status") or MatchStatus.SCHEDULED.value)),
            home_score=_int_or_none(row.get("home_score")),
            away_score=_int_or_none(row.get("away_score")),
            group=(str(row["group_letter"]) if row.get("group_letter") else None),
            location=row.get("location"),
        )


@dataclass
class GroupStanding:
    team_id: str
    points: int = 0
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    gf: int = 0
    ga: int = 0
    gd: int = 0

    def record(self, goals_for: int, goals_against: int) -> None:
        self.played += 1
        self.gf += goals_for
        self.ga += goals_against
        self.gd = self.gf - self.ga
        if goals_for > goals_against:
            self.won += 1
            self.points += 3
        elif goals_for < goals_against:
            self.lost += 1
        else:
            self.drawn += 1
            self.points += 1


@dataclass(frozen=True)
class ThirdPlaceEntry:
    group: str
    team_id: str
    points: int
    gd: int
    gf: int


@dataclass(frozen=True)
class LeagueSettings:
    exact_score: int = 10
    winner_and_diff: int = 7
    winner: int = 5
    draw: int = 7
    plan: Optional[LeaguePlan] = None
    is_unlimited: bool = False   # legacy flag, predates `plan`

    @classmethod
    def from_json(cls, data: Mapping[str, Any] | str | bytes | None) -> "LeagueSettings":
        # raw JSON column text is accepted as-is
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data) if data else None
        d = dict(data or {})
        raw_plan = d.get("plan")
        try:
            plan = LeaguePlan(str(raw_plan)) if raw_plan else None
        except ValueError:
            plan = None
        return cls(
            exact_score=int(d.get("exactScore", 10)),
            winner_and_diff=int(d.get("winnerAndDiff", 7)),
            winner=int(d.get("winner", 5)),
            draw=int(d.get("draw", 7)),
            plan=plan,
            is_unlimited=bool(d.get("isUnlimited", False)),
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "exactScore": self.exact_score,
            "winnerAndDiff": self.winner_and_diff,
            "winner": self.winner,
            "draw": self.draw,
        }
        if self.plan is not None:
            out["plan"] = self.plan.value
        if self.is_unlimited:
            out["isUnlimited"] = True
        return out


@dataclass(frozen=True)
class League:
    id: int
    name: str
    admin_id: int
    is_private: bool = False
    participants: tuple[int, ...] = ()
    pending_requests: tuple[int, ...] = ()
    settings: LeagueSettings = field(default_factory=LeagueSettings)
    league_code: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Prediction:
    user_id: int
    match_id: str
    league_id: int
    home_score: int
    away_score: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Prediction":
        return cls(
            user_id=int(row["account_id"]),
            match_id=str(row["match_id"]),
            league_id=int(row["league_id"]),
            home_score=int(row["home_score"]),
            away_score=int(row["away_score"]),
        )


@dataclass(frozen=True)
class Invitation:
    id: int
    league_id: int
    email: str
    status: str


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: int
    total_points: int
    exact_scores: int


def normalize_match_id(raw: str) -> str:
    """Accepts "A1", "r32-3" or "m-A1" style input; returns the canonical "m-..." id."""
    s = (raw or "").strip()
    if s.lower().startswith(MATCH_ID_PREFIX):
        s = s[len(MATCH_ID_PREFIX):]
    return MATCH_ID_PREFIX + s.upper()
