# renderers/bracket_view.py
from __future__ import annotations

from typing import Optional, Sequence

from domain.enums import MatchStatus, Phase
from domain.models import Match, is_placeholder
from domain.tournament import KNOCKOUT_ORDER


def _pad(s: str, width: int) -> str:
    s = s or ""
    if len(s) >= width:
        return s[: max(0, width - 1)] + "…" if width >= 2 else s[:width]
    return s + (" " * (width - len(s)))


def _short_id(match_id: str) -> str:
    return match_id[2:] if match_id.startswith("m-") else match_id


def _score(m: Match) -> str:
    if not m.has_score:
        return "  x  "
    return f"{m.home_score:>2}x{m.away_score:<2}"


def _status_mark(m: Match) -> str:
    if m.status == MatchStatus.FINISHED:
        return "✅"
    if m.status == MatchStatus.IN_PROGRESS:
        return "⚽"
    # still waiting on earlier results
    if is_placeholder(m.home_team_id) or is_placeholder(m.away_team_id):
        return "⏳"
    return "•"


class BracketView:
    """
    Text knockout bracket for Discord (monospace), one block per phase:

        -- 16-avos de Final --
          R32-1   Alemanha          2x1  Marrocos          ✅
    """

    def __init__(self, *, name_width: int = 18) -> None:
        self._name_width = int(name_width)

    def render(
        self,
        matches: Sequence[Match],
        *,
        title: str = "Mata-mata",
        phases: Sequence[Phase] = KNOCKOUT_ORDER,
        champion: Optional[str] = None,
        max_lines: int = 70,
    ) -> str:
        lines = [f"=== {title} ===", ""]

        for phase in phases:
            in_phase = sorted((m for m in matches if m.phase == phase), key=lambda m: (m.date, m.id))
            if not in_phase:
                continue
            lines.append(f"-- {phase.value} --")
            for m in in_phase:
                lines.append(
                    f"  {_pad(_short_id(m.id), 7)} "
                    f"{_pad(m.home_team_id, self._name_width)} {_score(m)}  "
                    f"{_pad(m.away_team_id, self._name_width)} {_status_mark(m)}"
                )
            lines.append("")

        if champion:
            lines.append(f"🏆 Campeão: {champion}")

        # keep the end: later phases matter most
        if len(lines) > max_lines:
            lines = lines[:2] + ["...", ""] + lines[-(max_lines - 4):]

        return "```text\n" + "\n".join(lines).rstrip() + "\n```"
