# renderers/leaderboard_view.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from domain.models import LeaderboardEntry

VIEW_TITLES = {
    "total": "Geral",
    "round_1": "Rodada 1",
    "round_2": "Rodada 2",
    "round_3": "Rodada 3",
    "group_phase": "Fase de Grupos",
    "knockout": "Mata-mata",
}


def _pad(s: str, width: int) -> str:
    s = s or ""
    if len(s) > width:
        return s[: max(0, width - 1)] + "…" if width >= 2 else s[:width]
    return s + (" " * (width - len(s)))


@dataclass(frozen=True)
class LeaderboardOptions:
    max_rows: int = 20
    name_width: int = 20
    title: str = "Ranking"


class LeaderboardView:
    """
    Renders a league ranking as a monospace table. Tied rows (same points and
    exact scores) share a position.
    """

    def render(
        self,
        entries: Sequence[LeaderboardEntry],
        names: Mapping[int, str],
        *,
        view: str = "total",
        opts: LeaderboardOptions | None = None,
    ) -> str:
        o = opts or LeaderboardOptions()
        data = list(entries)[: o.max_rows]

        lines = [
            f"=== {o.title} · {VIEW_TITLES.get(view, view)} ===",
            f"{_pad('#', 4)}{_pad('Participante', o.name_width)} {'Pts'.rjust(5)} {'Exatos'.rjust(6)}",
            "-" * (4 + o.name_width + 13),
        ]

        pos = 0
        prev: tuple[int, int] | None = None
        for i, e in enumerate(data, start=1):
            key = (e.total_points, e.exact_scores)
            if key != prev:
                pos = i
                prev = key
            name = names.get(e.user_id) or f"acct:{e.user_id}"
            lines.append(f"{_pad(str(pos), 4)}{_pad(name, o.name_width)} {str(e.total_points).rjust(5)} {str(e.exact_scores).rjust(6)}")

        if not data:
            lines.append("(sem participantes)")
        return "```text\n" + "\n".join(lines) + "\n```"
