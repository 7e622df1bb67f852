# renderers/standings_view.py
from __future__ import annotations

from typing import Mapping, Sequence

from domain.models import GroupStanding, ThirdPlaceEntry


def _pad(s: str, width: int) -> str:
    s = s or ""
    if len(s) > width:
        return s[: max(0, width - 1)] + "…" if width >= 2 else s[:width]
    return s + (" " * (width - len(s)))


def _num(v: int, width: int = 3) -> str:
    return str(v).rjust(width)


class StandingsView:
    """
    Monospace group tables:

        Grupo A
        #  Seleção            P  J  V  E  D  GP GC  SG
        1  México             9  3  3  0  0   7  1  +6
    """

    def __init__(self, *, name_width: int = 18) -> None:
        self._name_width = int(name_width)

    def _header(self) -> str:
        return f"#  {_pad('Seleção', self._name_width)}  P  J  V  E  D  GP  GC  SG"

    def _row(self, pos: int, s: GroupStanding) -> str:
        gd = f"{s.gd:+d}" if s.gd else "0"
        return (
            f"{pos:<2} {_pad(s.team_id, self._name_width)}"
            f"{_num(s.points)}{_num(s.played)}{_num(s.won)}{_num(s.drawn)}{_num(s.lost)}"
            f"{_num(s.gf, 4)}{_num(s.ga, 4)}{gd.rjust(4)}"
        )

    def render_group(self, letter: str, rows: Sequence[GroupStanding]) -> str:
        lines = [f"Grupo {letter}", self._header()]
        lines.extend(self._row(i, s) for i, s in enumerate(rows, start=1))
        return "\n".join(lines)

    def render(self, standings: Mapping[str, Sequence[GroupStanding]], *, groups: Sequence[str] | None = None) -> str:
        letters = [g for g in (groups or sorted(standings)) if g in standings]
        blocks = [self.render_group(g, standings[g]) for g in letters]
        return "```text\n" + "\n\n".join(blocks) + "\n```"

    def render_third_places(self, ranked: Sequence[ThirdPlaceEntry], *, qualifiers: int = 8) -> str:
        lines = ["Melhores terceiros", f"#  G  {_pad('Seleção', self._name_width)}  P   SG  GP"]
        for i, e in enumerate(ranked, start=1):
            mark = "*" if i <= qualifiers else " "
            lines.append(
                f"{i:<2} {e.group}  {_pad(e.team_id, self._name_width)}{_num(e.points)}{f'{e.gd:+d}'.rjust(5)}{_num(e.gf, 4)} {mark}"
            )
        lines.append(f"* classificados ({qualifiers})")
        return "```text\n" + "\n".join(lines) + "\n```"
