# renderers/bracket_diagram.py
from __future__ import annotations

import os
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from domain.enums import Phase
from domain.models import Match, is_placeholder
from domain.tournament import FINAL_MATCH_ID, THIRD_PLACE_MATCH_ID

# left-to-right columns; match n of column c feeds match ceil(n/2) of column c+1
COLUMNS: tuple[tuple[Phase, str], ...] = (
    (Phase.ROUND_32, "m-R32-"),
    (Phase.ROUND_16, "m-R16-"),
    (Phase.QUARTER, "m-QF-"),
    (Phase.SEMI, "m-SF-"),
)


@dataclass(frozen=True)
class DiagramStyle:
    # Layout (logical units; final pixels = logical * scale)
    margin: int = 30
    title_h: int = 50
    box_w: int = 260
    box_h: int = 64
    h_gap: int = 60
    v_gap: int = 14
    scale: float = 1.5

    bg: tuple[int, int, int] = (6, 38, 22)

    text: tuple[int, int, int] = (245, 245, 240)
    subtle: tuple[int, int, int] = (170, 190, 175)

    box_fill: tuple[int, int, int] = (18, 60, 36)
    box_border: tuple[int, int, int] = (120, 160, 130)
    line: tuple[int, int, int] = (90, 130, 100)
    winner: tuple[int, int, int] = (255, 223, 0)
    pending: tuple[int, int, int] = (120, 135, 125)

    font_size: int = 15
    font_size_small: int = 12

    bg_image_path: str | None = "assets/bracket_bg.png"


class BracketDiagramRenderer:
    """
    PNG of the knockout tree: 16-avos -> oitavas -> quartas -> semis -> final,
    with the 3rd-place match under the final.
    """

    def __init__(self, style: DiagramStyle | None = None, font_path: Optional[str] = None) -> None:
        self.style = style or DiagramStyle()
        self.font_path = font_path

    # -----------------------------
    # Low-level utils
    # -----------------------------
    def _font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        candidates = [self.font_path] if self.font_path else []
        candidates += ["DejaVuSans.ttf", "DejaVuSansMono.ttf", "Arial.ttf"]
        for name in candidates:
            try:
                return ImageFont.truetype(name, size)
            except OSError:
                continue
        return ImageFont.load_default()

    def _canvas(self, width: int, height: int) -> Image.Image:
        img = Image.new("RGBA", (max(2, width), max(2, height)), (*self.style.bg, 255))
        path = self.style.bg_image_path
        if path and os.path.exists(path):
            with Image.open(path) as raw:
                bg = raw.convert("RGBA").resize(img.size, Image.LANCZOS)
            img.alpha_composite(bg, (0, 0))
        return img

    @staticmethod
    def _ellipsize(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_w: int) -> str:
        t = (text or "").strip()
        if draw.textlength(t, font=font) <= max_w:
            return t
        while t and draw.textlength(t + "…", font=font) > max_w:
            t = t[:-1]
        return (t + "…") if t else "…"

    # -----------------------------
    # Drawing
    # -----------------------------
    def _draw_card(
        self,
        draw: ImageDraw.ImageDraw,
        *,
        x: int,
        y: int,
        w: int,
        h: int,
        match: Match,
        f_main: ImageFont.ImageFont,
        f_small: ImageFont.ImageFont,
    ) -> None:
        style = self.style
        radius = max(6, h // 8)
        draw.rounded_rectangle([x, y, x + w, y + h], radius=radius, fill=(*style.box_fill, 235), outline=(*style.box_border, 255), width=2)
        draw.line([(x + 6, y + h // 2), (x + w - 6, y + h // 2)], fill=(*style.line, 255), width=1)

        winner = match.winner()
        pad = max(6, w // 30)
        score_w = int(draw.textlength("00", font=f_main)) + pad

        for i, (team, score) in enumerate(((match.home_team_id, match.home_score), (match.away_team_id, match.away_score))):
            row_y = y + i * (h // 2)
            if is_placeholder(team):
                color = style.pending
            elif winner is not None and team == winner:
                color = style.winner
            else:
                color = style.text
            label = self._ellipsize(draw, team, f_main, w - 2 * pad - score_w)
            draw.text((x + pad, row_y + h // 8), label, font=f_main, fill=color)
            if score is not None:
                draw.text((x + w - score_w, row_y + h // 8), str(score), font=f_main, fill=color)

        tag = match.id[2:] if match.id.startswith("m-") else match.id
        draw.text((x + pad, y - int(style.font_size_small * style.scale) - 2), tag, font=f_small, fill=style.subtle)

    def render_png(self, matches: Sequence[Match], *, title: str | None = None) -> bytes:
        style = self.style
        s = style.scale

        def S(v: float) -> int:
            return int(round(v * s))

        by_id = {m.id: m for m in matches}
        first_col = 16
        slot_h = style.box_h + style.v_gap + style.font_size_small + 4

        # logical coords: column c, match n sits centred over its two feeders
        xy: dict[str, tuple[int, int]] = {}
        for c, (_phase, prefix) in enumerate(COLUMNS):
            count = first_col // (2**c)
            span = slot_h * (2**c)
            for n in range(1, count + 1):
                y_mid = style.title_h + style.margin + span * (n - 0.5)
                xy[f"{prefix}{n}"] = (style.margin + c * (style.box_w + style.h_gap), int(y_mid - style.box_h / 2))

        final_x = style.margin + len(COLUMNS) * (style.box_w + style.h_gap)
        final_y = (xy["m-SF-1"][1] + xy["m-SF-2"][1]) // 2
        xy[FINAL_MATCH_ID] = (final_x, final_y)
        xy[THIRD_PLACE_MATCH_ID] = (final_x, final_y + style.box_h * 2 + style.v_gap * 2)

        width = S(final_x + style.box_w + style.margin)
        height = S(style.title_h + style.margin * 2 + slot_h * first_col)

        img = self._canvas(width, height)
        draw = ImageDraw.Draw(img)
        f_main = self._font(max(10, int(style.font_size * s)))
        f_small = self._font(max(9, int(style.font_size_small * s)))

        if title:
            draw.text((S(style.margin), S(12)), title, font=f_main, fill=style.text)

        def draw_edge(src_id: str, dst_id: str) -> None:
            if src_id not in xy or dst_id not in xy:
                return
            sx, sy = xy[src_id]
            dx, dy = xy[dst_id]
            s_mid = (S(sx + style.box_w), S(sy + style.box_h / 2))
            d_mid = (S(dx), S(dy + style.box_h / 2))
            mid_x = (s_mid[0] + d_mid[0]) // 2
            draw.line([s_mid, (mid_x, s_mid[1]), (mid_x, d_mid[1]), d_mid], fill=style.line, width=max(2, S(1.5)))

        for c in range(len(COLUMNS) - 1):
            prefix, next_prefix = COLUMNS[c][1], COLUMNS[c + 1][1]
            for n in range(1, first_col // (2**c) + 1):
                draw_edge(f"{prefix}{n}", f"{next_prefix}{(n + 1) // 2}")
        draw_edge("m-SF-1", FINAL_MATCH_ID)
        draw_edge("m-SF-2", FINAL_MATCH_ID)

        for match_id, (x_l, y_l) in xy.items():
            m = by_id.get(match_id)
            if m is None:
                continue
            self._draw_card(
                draw,
                x=S(x_l),
                y=S(y_l),
                w=S(style.box_w),
                h=S(style.box_h),
                match=m,
                f_main=f_main,
                f_small=f_small,
            )

        out = BytesIO()
        img.convert("RGB").save(out, format="PNG", optimize=True)
        return out.getvalue()
