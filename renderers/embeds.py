# renderers/embeds.py
from __future__ import annotations

from dataclasses import dataclass

import discord


@dataclass(frozen=True)
class EmbedTheme:
    primary: int = 0x009C3B   # bandeira green
    success: int = 0x2ECC71
    warning: int = 0xFFDF00   # bandeira yellow
    danger: int = 0xE74C3C
    neutral: int = 0x002776   # bandeira blue


class Embeds:
    """
    One place for embed colours and footer so every command looks the same.
    """

    def __init__(self, *, theme: EmbedTheme | None = None, footer: str = "Bolão da Copa 2026") -> None:
        self._theme = theme or EmbedTheme()
        self._footer = footer

    def base(self, *, title: str, description: str | None = None, color: int | None = None) -> discord.Embed:
        e = discord.Embed(
            title=title,
            description=description,
            color=color if color is not None else self._theme.primary,
        )
        e.set_footer(text=self._footer)
        return e

    def info(self, *, title: str, description: str | None = None) -> discord.Embed:
        return self.base(title=title, description=description, color=self._theme.neutral)

    def success(self, *, title: str, description: str | None = None) -> discord.Embed:
        return self.base(title=title, description=description, color=self._theme.success)

    def warning(self, *, title: str, description: str | None = None) -> discord.Embed:
        return self.base(title=title, description=description, color=self._theme.warning)

    def error(self, *, title: str, description: str | None = None) -> discord.Embed:
        return self.base(title=title, description=description, color=self._theme.danger)

    def code(self, text: str, lang: str = "text") -> str:
        # embed descriptions cap at 4096 chars
        body = text if len(text) <= 3900 else text[:3899] + "…"
        return f"```{lang}\n{body}\n```"
