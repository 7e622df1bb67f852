# cogs/admin_cog.py
from __future__ import annotations

from typing import AbstractSet, Optional

import discord
from discord import app_commands
from discord.ext import commands

from domain.enums import LeaguePlan, MatchStatus
from domain.models import normalize_match_id
from repositories.identity_repo import IdentityRepo
from services.bracket_service import BracketService, BracketServiceError
from services.league_service import LeagueService, LeagueServiceError
from renderers.embeds import Embeds

_STATUS_CHOICES = [app_commands.Choice(name=s.value, value=s.value) for s in MatchStatus]
_PLAN_CHOICES = [app_commands.Choice(name=p.value, value=p.value) for p in LeaguePlan]


class AdminCog(commands.Cog):
    admin = app_commands.Group(name="admin", description="Bot operator commands (results, plans, schedule).")

    def __init__(
        self,
        bot: commands.Bot,
        *,
        identity_repo: IdentityRepo,
        bracket_service: BracketService,
        league_service: LeagueService,
        embeds: Embeds,
        admin_ids: AbstractSet[int],
    ) -> None:
        self.bot = bot
        self.identity_repo = identity_repo
        self.brackets = bracket_service
        self.leagues = league_service
        self.embeds = embeds
        self.admin_ids = frozenset(admin_ids)

    async def _deny_non_admin(self, interaction: discord.Interaction) -> bool:
        """Reply and return True when the caller is not listed in BOT_ADMIN_IDS."""
        if interaction.user.id in self.admin_ids:
            return False
        await interaction.response.send_message(
            embed=self.embeds.error(title="Not allowed", description="Only bot operators can use /admin."),
            ephemeral=True,
        )
        return True

    @admin.command(name="resultado", description="Record (or clear) the real score of a match.")
    @app_commands.describe(
        match_id="Match id, e.g. m-A1 or m-R32-3",
        home="Home team goals",
        away="Away team goals",
        status="Match status (default FINISHED)",
        limpar="Clear the score and mark the match SCHEDULED",
    )
    @app_commands.choices(status=_STATUS_CHOICES)
    async def resultado(
        self,
        interaction: discord.Interaction,
        match_id: str,
        home: Optional[app_commands.Range[int, 0, 30]] = None,
        away: Optional[app_commands.Range[int, 0, 30]] = None,
        status: Optional[app_commands.Choice[str]] = None,
        limpar: bool = False,
    ) -> None:
        if await self._deny_non_admin(interaction):
            return
        await interaction.response.defer(ephemeral=True)

        reporter = await self.identity_repo.upsert_discord_account(
            discord_user_id=interaction.user.id,
            display_name=getattr(interaction.user, "display_name", None),
            metadata={"source": "discord"},
        )
        mid = normalize_match_id(match_id)

        if limpar:
            home = away = None
            new_status = MatchStatus.SCHEDULED
        else:
            new_status = MatchStatus(status.value) if status else MatchStatus.FINISHED

        try:
            m = await self.brackets.record_result(
                match_id=mid,
                home_score=None if home is None else int(home),
                away_score=None if away is None else int(away),
                status=new_status,
                reported_by_account_id=reporter,
            )
        except BracketServiceError as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Result rejected", description=str(ex)), ephemeral=True)
            return

        score = f"{m.home_score} x {m.away_score}" if m.has_score else "x"
        e = self.embeds.success(
            title="Result saved",
            description=f"`{m.id}` {m.home_team_id} {score} {m.away_team_id} · {m.status.value}",
        )
        await interaction.followup.send(embed=e, ephemeral=True)

    @admin.command(name="plano", description="Change a league's plan (capacity).")
    @app_commands.choices(plan=_PLAN_CHOICES)
    async def plano(self, interaction: discord.Interaction, league_id: int, plan: app_commands.Choice[str]) -> None:
        if await self._deny_non_admin(interaction):
            return
        await interaction.response.defer(ephemeral=True)

        try:
            league = await self.leagues.set_plan(league_id=league_id, plan=LeaguePlan(plan.value))
        except LeagueServiceError as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Plan not changed", description=str(ex)), ephemeral=True)
            return

        await interaction.followup.send(
            embed=self.embeds.success(title="Plan updated", description=f"**{league.name}** is now on `{plan.value}`."),
            ephemeral=True,
        )

    @admin.command(name="carregar_tabela", description="Insert the 2026 fixture list (existing matches are kept).")
    async def carregar_tabela(self, interaction: discord.Interaction) -> None:
        if await self._deny_non_admin(interaction):
            return
        await interaction.response.defer(ephemeral=True)

        inserted = await self.brackets.seed_schedule()
        await interaction.followup.send(
            embed=self.embeds.success(title="Schedule loaded", description=f"{inserted} new matches inserted."),
            ephemeral=True,
        )


async def setup(
    bot: commands.Bot,
    *,
    identity_repo: IdentityRepo,
    bracket_service: BracketService,
    league_service: LeagueService,
    embeds: Embeds,
    admin_ids: AbstractSet[int],
) -> None:
    await bot.add_cog(
        AdminCog(
            bot,
            identity_repo=identity_repo,
            bracket_service=bracket_service,
            league_service=league_service,
            embeds=embeds,
            admin_ids=admin_ids,
        )
    )
