# cogs/predictions_cog.py
from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from domain.models import normalize_match_id
from repositories.identity_repo import IdentityRepo
from services.bracket_service import BracketService
from services.prediction_service import PredictionService, PredictionServiceError
from services.scoring_service import ScoringService, ScoringServiceError
from renderers.embeds import Embeds


class PredictionsCog(commands.Cog):
    palpite = app_commands.Group(name="palpite", description="Submit and review your score predictions.")

    def __init__(
        self,
        bot: commands.Bot,
        *,
        identity_repo: IdentityRepo,
        prediction_service: PredictionService,
        scoring_service: ScoringService,
        bracket_service: BracketService,
        embeds: Embeds,
    ) -> None:
        self.bot = bot
        self.identity_repo = identity_repo
        self.predictions = prediction_service
        self.scoring = scoring_service
        self.brackets = bracket_service
        self.embeds = embeds

    async def _account_id(self, user: discord.abc.User) -> int:
        return await self.identity_repo.upsert_discord_account(
            discord_user_id=user.id,
            display_name=getattr(user, "display_name", None) or getattr(user, "name", None),
            metadata={"source": "discord"},
        )

    @palpite.command(name="enviar", description="Predict a match score in one of your leagues.")
    @app_commands.describe(
        league_id="League id (see /league mine)",
        match_id="Match id, e.g. m-A1 or m-R32-3 (see /copa jogos)",
        home="Home team goals",
        away="Away team goals",
    )
    async def enviar(
        self,
        interaction: discord.Interaction,
        league_id: int,
        match_id: str,
        home: app_commands.Range[int, 0, 30],
        away: app_commands.Range[int, 0, 30],
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        mid = normalize_match_id(match_id)

        try:
            p = await self.predictions.submit(
                account_id=account_id,
                league_id=league_id,
                match_id=mid,
                home_score=int(home),
                away_score=int(away),
            )
        except PredictionServiceError as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Prediction rejected", description=str(ex)), ephemeral=True)
            return

        resolved = {m.id: m for m in await self.brackets.resolved_matches()}
        m = resolved.get(p.match_id)
        label = f"{m.home_team_id} {p.home_score} x {p.away_score} {m.away_team_id}" if m else f"{p.home_score} x {p.away_score}"
        await interaction.followup.send(
            embed=self.embeds.success(title="Prediction saved", description=f"`{p.match_id}` · {label}"),
            ephemeral=True,
        )

    @palpite.command(name="meus", description="Your predictions in a league, with points earned so far.")
    async def meus(self, interaction: discord.Interaction, league_id: int) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)

        try:
            mine = await self.predictions.list_mine(account_id=account_id, league_id=league_id)
            points = await self.scoring.points_by_match(league_id=league_id, account_id=account_id)
        except ScoringServiceError as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Not found", description=str(ex)), ephemeral=True)
            return

        if not mine:
            await interaction.followup.send(embed=self.embeds.info(title="Your predictions", description="Nothing yet. Use `/palpite enviar`."), ephemeral=True)
            return

        resolved = {m.id: m for m in await self.brackets.resolved_matches()}
        lines = []
        for p in mine[:40]:
            m = resolved.get(p.match_id)
            teams = f"{m.home_team_id} x {m.away_team_id}" if m else p.match_id
            real = f" (real {m.home_score}x{m.away_score})" if m and m.has_score else ""
            lines.append(f"{p.match_id:<9} {teams}: {p.home_score}x{p.away_score}{real} -> {points.get(p.match_id, 0)} pts")

        total = sum(points.values())
        e = self.embeds.info(title=f"Your predictions · {total} pts", description=self.embeds.code("\n".join(lines)))
        await interaction.followup.send(embed=e, ephemeral=True)


async def setup(
    bot: commands.Bot,
    *,
    identity_repo: IdentityRepo,
    prediction_service: PredictionService,
    scoring_service: ScoringService,
    bracket_service: BracketService,
    embeds: Embeds,
) -> None:
    await bot.add_cog(
        PredictionsCog(
            bot,
            identity_repo=identity_repo,
            prediction_service=prediction_service,
            scoring_service=scoring_service,
            bracket_service=bracket_service,
            embeds=embeds,
        )
    )
