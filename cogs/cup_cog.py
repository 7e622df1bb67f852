# cogs/cup_cog.py
from __future__ import annotations

from io import BytesIO
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from domain.enums import Phase
from domain.models import normalize_match_id
from domain.tournament import GROUPS, THIRD_PLACE_QUALIFIERS
from repositories.identity_repo import IdentityRepo
from services.bracket_service import BracketService, champion
from services.prediction_service import DEFAULT_LOCK_MINUTES, PredictionServiceError, is_prediction_locked, utcnow
from services.simulation_service import SimulationService, SimulationServiceError
from services.standings_service import rank_third_places
from renderers.bracket_diagram import BracketDiagramRenderer
from renderers.bracket_view import BracketView
from renderers.embeds import Embeds
from renderers.standings_view import StandingsView

_GROUP_CHOICES = [app_commands.Choice(name=f"Grupo {g}", value=g) for g in GROUPS]
_PHASE_CHOICES = [app_commands.Choice(name=p.value, value=p.name) for p in Phase]


class CupCog(commands.Cog):
    copa = app_commands.Group(name="copa", description="World Cup 2026: tables, bracket, fixtures.")
    sim = app_commands.Group(name="sim", description="Your private what-if simulator.", parent=copa)

    def __init__(
        self,
        bot: commands.Bot,
        *,
        identity_repo: IdentityRepo,
        bracket_service: BracketService,
        simulation_service: SimulationService,
        embeds: Embeds,
        standings_view: StandingsView,
        bracket_view: BracketView,
        bracket_diagram: BracketDiagramRenderer,
        lock_minutes: int = DEFAULT_LOCK_MINUTES,
    ) -> None:
        self.bot = bot
        self.identity_repo = identity_repo
        self.brackets = bracket_service
        self.simulations = simulation_service
        self.embeds = embeds
        self.standings_view = standings_view
        self.bracket_view = bracket_view
        self.bracket_diagram = bracket_diagram
        self.lock_minutes = lock_minutes

    async def _account_id(self, user: discord.abc.User) -> int:
        return await self.identity_repo.upsert_discord_account(
            discord_user_id=user.id,
            display_name=getattr(user, "display_name", None) or getattr(user, "name", None),
            metadata={"source": "discord"},
        )

    async def _sim_for(self, interaction: discord.Interaction, simulated: bool) -> Optional[int]:
        return await self._account_id(interaction.user) if simulated else None

    # -----------------------------
    # Read-only views
    # -----------------------------

    @copa.command(name="grupos", description="Group tables (real results, or your simulation).")
    @app_commands.choices(grupo=_GROUP_CHOICES)
    async def grupos(
        self,
        interaction: discord.Interaction,
        grupo: Optional[app_commands.Choice[str]] = None,
        simulado: bool = False,
    ) -> None:
        await interaction.response.defer(ephemeral=simulado)
        standings = await self.brackets.standings(simulation_for=await self._sim_for(interaction, simulado))

        # all 12 tables do not fit one embed; default to four
        letters = [grupo.value] if grupo else list(GROUPS)[:4]
        title = "Fase de Grupos" + (" (simulação)" if simulado else "")
        await interaction.followup.send(
            embed=self.embeds.base(title=title, description=self.standings_view.render(standings, groups=letters)),
            ephemeral=simulado,
        )

    @copa.command(name="terceiros", description="Ranking of the 3rd-placed teams.")
    async def terceiros(self, interaction: discord.Interaction, simulado: bool = False) -> None:
        await interaction.response.defer(ephemeral=simulado)
        standings = await self.brackets.standings(simulation_for=await self._sim_for(interaction, simulado))
        text = self.standings_view.render_third_places(rank_third_places(standings), qualifiers=THIRD_PLACE_QUALIFIERS)
        await interaction.followup.send(embed=self.embeds.base(title="Melhores terceiros", description=text), ephemeral=simulado)

    @copa.command(name="chaveamento", description="Knockout bracket (text or image).")
    async def chaveamento(
        self,
        interaction: discord.Interaction,
        simulado: bool = False,
        imagem: bool = True,
    ) -> None:
        await interaction.response.defer(ephemeral=simulado)
        matches = await self.brackets.resolved_matches(simulation_for=await self._sim_for(interaction, simulado))
        title = "Mata-mata" + (" (simulação)" if simulado else "")
        winner = champion(matches)

        if imagem:
            png = self.bracket_diagram.render_png(matches, title=title)
            file = discord.File(fp=BytesIO(png), filename="bracket.png")
            e = self.embeds.base(title=title, description=f"🏆 {winner}" if winner else None)
            e.set_image(url="attachment://bracket.png")
            await interaction.followup.send(embed=e, file=file, ephemeral=simulado)
            return

        text = self.bracket_view.render(matches, title=title, champion=winner)
        await interaction.followup.send(content=text, ephemeral=simulado)

    @copa.command(name="jogos", description="Fixtures with ids (use the id in /palpite enviar).")
    @app_commands.choices(grupo=_GROUP_CHOICES, fase=_PHASE_CHOICES)
    async def jogos(
        self,
        interaction: discord.Interaction,
        grupo: Optional[app_commands.Choice[str]] = None,
        fase: Optional[app_commands.Choice[str]] = None,
        abertos: bool = False,
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        matches = await self.brackets.resolved_matches()
        now = utcnow()

        if grupo:
            matches = [m for m in matches if m.group == grupo.value]
        if fase:
            matches = [m for m in matches if m.phase == Phase[fase.value]]
        if abertos:
            matches = [m for m in matches if not is_prediction_locked(m.date, now, self.lock_minutes)]

        matches = sorted(matches, key=lambda m: (m.date, m.id))[:30]
        if not matches:
            await interaction.followup.send(embed=self.embeds.info(title="Jogos", description="No matches for that filter."), ephemeral=True)
            return

        lines = []
        for m in matches:
            score = f"{m.home_score}x{m.away_score}" if m.has_score else "x"
            lock = "🔒" if is_prediction_locked(m.date, now, self.lock_minutes) else ""
            lines.append(f"{m.id:<9} {m.date:%d/%m %H:%M}Z  {m.home_team_id} {score} {m.away_team_id} {lock}")
        await interaction.followup.send(embed=self.embeds.info(title="Jogos", description=self.embeds.code("\n".join(lines))), ephemeral=True)

    # -----------------------------
    # Simulator
    # -----------------------------

    @sim.command(name="placar", description="Set a simulated score.")
    async def sim_placar(
        self,
        interaction: discord.Interaction,
        match_id: str,
        home: app_commands.Range[int, 0, 30],
        away: app_commands.Range[int, 0, 30],
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        mid = normalize_match_id(match_id)
        try:
            overlay = await self.simulations.set_score(account_id=account_id, match_id=mid, home_score=int(home), away_score=int(away))
        except SimulationServiceError as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Simulation", description=str(ex)), ephemeral=True)
            return
        await interaction.followup.send(
            embed=self.embeds.success(title="Simulated", description=f"`{mid}` {home}x{away} · {len(overlay)} simulated matches"),
            ephemeral=True,
        )

    @sim.command(name="limpar", description="Remove one simulated score (or all with match_id=all).")
    async def sim_limpar(self, interaction: discord.Interaction, match_id: str) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        if match_id.strip().lower() == "all":
            await self.simulations.reset(account_id=account_id)
            await interaction.followup.send(embed=self.embeds.success(title="Simulation reset"), ephemeral=True)
            return
        mid = normalize_match_id(match_id)
        overlay = await self.simulations.clear_score(account_id=account_id, match_id=mid)
        await interaction.followup.send(embed=self.embeds.success(title="Cleared", description=f"{len(overlay)} simulated matches left."), ephemeral=True)

    @sim.command(name="sincronizar", description="Copy every finished real score into your simulation.")
    async def sim_sincronizar(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        count = await self.simulations.sync_real_results(account_id=account_id, matches=await self.brackets.get_matches())
        await interaction.followup.send(embed=self.embeds.success(title="Synced", description=f"{count} real results copied."), ephemeral=True)

    @sim.command(name="importar", description="Load your predictions from a league into the simulation.")
    async def sim_importar(self, interaction: discord.Interaction, league_id: int) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        count = await self.simulations.import_from_league(account_id=account_id, league_id=league_id)
        await interaction.followup.send(embed=self.embeds.success(title="Imported", description=f"{count} predictions loaded."), ephemeral=True)

    @sim.command(name="exportar", description="Submit your simulated scores as predictions in a league.")
    @app_commands.choices(grupo=_GROUP_CHOICES)
    async def sim_exportar(
        self,
        interaction: discord.Interaction,
        league_id: int,
        grupo: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            result = await self.simulations.export_to_league(
                account_id=account_id,
                league_id=league_id,
                matches=await self.brackets.get_matches(),
                group=grupo.value if grupo else None,
            )
        except (SimulationServiceError, PredictionServiceError) as ex:
            await interaction.followup.send(embed=self.embeds.error(title="Export failed", description=str(ex)), ephemeral=True)
            return

        desc = f"{len(result.exported)} predictions saved."
        if result.skipped_locked:
            desc += f"\nSkipped (locked): {', '.join(result.skipped_locked[:20])}"
        await interaction.followup.send(embed=self.embeds.success(title="Exported", description=desc), ephemeral=True)


async def setup(
    bot: commands.Bot,
    *,
    identity_repo: IdentityRepo,
    bracket_service: BracketService,
    simulation_service: SimulationService,
    embeds: Embeds,
    standings_view: StandingsView,
    bracket_view: BracketView,
    bracket_diagram: BracketDiagramRenderer,
    lock_minutes: int = DEFAULT_LOCK_MINUTES,
) -> None:
    await bot.add_cog(
        CupCog(
            bot,
            identity_repo=identity_repo,
            bracket_service=bracket_service,
            simulation_service=simulation_service,
            embeds=embeds,
            standings_view=standings_view,
            bracket_view=bracket_view,
            bracket_diagram=bracket_diagram,
            lock_minutes=lock_minutes,
        )
    )
