# cogs/league_cog.py
from __future__ import annotations

from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from domain.models import League, LeagueSettings
from repositories.identity_repo import IdentityRepo
from services.league_service import LeagueService, LeagueServiceError, league_capacity, normalize_email
from services.scoring_service import LEADERBOARD_VIEWS, ScoringService, ScoringServiceError
from renderers.embeds import Embeds
from renderers.leaderboard_view import VIEW_TITLES, LeaderboardView


class LeagueCog(commands.Cog):
    league = app_commands.Group(name="league", description="Bolão leagues: create, join, invite, ranking.")

    def __init__(
        self,
        bot: commands.Bot,
        *,
        identity_repo: IdentityRepo,
        league_service: LeagueService,
        scoring_service: ScoringService,
        embeds: Embeds,
        leaderboard_view: LeaderboardView,
    ) -> None:
        self.bot = bot
        self.identity_repo = identity_repo
        self.leagues = league_service
        self.scoring = scoring_service
        self.embeds = embeds
        self.leaderboard_view = leaderboard_view

    # -----------------------------
    # Helpers
    # -----------------------------

    async def _account_id(self, user: discord.abc.User) -> int:
        return await self.identity_repo.upsert_discord_account(
            discord_user_id=user.id,
            display_name=getattr(user, "display_name", None) or getattr(user, "name", None),
            metadata={"source": "discord"},
        )

    async def _fail(self, interaction: discord.Interaction, title: str, ex: Exception) -> None:
        await interaction.followup.send(embed=self.embeds.error(title=title, description=str(ex)), ephemeral=True)

    def _league_embed(self, league: League, *, title: str | None = None) -> discord.Embed:
        cap = league_capacity(league.settings)
        e = self.embeds.info(title=title or f"{league.name} (#{league.id})", description=league.description)
        e.add_field(name="Code", value=f"`{league.league_code}`" if league.league_code else "-", inline=True)
        e.add_field(name="Type", value="Private" if league.is_private else "Public", inline=True)
        e.add_field(name="Participants", value=f"{len(league.participants)}/{cap if cap is not None else '∞'}", inline=True)
        s = league.settings
        e.add_field(
            name="Points",
            value=f"exact {s.exact_score} · winner+diff {s.winner_and_diff} · winner {s.winner} · draw {s.draw}",
            inline=False,
        )
        if league.pending_requests:
            e.add_field(name="Pending requests", value=str(len(league.pending_requests)), inline=True)
        return e

    # -----------------------------
    # Commands
    # -----------------------------

    @league.command(name="create", description="Create a new league (you become its admin).")
    @app_commands.describe(
        name="League name",
        private="Private leagues need admin approval to join",
        exact_score="Points for an exact score (default 10)",
        winner_and_diff="Points for winner + goal difference (default 7)",
        winner="Points for the winner only (default 5)",
        draw="Points for a predicted draw (default 7)",
    )
    async def create(
        self,
        interaction: discord.Interaction,
        name: app_commands.Range[str, 1, 64],
        private: bool = False,
        description: Optional[str] = None,
        exact_score: app_commands.Range[int, 0, 100] = 10,
        winner_and_diff: app_commands.Range[int, 0, 100] = 7,
        winner: app_commands.Range[int, 0, 100] = 5,
        draw: app_commands.Range[int, 0, 100] = 7,
    ) -> None:
        await interaction.response.defer(ephemeral=False)
        admin_id = await self._account_id(interaction.user)
        settings = LeagueSettings(exact_score=exact_score, winner_and_diff=winner_and_diff, winner=winner, draw=draw)
        try:
            league = await self.leagues.create_league(
                admin_account_id=admin_id,
                name=name,
                is_private=private,
                description=description,
                settings=settings,
            )
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not create league", ex)
            return
        await interaction.followup.send(embed=self._league_embed(league, title=f"League created: {league.name}"))

    @league.command(name="info", description="Show a league by id or join code.")
    async def info(self, interaction: discord.Interaction, league_id: Optional[int] = None, code: Optional[str] = None) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            if league_id is not None:
                league = await self.leagues.get_league(league_id=league_id)
            elif code:
                league = await self.leagues.find_by_code(league_code=code)
            else:
                await interaction.followup.send("Give a league id or a code.", ephemeral=True)
                return
        except LeagueServiceError as ex:
            await self._fail(interaction, "Not found", ex)
            return
        await interaction.followup.send(embed=self._league_embed(league), ephemeral=True)

    @league.command(name="mine", description="List the leagues you are in (or waiting on).")
    async def mine(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        rows = await self.leagues.list_my_leagues(account_id=account_id)
        if not rows:
            await interaction.followup.send(embed=self.embeds.info(title="Your leagues", description="None yet. Try `/league join`."), ephemeral=True)
            return
        lines = [
            f"`#{r['league_id']}` **{r['name']}** · code `{r['league_code']}`" + (" · ⏳ pending" if r["status"] == "pending" else "")
            for r in rows
        ]
        await interaction.followup.send(embed=self.embeds.info(title="Your leagues", description="\n".join(lines)), ephemeral=True)

    @league.command(name="join", description="Join a league with its code.")
    async def join(self, interaction: discord.Interaction, code: str) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            league = await self.leagues.join_by_code(league_code=code, account_id=account_id)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not join", ex)
            return

        if account_id in league.pending_requests:
            e = self.embeds.warning(title="Request sent", description=f"**{league.name}** is private. The admin has to approve you.")
        else:
            e = self.embeds.success(title="Joined", description=f"You are in **{league.name}**. Good luck!")
        await interaction.followup.send(embed=e, ephemeral=True)

    @league.command(name="leave", description="Leave a league (or cancel your pending request).")
    async def leave(self, interaction: discord.Interaction, league_id: int) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            league = await self.leagues.remove_member(league_id=league_id, actor_account_id=account_id, account_id=account_id)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not leave", ex)
            return
        await interaction.followup.send(embed=self.embeds.success(title="Left league", description=f"You left **{league.name}**."), ephemeral=True)

    @league.command(name="pending", description="(Admin) List pending join requests.")
    async def pending(self, interaction: discord.Interaction, league_id: int) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            league = await self.leagues.get_league(league_id=league_id)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Not found", ex)
            return
        if league.admin_id != account_id:
            await interaction.followup.send(embed=self.embeds.error(title="Forbidden", description="Only the league admin can see requests."), ephemeral=True)
            return

        names = await self.identity_repo.display_names(account_ids=league.pending_requests)
        desc = "\n".join(f"• {names.get(uid, uid)}" for uid in league.pending_requests) or "No pending requests."
        await interaction.followup.send(embed=self.embeds.info(title=f"Pending · {league.name}", description=desc), ephemeral=True)

    @league.command(name="approve", description="(Admin) Approve a pending join request.")
    async def approve(self, interaction: discord.Interaction, league_id: int, member: discord.User) -> None:
        await interaction.response.defer(ephemeral=True)
        actor = await self._account_id(interaction.user)
        target = await self._account_id(member)
        try:
            league = await self.leagues.approve(league_id=league_id, actor_account_id=actor, account_id=target)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not approve", ex)
            return
        await interaction.followup.send(
            embed=self.embeds.success(title="Approved", description=f"{member.mention} is now in **{league.name}**."),
            ephemeral=True,
        )

    @league.command(name="reject", description="(Admin) Reject a pending join request.")
    async def reject(self, interaction: discord.Interaction, league_id: int, member: discord.User) -> None:
        await interaction.response.defer(ephemeral=True)
        actor = await self._account_id(interaction.user)
        target = await self._account_id(member)
        try:
            await self.leagues.reject(league_id=league_id, actor_account_id=actor, account_id=target)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not reject", ex)
            return
        await interaction.followup.send(embed=self.embeds.success(title="Rejected", description=f"Request from {member.mention} removed."), ephemeral=True)

    @league.command(name="kick", description="(Admin) Remove a participant.")
    async def kick(self, interaction: discord.Interaction, league_id: int, member: discord.User) -> None:
        await interaction.response.defer(ephemeral=True)
        actor = await self._account_id(interaction.user)
        target = await self._account_id(member)
        try:
            await self.leagues.remove_member(league_id=league_id, actor_account_id=actor, account_id=target)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not remove", ex)
            return
        await interaction.followup.send(embed=self.embeds.success(title="Removed", description=f"{member.mention} was removed."), ephemeral=True)

    # -----------------------------
    # Invites
    # -----------------------------

    @league.command(name="email", description="Set the email league invites are matched against.")
    async def email(self, interaction: discord.Interaction, email: str) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            normalized = normalize_email(email)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Invalid email", ex)
            return
        await self.identity_repo.set_email(account_id=account_id, email=normalized)
        await interaction.followup.send(embed=self.embeds.success(title="Email saved", description=f"Invites to `{normalized}` will show in `/league invites`."), ephemeral=True)

    @league.command(name="invite", description="Invite someone to a league by email.")
    async def invite(self, interaction: discord.Interaction, league_id: int, email: str) -> None:
        await interaction.response.defer(ephemeral=True)
        actor = await self._account_id(interaction.user)
        try:
            invite_id = await self.leagues.invite(league_id=league_id, actor_account_id=actor, email=email)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not invite", ex)
            return
        await interaction.followup.send(embed=self.embeds.success(title="Invite sent", description=f"Invite `{invite_id}` created for `{email.strip().lower()}`."), ephemeral=True)

    @league.command(name="invites", description="Show your pending league invites.")
    async def invites(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        email = await self.identity_repo.get_email(account_id=account_id)
        if not email:
            await interaction.followup.send(embed=self.embeds.warning(title="No email", description="Set one first with `/league email`."), ephemeral=True)
            return

        pending = await self.leagues.list_invites(email=email)
        desc = "\n".join(f"`{inv.id}` · **{name}** (league #{inv.league_id})" for inv, name in pending) or "No pending invites."
        await interaction.followup.send(embed=self.embeds.info(title="Invites", description=desc), ephemeral=True)

    @league.command(name="respond", description="Accept or decline a league invite.")
    async def respond(self, interaction: discord.Interaction, invite_id: int, accept: bool) -> None:
        await interaction.response.defer(ephemeral=True)
        account_id = await self._account_id(interaction.user)
        try:
            league = await self.leagues.respond_to_invite(invite_id=invite_id, account_id=account_id, accept=accept)
        except LeagueServiceError as ex:
            await self._fail(interaction, "Could not respond", ex)
            return
        if league is None:
            e = self.embeds.info(title="Invite declined")
        else:
            e = self.embeds.success(title="Joined", description=f"You are in **{league.name}**.")
        await interaction.followup.send(embed=e, ephemeral=True)

    # -----------------------------
    # Ranking
    # -----------------------------

    @league.command(name="ranking", description="League leaderboard.")
    @app_commands.choices(view=[app_commands.Choice(name=VIEW_TITLES[v], value=v) for v in LEADERBOARD_VIEWS])
    async def ranking(
        self,
        interaction: discord.Interaction,
        league_id: int,
        view: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        await interaction.response.defer(ephemeral=False)
        v = view.value if view else "total"
        try:
            league = await self.leagues.get_league(league_id=league_id)
            board = await self.scoring.leaderboard(league_id=league_id, view=v)
        except (LeagueServiceError, ScoringServiceError) as ex:
            await self._fail(interaction, "Ranking unavailable", ex)
            return

        names = await self.identity_repo.display_names(account_ids=[e.user_id for e in board])
        text = self.leaderboard_view.render(board, names, view=v)
        await interaction.followup.send(embed=self.embeds.base(title=f"Ranking · {league.name}", description=text))


async def setup(
    bot: commands.Bot,
    *,
    identity_repo: IdentityRepo,
    league_service: LeagueService,
    scoring_service: ScoringService,
    embeds: Embeds,
    leaderboard_view: LeaderboardView,
) -> None:
    await bot.add_cog(
        LeagueCog(
            bot,
            identity_repo=identity_repo,
            league_service=league_service,
            scoring_service=scoring_service,
            embeds=embeds,
            leaderboard_view=leaderboard_view,
        )
    )
