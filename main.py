# main.py
from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

import discord
from discord.ext import commands

from config import BotConfig, load_config
from db.pool import DbPool

from repositories.identity_repo import IdentityRepo
from repositories.league_repo import LeagueRepo
from repositories.match_repo import MatchRepo
from repositories.prediction_repo import PredictionRepo
from repositories.simulation_repo import SimulationRepo

from services.bracket_service import BracketService
from services.league_service import LeagueService
from services.prediction_service import PredictionService
from services.scoring_service import ScoringService
from services.simulation_service import SimulationService

from renderers.embeds import Embeds
from renderers.bracket_diagram import BracketDiagramRenderer
from renderers.bracket_view import BracketView
from renderers.leaderboard_view import LeaderboardView
from renderers.standings_view import StandingsView

from cogs.admin_cog import setup as setup_admin_cog
from cogs.cup_cog import setup as setup_cup_cog
from cogs.league_cog import setup as setup_league_cog
from cogs.predictions_cog import setup as setup_predictions_cog

log = logging.getLogger(__name__)


class BolaoBot(commands.Bot):
    def __init__(self, cfg: BotConfig) -> None:
        self.cfg = cfg

        super().__init__(
            command_prefix=cfg.command_prefix,
            intents=discord.Intents.default(),
            allowed_mentions=discord.AllowedMentions.none(),
        )

        self.db: Optional[DbPool] = None

    async def setup_hook(self) -> None:
        mysql = self.cfg.mysql
        log.info("Connecting to MySQL %s:%s/%s", mysql.host, mysql.port, mysql.database)

        # --- DB ---
        self.db = DbPool()
        await self.db.start(mysql)

        # --- Repos ---
        identity_repo = IdentityRepo(self.db)
        match_repo = MatchRepo(self.db)
        league_repo = LeagueRepo(self.db)
        prediction_repo = PredictionRepo(self.db)
        simulation_repo = SimulationRepo(self.db)

        # --- Services ---
        bracket_service = BracketService(match_repo, simulation_repo)
        prediction_service = PredictionService(
            prediction_repo=prediction_repo,
            match_repo=match_repo,
            league_repo=league_repo,
            lock_minutes=self.cfg.prediction_lock_minutes,
        )
        scoring_service = ScoringService(
            league_repo=league_repo,
            prediction_repo=prediction_repo,
            bracket_service=bracket_service,
        )
        league_service = LeagueService(league_repo=league_repo, identity_repo=identity_repo)
        simulation_service = SimulationService(
            simulation_repo=simulation_repo,
            prediction_repo=prediction_repo,
            prediction_service=prediction_service,
        )

        # --- Renderers ---
        embeds = Embeds()
        standings_view = StandingsView()
        bracket_view = BracketView()
        bracket_diagram = BracketDiagramRenderer()
        leaderboard_view = LeaderboardView()

        # --- Cogs ---
        await setup_admin_cog(
            self,
            identity_repo=identity_repo,
            bracket_service=bracket_service,
            league_service=league_service,
            embeds=embeds,
            admin_ids=self.cfg.bot_admin_ids,
        )
        await setup_league_cog(
            self,
            identity_repo=identity_repo,
            league_service=league_service,
            scoring_service=scoring_service,
            embeds=embeds,
            leaderboard_view=leaderboard_view,
        )
        await setup_predictions_cog(
            self,
            identity_repo=identity_repo,
            prediction_service=prediction_service,
            scoring_service=scoring_service,
            bracket_service=bracket_service,
            embeds=embeds,
        )
        await setup_cup_cog(
            self,
            identity_repo=identity_repo,
            bracket_service=bracket_service,
            simulation_service=simulation_service,
            embeds=embeds,
            standings_view=standings_view,
            bracket_view=bracket_view,
            bracket_diagram=bracket_diagram,
            lock_minutes=self.cfg.prediction_lock_minutes,
        )

        # --- Slash sync ---
        if self.cfg.dev_guild_id:
            guild = discord.Object(id=self.cfg.dev_guild_id)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            log.info("Slash commands synced to dev guild %s", self.cfg.dev_guild_id)
        else:
            await self.tree.sync()
            log.info("Slash commands synced globally")

        log.info("Bolão ready: %d bot admin(s), predictions lock %d min before kickoff", len(self.cfg.bot_admin_ids), self.cfg.prediction_lock_minutes)

    async def close(self) -> None:
        try:
            await super().close()
        finally:
            if self.db:
                await self.db.close()
                self.db = None


async def _run_bot() -> None:
    cfg = load_config()

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    bot = BolaoBot(cfg)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _request_stop(*_args) -> None:
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop)
        except NotImplementedError:
            pass

    async with bot:
        runner = asyncio.create_task(bot.start(cfg.token))
        stopper = asyncio.create_task(stop_event.wait())
        done, _pending = await asyncio.wait({runner, stopper}, return_when=asyncio.FIRST_COMPLETED)
        if runner in done:
            stopper.cancel()
            runner.result()
        else:
            await bot.close()
            await runner


def main() -> None:
    asyncio.run(_run_bot())


if __name__ == "__main__":
    main()
