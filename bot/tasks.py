"""
Background tasks for the Discord bot.
"""
import logging

import discord
from discord.ext import tasks

from config import Config
from services.status import ServerStatus, StatusPoller, status_from_channel_name
from utils.discord_helpers import update_bot_presence

logger = logging.getLogger("mc-bot.tasks")


class BotTasks:
    """Manages background tasks for the bot."""

    def __init__(
        self,
        bot: discord.Client,
        poller: StatusPoller,
        status_channel_id: int,
    ):
        """
        Initialize bot tasks.

        Args:
            bot: Discord bot client.
            poller: Poller owning the last known server status.
            status_channel_id: Channel whose name shows the server status.
        """
        self.bot = bot
        self.poller = poller
        self.status_channel_id = status_channel_id

        # Create the task
        self._status_check_task = tasks.loop(seconds=Config.POLL_INTERVAL_SECONDS)(self._status_check)
        self._status_check_task.before_loop(self._before_status_check)

    def start(self) -> None:
        """Start all background tasks."""
        if not self._status_check_task.is_running():
            self._status_check_task.start()
            logger.info("Background tasks started")

    def stop(self) -> None:
        """Stop all background tasks."""
        if self._status_check_task.is_running():
            self._status_check_task.cancel()
            logger.info("Background tasks stopped")

    async def _before_status_check(self) -> None:
        """Wait for bot to be ready and read the status the channel shows."""
        await self.bot.wait_until_ready()

        channel = self.bot.get_channel(self.status_channel_id)
        if channel is not None:
            self.poller.seed(status_from_channel_name(channel.name))
        else:
            logger.warning(f"Status channel {self.status_channel_id} not in cache; assuming offline")
            self.poller.seed(ServerStatus.OFFLINE)
        logger.info("Status check task initialized")

    async def _status_check(self) -> None:
        """
        Background task that probes the server and updates the status channel.
        Iterations never overlap; a slow probe delays the next one.
        """
        try:
            result = await self.poller.tick()
        except Exception as e:
            logger.error(f"Status check failed: {e}")
            return

        await update_bot_presence(
            self.bot,
            result.status is ServerStatus.ONLINE,
            result.players_online,
        )
        logger.debug(f"Tick complete ({result.status.value})")
