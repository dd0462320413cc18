"""
Discord bot client setup and initialization.
"""
import logging
from typing import Optional

import discord
from discord import app_commands

from config import Config
from bot.context import BotContext
from bot.tasks import BotTasks
from commands.verify import create_verify_commands
from services.status import ServerStatus, status_channel_name
from utils.discord_helpers import (
    ensure_verified_role,
    ensure_verify_info_message,
    rename_channel,
    reply_ephemeral,
)

logger = logging.getLogger("mc-bot.client")


class MinecraftBot:
    """Main bot class that orchestrates all components."""

    def __init__(self):
        """Initialize the Minecraft Discord bot."""
        # Setup Discord client
        intents = discord.Intents.default()
        self.bot = discord.Client(intents=intents)
        self.tree = app_commands.CommandTree(self.bot)

        # Initialize services
        self.context = BotContext.from_config(self._on_status_change)
        self.verified_role: Optional[discord.Role] = None
        self._setup_done = False

        # Initialize background tasks
        self.bot_tasks = BotTasks(
            self.bot,
            self.context.poller,
            Config.STATUS_CHANNEL_ID,
        )

        # Register commands
        self._register_commands()

        # Register event handlers
        self._register_events()

    def _register_commands(self) -> None:
        """Register the verify command."""
        create_verify_commands(
            self.tree,
            self.context.whitelist,
            Config.VERIFY_CHANNEL_ID,
            lambda: self.verified_role,  # Pass getter, the role is resolved on ready
        )

    def _register_events(self) -> None:
        """Register Discord event handlers."""

        @self.bot.event
        async def on_ready():
            """Called when the bot is ready (again after every reconnect)."""
            await self._on_ready()

    async def _on_ready(self) -> None:
        logger.info(f"Logged in as {self.bot.user} (ID: {self.bot.user.id})")

        # The status loop does not depend on the guild setup
        self.bot_tasks.start()

        if self._setup_done:
            return

        try:
            await self._setup()
        except Exception as e:
            logger.error(f"Setup failed, retrying on next ready: {e}")
            return

        self._setup_done = True

    async def _setup(self) -> None:
        """Prepare the guild: role, usage message and slash commands."""
        verify_channel = self.bot.get_channel(Config.VERIFY_CHANNEL_ID)
        if verify_channel is None:
            verify_channel = await self.bot.fetch_channel(Config.VERIFY_CHANNEL_ID)
        guild = verify_channel.guild

        if Config.has_verified_role():
            self.verified_role = await ensure_verified_role(guild, Config.VERIFIED_ROLE_NAME)

        await ensure_verify_info_message(verify_channel, self.bot.user)

        # Sync slash commands to the guild only
        self.tree.copy_global_to(guild=guild)
        await self.tree.sync(guild=guild)
        logger.info(f"Slash commands synced to {guild.name}.")

    def get_status_channel(self) -> Optional[discord.abc.GuildChannel]:
        return self.bot.get_channel(Config.STATUS_CHANNEL_ID)

    async def rename_status_channel(self, new_name: str) -> bool:
        """
        Rename the status channel.

        A failed rename is logged and not retried.
        """
        channel = self.get_status_channel()
        if channel is None:
            logger.error(f"Status channel {Config.STATUS_CHANNEL_ID} not found")
            return False
        return await rename_channel(channel, new_name)

    async def reply_to_interaction(self, interaction: discord.Interaction, message: str) -> bool:
        return await reply_ephemeral(interaction, message)

    async def _on_status_change(self, status: ServerStatus) -> None:
        channel = self.get_status_channel()
        current_name = channel.name if channel is not None else ""
        await self.rename_status_channel(status_channel_name(current_name, status))

    def run(self) -> None:
        """
        Start the bot.

        Configuration must already be validated.
        """
        logger.info("Starting Minecraft Discord bot...")
        try:
            self.bot.run(Config.DISCORD_TOKEN, log_handler=None)
        finally:
            self.bot_tasks.stop()
            self.context.close()
