"""
Verify command (self-service whitelist).
"""
import logging
from typing import Callable, Optional

import discord
from discord import app_commands

from services.whitelist import VerifyOutcome, VerifyRequest, WhitelistHandler
from utils.discord_helpers import grant_role, reply_ephemeral

logger = logging.getLogger("mc-bot.commands.verify")

WRONG_PLACE_MESSAGE = "Commands only work in the verify channel of the server."
FAILURE_MESSAGE = "Something went wrong... Please try again later."


async def run_verify(
    interaction: discord.Interaction,
    username: str,
    whitelist: WhitelistHandler,
    verify_channel_id: int,
    verified_role: Optional[discord.Role] = None,
) -> Optional[VerifyOutcome]:
    """
    Handle one ``/verify`` invocation.

    Args:
        interaction: The slash command interaction.
        username: Minecraft username typed by the user.
        whitelist: Handler running the verify flow.
        verify_channel_id: Only channel where the command is accepted.
        verified_role: Role given to the user on success, if any.

    Returns:
        Optional[VerifyOutcome]: Outcome of the flow, or None if it didn't run.
    """
    if interaction.guild is None or interaction.channel_id != verify_channel_id:
        await reply_ephemeral(interaction, WRONG_PLACE_MESSAGE)
        return None

    await interaction.response.defer(ephemeral=True, thinking=True)

    try:
        result = await whitelist.handle(VerifyRequest(interaction.user.id, username))
    except Exception as e:
        logger.exception(f"verify failed for {interaction.user} ({interaction.user.id}): {e}")
        await reply_ephemeral(interaction, FAILURE_MESSAGE)
        return None

    if result.ok:
        await grant_role(interaction.user, verified_role)

    await reply_ephemeral(interaction, result.message)
    return result.outcome


def create_verify_commands(
    tree: app_commands.CommandTree,
    whitelist: WhitelistHandler,
    verify_channel_id: int,
    verified_role_getter: Callable[[], Optional[discord.Role]],
) -> None:
    """
    Register the verify command.

    Args:
        tree: Command tree to add the command to.
        whitelist: Handler running the verify flow.
        verify_channel_id: Only channel where the command is accepted.
        verified_role_getter: Callable returning the verified role once known.
    """

    @tree.command(name="verify", description="Verify a Minecraft username and add it to the whitelist.")
    @app_commands.describe(username="Your Minecraft username")
    async def verify(interaction: discord.Interaction, username: str):
        await run_verify(
            interaction,
            username,
            whitelist,
            verify_channel_id,
            verified_role_getter(),
        )
