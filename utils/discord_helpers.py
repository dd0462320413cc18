"""
Discord-specific utility functions.
"""
import logging
from typing import Optional

import discord

logger = logging.getLogger("mc-bot.discord")

VERIFY_INFO_TITLE = "Verification Ready!"
VERIFY_INFO_DESCRIPTION = (
    "Type `/verify <username>` to add your minecraft profile to the server whitelist."
)
VERIFY_INFO_FOOTER = "Minecraft Verification Bot"
VERIFY_INFO_HISTORY_LIMIT = 100


# Pastel color palette for embeds
class PastelColors:
    """Pastel color palette for Discord embeds."""
    GREEN = discord.Color.from_rgb(169, 223, 191)      # Pastel mint green


def build_verify_info_embed() -> discord.Embed:
    """Build the usage message posted in the verify channel."""
    embed = discord.Embed(
        title=VERIFY_INFO_TITLE,
        description=VERIFY_INFO_DESCRIPTION,
        color=PastelColors.GREEN,
    )
    embed.set_footer(text=VERIFY_INFO_FOOTER)
    return embed


def is_verify_info_message(message: discord.Message, bot_user: discord.abc.User) -> bool:
    """Check whether ``message`` is a usage message previously posted by the bot."""
    if message.author.id != bot_user.id:
        return False
    return any(embed.title == VERIFY_INFO_TITLE for embed in message.embeds)


async def ensure_verify_info_message(
    channel: discord.TextChannel,
    bot_user: discord.abc.User,
) -> Optional[discord.Message]:
    """
    Post the verify usage message unless the bot already did.

    Recent history is searched first, so restarts do not repost it.

    Args:
        channel: The verify channel.
        bot_user: The bot's own user.

    Returns:
        Optional[discord.Message]: The newly posted message, or None if one
        already existed or posting failed.
    """
    try:
        async for message in channel.history(limit=VERIFY_INFO_HISTORY_LIMIT):
            if is_verify_info_message(message, bot_user):
                logger.info("Verify info message already present")
                return None

        message = await channel.send(embed=build_verify_info_embed())
        logger.info("Sent the verify info message")
    except discord.HTTPException as e:
        logger.error(f"Could not post the verify info message: {e}")
        return None

    return message


async def ensure_verified_role(guild: discord.Guild, role_name: str) -> Optional[discord.Role]:
    """
    Get the verified role, creating it if it doesn't exist.

    Args:
        guild: Guild the bot serves.
        role_name: Name of the role.

    Returns:
        Optional[discord.Role]: The role, or None if it could not be created.
    """
    role = discord.utils.get(guild.roles, name=role_name)
    if role is not None:
        return role

    try:
        role = await guild.create_role(
            name=role_name,
            colour=discord.Colour.blue(),
            hoist=True,
            reason="Role for users who whitelisted a Minecraft account",
        )
    except discord.HTTPException as e:
        logger.error(f"Could not create the {role_name} role: {e}")
        return None

    logger.info(f"Created the {role_name} role")
    return role


async def grant_role(member: discord.abc.User, role: Optional[discord.Role]) -> bool:
    """Give ``role`` to ``member``; failures are logged only."""
    if role is None or not isinstance(member, discord.Member):
        return False
    try:
        await member.add_roles(role, reason="Verified a Minecraft username")
    except discord.HTTPException as e:
        logger.warning(f"Could not give {role.name} to {member}: {e}")
        return False
    return True


async def rename_channel(channel: discord.abc.GuildChannel, new_name: str) -> bool:
    """
    Rename a channel.

    Returns:
        bool: True if the rename went through.
    """
    old_name = channel.name
    if old_name == new_name:
        return True
    try:
        await channel.edit(name=new_name)
    except discord.HTTPException as e:
        logger.error(f"Couldn't change the name of channel {channel.id}: {e}")
        return False
    logger.info(f"Channel name changed from '{old_name}' to '{new_name}'")
    return True


async def reply_ephemeral(interaction: discord.Interaction, message: str) -> bool:
    """
    Reply to an interaction visible only to the invoking user.

    Works whether or not the response was deferred.

    Returns:
        bool: True if the reply was delivered.
    """
    try:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)
    except discord.HTTPException as e:
        logger.error(f"Couldn't respond to interaction from {interaction.user}: {e}")
        return False
    return True


async def update_bot_presence(
    bot: discord.Client,
    online: bool,
    player_count: Optional[int]
) -> None:
    """
    Update the bot's Discord presence based on server status.

    Args:
        bot: Discord bot client.
        online: Whether the server answered the last probe.
        player_count: Number of players online.
    """
    if not online:
        activity_text = "Minecraft: offline"
        status = discord.Status.idle
    else:
        # Server is up; choose message based on players
        if player_count is None:
            activity_text = "Minecraft: online"
        elif player_count == 1:
            activity_text = "Minecraft: 1 player online"
        else:
            activity_text = f"Minecraft: {player_count} players online"
        status = discord.Status.online

    try:
        await bot.change_presence(
            status=status,
            activity=discord.Game(name=activity_text),
        )
    except Exception as e:
        # Don't log at warning level to avoid spam
        logger.debug(f"Could not update presence: {e}")
