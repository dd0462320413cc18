"""Tests for the /verify command wiring."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from commands.verify import FAILURE_MESSAGE, WRONG_PLACE_MESSAGE, create_verify_commands, run_verify
from services.whitelist import VerifyOutcome, WhitelistHandler

VERIFY_CHANNEL_ID = 222


@pytest.mark.asyncio
class TestRunVerify:

    async def test_success_replies_ephemerally(self, interaction, store, fake_rcon):
        handler = WhitelistHandler(store, fake_rcon)

        outcome = await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID)

        assert outcome is VerifyOutcome.VERIFIED
        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        interaction.followup.send.assert_awaited_once_with(
            "'Steve' was successfully added to the whitelist!", ephemeral=True
        )

    async def test_second_run_is_rejected_without_rcon(self, interaction, store, fake_rcon):
        handler = WhitelistHandler(store, fake_rcon)

        await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID)
        outcome = await run_verify(interaction, "Alex", handler, VERIFY_CHANNEL_ID)

        assert outcome is VerifyOutcome.ALREADY_VERIFIED
        assert fake_rcon.whitelist_add.await_count == 1

    async def test_invalid_name_reply(self, interaction, store, fake_rcon):
        handler = WhitelistHandler(store, fake_rcon)

        outcome = await run_verify(interaction, "In Valid Name", handler, VERIFY_CHANNEL_ID)

        assert outcome is VerifyOutcome.INVALID_USERNAME
        fake_rcon.whitelist_add.assert_not_awaited()
        message = interaction.followup.send.await_args.args[0]
        assert "not a valid Minecraft username" in message

    async def test_wrong_channel(self, interaction, store, fake_rcon):
        interaction.channel_id = 999
        interaction.response.is_done.return_value = False
        handler = WhitelistHandler(store, fake_rcon)

        outcome = await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID)

        assert outcome is None
        interaction.response.send_message.assert_awaited_once_with(WRONG_PLACE_MESSAGE, ephemeral=True)
        fake_rcon.whitelist_add.assert_not_awaited()

    async def test_direct_message(self, interaction, store, fake_rcon):
        interaction.guild = None
        interaction.response.is_done.return_value = False
        handler = WhitelistHandler(store, fake_rcon)

        assert await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID) is None
        interaction.response.defer.assert_not_awaited()

    async def test_unexpected_error_gets_generic_reply(self, interaction):
        handler = MagicMock()
        handler.handle = AsyncMock(side_effect=RuntimeError("database is locked"))

        outcome = await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID)

        assert outcome is None
        interaction.followup.send.assert_awaited_once_with(FAILURE_MESSAGE, ephemeral=True)

    async def test_role_granted_on_success(self, interaction, store, fake_rcon):
        member = MagicMock(spec=discord.Member)
        member.id = 1001
        member.add_roles = AsyncMock()
        interaction.user = member
        role = MagicMock(spec=discord.Role)
        handler = WhitelistHandler(store, fake_rcon)

        await run_verify(interaction, "Steve", handler, VERIFY_CHANNEL_ID, role)

        member.add_roles.assert_awaited_once()
        assert member.add_roles.await_args.args == (role,)

    async def test_role_not_granted_on_failure(self, interaction, store, fake_rcon):
        member = MagicMock(spec=discord.Member)
        member.id = 1001
        member.add_roles = AsyncMock()
        interaction.user = member
        handler = WhitelistHandler(store, fake_rcon)

        await run_verify(interaction, "no", handler, VERIFY_CHANNEL_ID, MagicMock(spec=discord.Role))

        member.add_roles.assert_not_awaited()


def test_verify_command_registered(store, fake_rcon):
    client = discord.Client(intents=discord.Intents.default())
    tree = discord.app_commands.CommandTree(client)

    create_verify_commands(tree, WhitelistHandler(store, fake_rcon), VERIFY_CHANNEL_ID, lambda: None)

    command = tree.get_command("verify")
    assert command is not None
    assert [p.name for p in command.parameters] == ["username"]
    assert command.parameters[0].required
