"""
Self-service whitelist verification.

A Discord user may whitelist exactly one Minecraft username. The flow is
independent of Discord so it can be exercised with fakes:

    check record -> validate name -> (Mojang lookup) -> RCON -> record

The record is written only after the server accepted the command, so a user
whose request failed at the RCON step can try again.
"""
import asyncio
import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from services.mojang import MojangLookupError, MojangService
from services.rcon import RconError, RCONService
from services.store import VerifiedStore, new_verified_user

logger = logging.getLogger("mc-bot.whitelist")

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]{3,16}")


class VerifyOutcome(enum.Enum):
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    INVALID_USERNAME = "invalid_username"
    UNKNOWN_PLAYER = "unknown_player"
    LOOKUP_FAILED = "lookup_failed"
    RCON_FAILED = "rcon_failed"


@dataclass(frozen=True)
class VerifyRequest:
    discord_user_id: int
    username: str


@dataclass(frozen=True)
class VerifyResult:
    outcome: VerifyOutcome
    username: str
    message: str

    @property
    def ok(self) -> bool:
        return self.outcome is VerifyOutcome.VERIFIED


def is_valid_username(username: str) -> bool:
    """
    Check a Minecraft Java username: 3-16 letters, digits or underscores.

    Anything else could smuggle extra arguments into the RCON command line.
    """
    return bool(USERNAME_PATTERN.fullmatch(username))


def _rejected_by_server(response: str) -> bool:
    return "does not exist" in response.lower()


class WhitelistHandler:
    """Runs the verify flow for one request at a time per Discord user."""

    def __init__(
        self,
        store: VerifiedStore,
        rcon: RCONService,
        mojang: Optional[MojangService] = None,
    ):
        self.store = store
        self.rcon = rcon
        self.mojang = mojang
        self._locks: Dict[int, asyncio.Lock] = {}
        self._pending: Dict[int, int] = {}

    async def handle(self, request: VerifyRequest) -> VerifyResult:
        """
        Verify ``request`` and whitelist its username.

        Concurrent requests from the same user are serialized, so the second
        one sees the record written by the first.
        """
        user_id = request.discord_user_id
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._pending[user_id] = self._pending.get(user_id, 0) + 1
        try:
            async with lock:
                return await self._handle(request)
        finally:
            # Drop the lock once no request for this user is running or queued
            self._pending[user_id] -= 1
            if not self._pending[user_id]:
                del self._pending[user_id]
                del self._locks[user_id]

    async def _handle(self, request: VerifyRequest) -> VerifyResult:
        username = request.username

        existing = self.store.get(request.discord_user_id)
        if existing is not None:
            logger.info(
                f"User {request.discord_user_id} already verified as '{existing.minecraft_username}'"
            )
            return VerifyResult(
                VerifyOutcome.ALREADY_VERIFIED,
                existing.minecraft_username,
                "You have already verified a username, please contact an admin if you have "
                "verified the wrong username or need to change it.",
            )

        if not is_valid_username(username):
            logger.info(f"User {request.discord_user_id} sent invalid username {request.username!r}")
            return VerifyResult(
                VerifyOutcome.INVALID_USERNAME,
                username,
                "That is not a valid Minecraft username. Usernames are 3-16 characters long "
                "and may only contain letters, numbers and underscores.",
            )

        if self.mojang is not None:
            try:
                profile = await self.mojang.lookup(username)
            except MojangLookupError as e:
                logger.warning(f"Mojang lookup for '{username}' failed: {e}")
                return VerifyResult(
                    VerifyOutcome.LOOKUP_FAILED,
                    username,
                    "Couldn't fetch the profile from the Mojang API. Please try again.",
                )
            if profile is None:
                return VerifyResult(
                    VerifyOutcome.UNKNOWN_PLAYER,
                    username,
                    f"There isn't a Mojang user with '{username}' username. Please try again.",
                )
            username = profile.name

        try:
            response = await self.rcon.whitelist_add(username)
        except RconError as e:
            logger.error(f"Whitelisting '{username}' for {request.discord_user_id} failed ({e.kind.value})")
            return VerifyResult(
                VerifyOutcome.RCON_FAILED,
                username,
                "Could not reach the Minecraft server. It is probably offline right now, "
                "try again later.",
            )

        if _rejected_by_server(response):
            logger.info(f"Server rejected '{username}': {response}")
            return VerifyResult(
                VerifyOutcome.UNKNOWN_PLAYER,
                username,
                f"The server doesn't know a player called '{username}'. Please try again.",
            )

        self.store.add(new_verified_user(request.discord_user_id, username))
        logger.info(f"'{username}' was successfully added to the whitelist")
        return VerifyResult(
            VerifyOutcome.VERIFIED,
            username,
            f"'{username}' was successfully added to the whitelist!",
        )
