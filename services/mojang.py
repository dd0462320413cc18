"""
Mojang API service module for Minecraft profile lookups.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger("mc-bot.mojang")

PROFILE_URL = "https://api.mojang.com/users/profiles/minecraft/{username}"


class MojangLookupError(Exception):
    """Raised when the Mojang API could not be reached or answered nonsense."""


@dataclass(frozen=True)
class MojangProfile:
    """A Minecraft account as known to Mojang."""

    id: str
    name: str


class MojangService:
    """Service for resolving Minecraft usernames to profiles."""

    def __init__(self, timeout: int = 10):
        self.timeout = timeout
        self.session = requests.Session()

    def get_profile(self, username: str) -> Optional[MojangProfile]:
        """
        Look up a profile by username.

        Args:
            username: Minecraft username, already validated.

        Returns:
            Optional[MojangProfile]: Profile with the canonical name, or None if
            no account has that name.

        Raises:
            MojangLookupError: If the API could not be queried.
        """
        try:
            resp = self.session.get(PROFILE_URL.format(username=username), timeout=self.timeout)
        except requests.RequestException as e:
            raise MojangLookupError(f"Mojang API unreachable: {e}") from e

        # Unknown names are answered with 204 or 404 depending on API version
        if resp.status_code in (204, 404):
            logger.info(f"No Mojang profile for '{username}'")
            return None

        if resp.status_code != 200:
            raise MojangLookupError(f"Mojang API returned HTTP {resp.status_code}")

        try:
            data = resp.json()
            profile = MojangProfile(id=data["id"], name=data["name"])
        except (ValueError, KeyError, TypeError) as e:
            raise MojangLookupError(f"Unexpected Mojang API response: {e}") from e

        logger.info(f"Resolved '{username}' to Mojang profile {profile.name} ({profile.id})")
        return profile

    async def lookup(self, username: str) -> Optional[MojangProfile]:
        """Run :meth:`get_profile` off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get_profile, username)
