"""
State shared by the status task and the verify command.
"""
import functools
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from config import Config
from services.mojang import MojangService
from services.rcon import RCONService
from services.status import ServerStatus, StatusPoller, probe_server
from services.store import VerifiedStore
from services.whitelist import WhitelistHandler

logger = logging.getLogger("mc-bot.context")


@dataclass
class BotContext:
    """Owns the last known server status and the verified-user store."""

    store: VerifiedStore
    rcon: RCONService
    whitelist: WhitelistHandler
    poller: StatusPoller

    @classmethod
    def from_config(
        cls,
        on_status_change: Callable[[ServerStatus], Awaitable[object]],
    ) -> "BotContext":
        """
        Build every service from the validated configuration.

        Args:
            on_status_change: Called by the poller when the server status flips.
        """
        store = VerifiedStore(Config.VERIFIED_DB_PATH)
        rcon = RCONService(
            Config.SERVER_HOST,
            Config.RCON_PORT_NUMBER,
            Config.RCON_PASSWORD,
            timeout=Config.RCON_TIMEOUT_SECONDS,
        )
        mojang = MojangService() if Config.MOJANG_LOOKUP else None
        if mojang is None:
            logger.info("Mojang profile lookup disabled")

        probe = functools.partial(
            probe_server,
            Config.SERVER_HOST,
            Config.SERVER_PORT,
            Config.PROBE_TIMEOUT_SECONDS,
        )
        return cls(
            store=store,
            rcon=rcon,
            whitelist=WhitelistHandler(store, rcon, mojang),
            poller=StatusPoller(probe, on_status_change),
        )

    def close(self) -> None:
        self.store.close()
