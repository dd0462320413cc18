"""
Minecraft server status probing and the status-channel poller.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from mcstatus import JavaServer

logger = logging.getLogger("mc-bot.status")

ONLINE_MARKER = "🟢"
OFFLINE_MARKER = "🔴"
DEFAULT_CHANNEL_NAME = "Minecraft Server"


class ServerStatus(enum.Enum):
    """Reachability of the Minecraft server as last observed."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single status probe."""

    status: ServerStatus
    players_online: Optional[int] = None

    @classmethod
    def offline(cls) -> "ProbeResult":
        return cls(ServerStatus.OFFLINE)


async def probe_server(host: str, port: int, timeout: float = 5.0) -> ProbeResult:
    """
    Ping the server with a Server List Ping handshake.

    Any failure, refusal or timeout is reported as offline.

    Args:
        host: Minecraft server host.
        port: Minecraft server port.
        timeout: Seconds allowed for the whole handshake.

    Returns:
        ProbeResult: Observed status with the player count when online.
    """
    server = JavaServer(host, port, timeout=timeout)
    try:
        status = await asyncio.wait_for(server.async_status(), timeout=timeout)
    except Exception as e:
        logger.info(f"Server {host}:{port} did not answer the status ping: {e!r}")
        return ProbeResult.offline()

    return ProbeResult(
        status=ServerStatus.ONLINE,
        players_online=status.players.online,
    )


def _strip_marker(name: str) -> str:
    for marker in (ONLINE_MARKER, OFFLINE_MARKER):
        if name.startswith(marker):
            return name[len(marker):].strip()
    return name.strip()


def status_channel_name(current_name: str, status: ServerStatus) -> str:
    """
    Build the status channel name for ``status``.

    The leading status marker is replaced and the rest of the name kept.

    >>> status_channel_name("🔴 Survival", ServerStatus.ONLINE)
    '🟢 Survival'
    """
    base = _strip_marker(current_name or "") or DEFAULT_CHANNEL_NAME
    marker = ONLINE_MARKER if status is ServerStatus.ONLINE else OFFLINE_MARKER
    return f"{marker} {base}"


def status_from_channel_name(name: str) -> ServerStatus:
    """Read the status currently shown by a channel name."""
    if (name or "").startswith(ONLINE_MARKER):
        return ServerStatus.ONLINE
    return ServerStatus.OFFLINE


class StatusPoller:
    """
    Tracks the last observed server status and reports changes.

    ``probe`` is awaited once per tick. ``on_change`` is awaited exactly once
    whenever the observed status differs from the previous observation.
    """

    def __init__(
        self,
        probe: Callable[[], Awaitable[ProbeResult]],
        on_change: Callable[[ServerStatus], Awaitable[object]],
        initial: ServerStatus = ServerStatus.OFFLINE,
    ):
        self._probe = probe
        self._on_change = on_change
        self.last_status = initial

    def seed(self, status: ServerStatus) -> None:
        """Align the last known status with what is already displayed."""
        logger.info(f"Status poller seeded with {status.value}")
        self.last_status = status

    async def tick(self) -> ProbeResult:
        """
        Run one probe and report a status change if there is one.

        Returns:
            ProbeResult: What this tick observed.
        """
        try:
            result = await self._probe()
        except Exception as e:
            logger.warning(f"Status probe failed, treating server as offline: {e}")
            result = ProbeResult.offline()

        if result.status == self.last_status:
            return result

        previous = self.last_status
        self.last_status = result.status
        logger.info(f"Server status changed: {previous.value} -> {result.status.value}")

        try:
            await self._on_change(result.status)
        except Exception as e:
            # Superseded by the next change
            logger.error(f"Failed to publish status change to {result.status.value}: {e}")

        return result
