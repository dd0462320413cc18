"""
RCON service module for Minecraft server communication.
"""
import asyncio
import enum
import logging
import socket
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Optional, Tuple

from mcrcon import MCRcon, MCRconException

logger = logging.getLogger("mc-bot.rcon")

# Global process pool executor for RCON calls
# Use process pool to avoid signal issues with threading
_rcon_executor = ProcessPoolExecutor(max_workers=2)


class RconErrorKind(str, enum.Enum):
    """Ways a single RCON exchange can fail."""

    CONNECTION_FAILED = "connection_failed"
    AUTH_FAILED = "auth_failed"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"


class RconError(Exception):
    """Raised when an RCON command could not be completed."""

    def __init__(self, kind: RconErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


def _classify_rcon_error(error: BaseException) -> RconErrorKind:
    """
    Map an exception raised by mcrcon or the socket layer to an error kind.

    Args:
        error: Exception raised while talking to the server.

    Returns:
        RconErrorKind: Kind reported to the caller.
    """
    if isinstance(error, MCRconException):
        text = str(error).lower()
        if "login" in text:
            return RconErrorKind.AUTH_FAILED
        if "timeout" in text:
            return RconErrorKind.TIMEOUT
        if "connection" in text:
            return RconErrorKind.CONNECTION_FAILED
        return RconErrorKind.MALFORMED_RESPONSE
    # socket.timeout is an OSError subclass, so test it first
    if isinstance(error, (socket.timeout, TimeoutError)):
        return RconErrorKind.TIMEOUT
    if isinstance(error, OSError):
        return RconErrorKind.CONNECTION_FAILED
    return RconErrorKind.MALFORMED_RESPONSE


def _execute_rcon_command(
    host: str,
    password: str,
    port: int,
    timeout: int,
    cmd: str
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Execute RCON command in a separate process.
    This function must be at module level to be picklable for ProcessPoolExecutor.

    Args:
        host: RCON host address.
        password: RCON password.
        port: RCON port.
        timeout: Seconds allowed for connecting and for each response.
        cmd: Command to execute.

    Returns:
        Tuple[bool, Optional[str], Optional[str]]: Success status, response on
        success, or ``"<kind>|<detail>"`` on failure.
    """
    # mcrcon connects without a socket timeout; its alarm only covers reads
    previous_timeout = socket.getdefaulttimeout()
    socket.setdefaulttimeout(timeout)
    try:
        with MCRcon(host, password, port=port, timeout=timeout) as mcr:
            return True, mcr.command(cmd), None
    except Exception as e:
        # Logger won't work across processes, so we just return the error
        return False, None, f"{_classify_rcon_error(e).value}|{e}"
    finally:
        socket.setdefaulttimeout(previous_timeout)


class RCONService:
    """Service for managing Minecraft RCON connections."""

    def __init__(
        self,
        host: str,
        port: int,
        password: str,
        timeout: int = 5,
        executor: Optional[Executor] = None,
        deadline: Optional[float] = None,
    ):
        """
        Initialize RCON service.

        Args:
            host: Minecraft server host.
            port: RCON port.
            password: RCON password.
            timeout: Seconds allowed for connecting and for each response.
            executor: Executor running the blocking mcrcon calls. Defaults to
                the module process pool.
            deadline: Seconds the whole exchange may take. Defaults to
                enough for connect, login and command to each hit ``timeout``.
        """
        self.host = host
        self.port = port
        self.password = password
        self.timeout = timeout
        self.executor = executor or _rcon_executor
        self.deadline = deadline if deadline is not None else timeout * 3 + 1

    async def execute_command(self, cmd: str) -> str:
        """
        Execute a command via RCON.

        One connection is opened, authenticated, used for ``cmd`` and closed.

        Args:
            cmd: Command to execute.

        Returns:
            str: Response text from the server.

        Raises:
            RconError: If connecting, authenticating or reading the reply failed.
        """
        loop = asyncio.get_running_loop()

        # Run in process pool to avoid signal issues
        try:
            ok, resp, error = await asyncio.wait_for(
                loop.run_in_executor(
                    self.executor,
                    _execute_rcon_command,
                    self.host,
                    self.password,
                    self.port,
                    self.timeout,
                    cmd
                ),
                timeout=self.deadline,
            )
        except asyncio.TimeoutError:
            logger.warning(f"RCON '{cmd}' failed (timeout): no result after {self.deadline}s")
            raise RconError(RconErrorKind.TIMEOUT, f"no result after {self.deadline}s")

        if not ok:
            kind_value, _, detail = (error or "").partition("|")
            try:
                kind = RconErrorKind(kind_value)
            except ValueError:
                kind = RconErrorKind.MALFORMED_RESPONSE
            logger.warning(f"RCON '{cmd}' failed ({kind.value}): {detail}")
            raise RconError(kind, detail)

        logger.info(f"RCON '{cmd}' response: {resp}")
        return resp or ""

    async def whitelist_add(self, username: str) -> str:
        """
        Add a player to the server whitelist.

        Args:
            username: Validated Minecraft username.

        Returns:
            str: Server response.
        """
        return await self.execute_command(f"whitelist add {username}")
