"""
Configuration module for the Minecraft Discord Bot.
Loads and validates environment variables.
"""
import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_MINECRAFT_PORT = 25565


class ConfigError(ValueError):
    """Raised when the environment does not hold a usable configuration."""


def _parse_server_address(value: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` address.

    Args:
        value: Address as given in SERVER_ADDRESS. The port is optional.

    Returns:
        Tuple[str, int]: Host and port.

    Raises:
        ValueError: If the host is empty or the port is not a valid port number.
    """
    host, sep, port_text = value.strip().rpartition(":")
    if not sep:
        host, port_text = port_text, str(DEFAULT_MINECRAFT_PORT)

    if not host:
        raise ValueError("host is empty")

    port = int(port_text)
    if not 0 < port < 65536:
        raise ValueError(f"port {port} out of range")
    return host, port


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Central configuration management using environment variables."""

    # Discord Configuration
    DISCORD_TOKEN: Optional[str] = None
    DISCORD_STATUS_CHANNEL_ID: Optional[str] = None
    DISCORD_VERIFY_CHANNEL_ID: Optional[str] = None

    # Minecraft Server
    SERVER_ADDRESS: Optional[str] = None
    STATUS_POLL_SECONDS: Optional[str] = None
    STATUS_PROBE_TIMEOUT: Optional[str] = None

    # RCON Configuration
    RCON_PORT: Optional[str] = None
    RCON_PASSWORD: Optional[str] = None
    RCON_TIMEOUT: Optional[str] = None

    # Verification
    VERIFIED_DB_PATH: str = "verified_users.db"
    VERIFIED_ROLE_NAME: str = "Verified"
    MOJANG_LOOKUP: bool = True

    LOG_LEVEL: str = "INFO"

    # Parsed by validate()
    SERVER_HOST: str = ""
    SERVER_PORT: int = DEFAULT_MINECRAFT_PORT
    STATUS_CHANNEL_ID: int = 0
    VERIFY_CHANNEL_ID: int = 0
    RCON_PORT_NUMBER: int = 25575
    RCON_TIMEOUT_SECONDS: int = 5
    POLL_INTERVAL_SECONDS: int = 60
    PROBE_TIMEOUT_SECONDS: float = 5.0

    @classmethod
    def load(cls) -> None:
        """Read all values from the environment."""
        cls.DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
        cls.DISCORD_STATUS_CHANNEL_ID = os.getenv("DISCORD_STATUS_CHANNEL_ID")
        cls.DISCORD_VERIFY_CHANNEL_ID = os.getenv("DISCORD_VERIFY_CHANNEL_ID")

        cls.SERVER_ADDRESS = os.getenv("SERVER_ADDRESS")
        cls.STATUS_POLL_SECONDS = os.getenv("STATUS_POLL_SECONDS", "60")
        cls.STATUS_PROBE_TIMEOUT = os.getenv("STATUS_PROBE_TIMEOUT", "5")

        cls.RCON_PORT = os.getenv("RCON_PORT", "25575")
        cls.RCON_PASSWORD = os.getenv("RCON_PASSWORD")
        cls.RCON_TIMEOUT = os.getenv("RCON_TIMEOUT", "5")

        cls.VERIFIED_DB_PATH = os.getenv("VERIFIED_DB_PATH", "verified_users.db")
        cls.VERIFIED_ROLE_NAME = os.getenv("VERIFIED_ROLE_NAME", "Verified").strip()
        cls.MOJANG_LOOKUP = _parse_bool(os.getenv("MOJANG_LOOKUP", "true"))

        cls.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration values are present and parse them.

        Raises:
            ConfigError: If any required value is missing or any value is malformed.
        """
        required_vars = {
            "DISCORD_TOKEN": cls.DISCORD_TOKEN,
            "SERVER_ADDRESS": cls.SERVER_ADDRESS,
            "DISCORD_STATUS_CHANNEL_ID": cls.DISCORD_STATUS_CHANNEL_ID,
            "DISCORD_VERIFY_CHANNEL_ID": cls.DISCORD_VERIFY_CHANNEL_ID,
            "RCON_PASSWORD": cls.RCON_PASSWORD,
        }

        missing_vars = [var for var, value in required_vars.items() if not value]
        if missing_vars:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing_vars)}\n"
                "Please set them in your .env file or environment."
            )

        problems: List[str] = []
        host, port = "", DEFAULT_MINECRAFT_PORT

        try:
            host, port = _parse_server_address(cls.SERVER_ADDRESS)
        except ValueError as e:
            problems.append(f"SERVER_ADDRESS is not a valid host:port ({e})")

        status_channel_id = cls._positive_int(
            "DISCORD_STATUS_CHANNEL_ID", cls.DISCORD_STATUS_CHANNEL_ID, problems
        )
        verify_channel_id = cls._positive_int(
            "DISCORD_VERIFY_CHANNEL_ID", cls.DISCORD_VERIFY_CHANNEL_ID, problems
        )
        rcon_port = cls._positive_int("RCON_PORT", cls.RCON_PORT, problems)
        rcon_timeout = cls._positive_int("RCON_TIMEOUT", cls.RCON_TIMEOUT, problems)
        poll_interval = cls._positive_int("STATUS_POLL_SECONDS", cls.STATUS_POLL_SECONDS, problems)

        probe_timeout = 0.0
        try:
            probe_timeout = float(cls.STATUS_PROBE_TIMEOUT)
        except (TypeError, ValueError):
            pass
        if probe_timeout <= 0:
            problems.append(f"STATUS_PROBE_TIMEOUT must be a positive number, got {cls.STATUS_PROBE_TIMEOUT!r}")

        if problems:
            raise ConfigError("Invalid configuration:\n" + "\n".join(problems))

        # Only publish parsed values once everything is valid
        cls.SERVER_HOST, cls.SERVER_PORT = host, port
        cls.STATUS_CHANNEL_ID = status_channel_id
        cls.VERIFY_CHANNEL_ID = verify_channel_id
        cls.RCON_PORT_NUMBER = rcon_port
        cls.RCON_TIMEOUT_SECONDS = rcon_timeout
        cls.POLL_INTERVAL_SECONDS = poll_interval
        cls.PROBE_TIMEOUT_SECONDS = probe_timeout

    @staticmethod
    def _positive_int(name: str, value: Optional[str], problems: List[str]) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            problems.append(f"{name} must be an integer, got {value!r}")
            return 0
        if number <= 0:
            problems.append(f"{name} must be positive, got {number}")
            return 0
        return number

    @classmethod
    def has_verified_role(cls) -> bool:
        """Check if a verified role should be managed."""
        return bool(cls.VERIFIED_ROLE_NAME)


Config.load()
