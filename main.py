"""
Minecraft Discord Bot - Main Entry Point

A Discord bot that shows the Minecraft server status in a channel name and
lets members whitelist their Minecraft account once with /verify.
"""
import logging
import sys

from bot.client import MinecraftBot
from config import Config, ConfigError

logger = logging.getLogger("mc-bot")


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    """Main entry point for the bot."""
    configure_logging()

    # Validate configuration before anything connects
    try:
        Config.validate()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        bot = MinecraftBot()
        bot.run()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()
