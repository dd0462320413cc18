"""
Durable record of Discord users who already whitelisted a Minecraft name.
"""
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger("mc-bot.store")


@dataclass(frozen=True)
class VerifiedUser:
    """A Discord user whose Minecraft username was added to the whitelist."""

    discord_user_id: int
    minecraft_username: str
    verified_at: datetime


class VerifiedStore:
    """SQLite-backed store with at most one record per Discord user."""

    def __init__(self, path: str):
        """
        Open (and create if needed) the store.

        Args:
            path: SQLite database file, or ``":memory:"``.
        """
        self.path = path
        self.conn = sqlite3.connect(path)
        self._create_tables()
        logger.info(f"Verified store opened at {path} ({self.count()} users)")

    def _create_tables(self) -> None:
        """Create necessary tables if they don't exist."""
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS verified_users (
                    discord_id INTEGER PRIMARY KEY,
                    minecraft_username VARCHAR(16) NOT NULL,
                    verified_at TEXT NOT NULL
                )
            """)

    def get(self, discord_user_id: int) -> Optional[VerifiedUser]:
        """Return the record for a Discord user, if any."""
        row = self.conn.execute(
            "SELECT discord_id, minecraft_username, verified_at FROM verified_users WHERE discord_id = ?",
            (discord_user_id,),
        ).fetchone()
        if row is None:
            return None
        return VerifiedUser(
            discord_user_id=row[0],
            minecraft_username=row[1],
            verified_at=datetime.fromisoformat(row[2]),
        )

    def add(self, user: VerifiedUser) -> bool:
        """
        Record a verified user.

        Returns:
            bool: False if the Discord user already has a record.
        """
        try:
            with self.conn:
                self.conn.execute(
                    "INSERT INTO verified_users (discord_id, minecraft_username, verified_at) VALUES (?, ?, ?)",
                    (user.discord_user_id, user.minecraft_username, user.verified_at.isoformat()),
                )
        except sqlite3.IntegrityError:
            logger.warning(f"User {user.discord_user_id} already has a verified record")
            return False
        logger.info(f"Recorded {user.discord_user_id} as verified for '{user.minecraft_username}'")
        return True

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM verified_users").fetchone()[0]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()


def new_verified_user(discord_user_id: int, minecraft_username: str) -> VerifiedUser:
    return VerifiedUser(discord_user_id, minecraft_username, datetime.now(timezone.utc))
