"""Shared fixtures for the bot test suite.

Discord objects are replaced by ``MagicMock``/``AsyncMock`` so nothing here
opens a gateway session, an RCON socket or an HTTP connection.
"""

from typing import Iterator, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.status import ProbeResult, ServerStatus
from services.store import VerifiedStore


@pytest.fixture
def store() -> Iterator[VerifiedStore]:
    """In-memory verified store."""
    verified_store = VerifiedStore(":memory:")
    yield verified_store
    verified_store.close()


@pytest.fixture
def fake_rcon() -> MagicMock:
    """RCON service whose whitelist command always succeeds."""
    rcon = MagicMock()
    rcon.whitelist_add = AsyncMock(side_effect=lambda name: f"Added {name} to the whitelist")
    return rcon


@pytest.fixture
def interaction() -> MagicMock:
    """Slash command interaction issued in the verify channel."""
    mock = MagicMock()
    mock.guild = MagicMock()
    mock.channel_id = 222
    mock.user.id = 1001
    mock.response.defer = AsyncMock()
    mock.response.send_message = AsyncMock()
    mock.response.is_done = MagicMock(return_value=True)
    mock.followup.send = AsyncMock()
    return mock


@pytest.fixture
def scripted_probe():
    """Factory for probes returning ONLINE/OFFLINE following a list of outcomes."""

    def build(outcomes: List[bool]):
        remaining = list(outcomes)

        async def probe() -> ProbeResult:
            online = remaining.pop(0)
            if online:
                return ProbeResult(ServerStatus.ONLINE, players_online=0)
            return ProbeResult.offline()

        return probe

    return build
