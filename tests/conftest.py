"""Shared fixtures for the interview relay test suite."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure the project root is on sys.path so 'interview_relay' resolves
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from interview_relay.broadcast import Broadcaster
from interview_relay.router import MessageRouter
from interview_relay.socket_registry import SocketRegistry


class FakeLiveSession:
    """Stands in for LiveSession; records what would have gone upstream."""

    def __init__(self):
        self.turns: list[tuple[str, bool]] = []
        self.media: list[str] = []
        self.is_open = True
        self.start = AsyncMock()
        self.stop = AsyncMock()

    async def send_turn(self, text: str, complete: bool = True) -> None:
        self.turns.append((text, complete))

    async def send_media(self, audio_data: str) -> None:
        self.media.append(audio_data)


def make_ws_mock() -> AsyncMock:
    """A mock WebSocket that counts as connected."""
    return AsyncMock()


@pytest.fixture
def registry():
    return SocketRegistry()


@pytest.fixture
def fake_live():
    return FakeLiveSession()


@pytest.fixture
def router(registry, fake_live):
    return MessageRouter(registry, fake_live)


@pytest.fixture
def broadcaster(registry):
    return Broadcaster(registry)


@pytest.fixture
def app(registry, fake_live, router):
    """The FastAPI app with the relay core swapped for test doubles.

    The real LiveSession is never started, so nothing talks to the
    upstream API.
    """
    with patch("interview_relay.server.registry", registry), \
         patch("interview_relay.server.live_session", fake_live), \
         patch("interview_relay.server.router", router):
        from interview_relay.server import app as fastapi_app
        yield fastapi_app


@pytest.fixture
async def client(app):
    """Async HTTP client for testing REST endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
