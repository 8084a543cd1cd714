"""
Pytest configuration and shared fixtures.

Provides a quiet logging setup and an in-memory websocket transport that
is injected into CoinexWebSocketSession through connect_method.
"""

import asyncio
import os
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import msgspec
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from config.structs import WebSocketConfig
from exchanges.integrations.coinex.credentials import ApiCredentialStore
from exchanges.integrations.coinex.ws import CoinexWebSocketSession
from infrastructure.logging.factory import LoggerFactory
from infrastructure.logging.structs import LoggingConfig, ConsoleBackendConfig, RouterConfig

_CLOSED = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self._incoming: asyncio.Queue = asyncio.Queue()
        self.sent: List[Union[str, bytes]] = []
        self.close_code: Optional[int] = None
        self.close_reason = ""
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def send(self, data):
        if self.closed:
            raise ConnectionResetError("socket is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = ""):
        if self.closed:
            return
        self.closed = True
        self.close_code = code
        self.close_reason = reason
        self._incoming.put_nowait(_CLOSED)

    def push(self, message: Union[Dict[str, Any], str, bytes]) -> None:
        """Deliver an inbound frame; dicts are JSON-encoded as text."""
        if isinstance(message, dict):
            message = msgspec.json.encode(message).decode('utf-8')
        self._incoming.put_nowait(message)

    def drop(self, code: int = 1006, reason: str = "") -> None:
        """Simulate the server side closing the connection."""
        self.closed = True
        self.close_code = code
        self.close_reason = reason
        self._incoming.put_nowait(_CLOSED)

    def sent_messages(self) -> List[Dict[str, Any]]:
        return [msgspec.json.decode(m) for m in self.sent]

    def sent_methods(self) -> List[str]:
        return [m.get("method") for m in self.sent_messages()]


class FakeConnector:
    """connect_method replacement that hands out FakeWebSocket instances."""

    def __init__(self):
        self.urls: List[str] = []
        self.sockets: List[FakeWebSocket] = []
        self.failures = 0
        self.hang = False

    async def __call__(self, url: str) -> FakeWebSocket:
        self.urls.append(url)
        if self.hang:
            await asyncio.Event().wait()
        if self.failures:
            self.failures -= 1
            raise ConnectionRefusedError("connection refused")
        websocket = FakeWebSocket()
        self.sockets.append(websocket)
        return websocket

    @property
    def latest(self) -> FakeWebSocket:
        return self.sockets[-1]


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met within timeout")
        await asyncio.sleep(0.005)


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    LoggerFactory.clear_cache()
    LoggerFactory._default_config = LoggingConfig(
        environment="test",
        console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
        router=RouterConfig(default_backends=["console"])
    )


@pytest.fixture
def until():
    return wait_until


@pytest.fixture
def ws_config():
    return WebSocketConfig(
        url="wss://example/test",
        connect_timeout=0.2,
        close_timeout=0.1,
        max_reconnect_attempts=3,
        reconnect_delay=0.01,
        reconnect_backoff=2.0,
        max_reconnect_delay=0.05,
        auth_timeout=0.2,
    )


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def credentials():
    return ApiCredentialStore(api_key="k", secret_key="s")


@pytest.fixture
async def session(ws_config, connector, credentials):
    states = []
    ws_session = CoinexWebSocketSession(
        config=ws_config,
        credential_provider=credentials,
        connect_method=connector,
        connection_handler=states.append,
    )
    ws_session.recorded_states = states
    yield ws_session
    await ws_session.disconnect()


@pytest.fixture
async def connected_session(session, connector):
    await session.connect()
    assert await session.wait_for_connection(1.0)
    return session
