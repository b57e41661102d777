"""
pytest configuration and fixtures.
"""

import asyncio
import random
from datetime import datetime, timezone

import pytest

from echo_server.config import Settings
from echo_server.identity import IdentityProvider
from echo_server.observer import ExchangeObserver
from echo_server.server import EchoServer

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

WEBSOCKET_HEADERS = {
    "Host": "localhost:8090",
    "Upgrade": "websocket",
    "Connection": "Upgrade",
    "Sec-WebSocket-Version": "13",
    "Sec-WebSocket-Key": "dGhlIHNhbXBsZSBub25jZQ==",
}


class RecordingObserver(ExchangeObserver):
    """Observer that keeps what it sees instead of logging it."""

    def __init__(self):
        self.requests = []
        self.headers = []
        self.bodies = []
        self.skipped_bodies = []
        self.statuses = []
        self.upgrades = 0
        self.handshake_failures = []
        self.echoed = []
        self.closed = []
        self.errors = []
        self.unsupported = 0
        self.fields = []
        self.events = []
        self.stopped = []

    def request_received(self, remote, method, url, verbose=False):
        self.requests.append((method, url, verbose))

    def request_headers(self, remote, headers):
        self.headers.append(list(headers))

    def request_body(self, remote, body):
        self.bodies.append(body)

    def request_body_skipped(self, remote, exc):
        self.skipped_bodies.append(exc)

    def plain_responded(self, remote, status):
        self.statuses.append(status)

    def websocket_handshake_failed(self, remote, exc):
        self.handshake_failures.append(exc)

    def websocket_upgraded(self, remote):
        self.upgrades += 1

    def message_echoed(self, remote, message):
        self.echoed.append(message)

    def websocket_closed(self, remote, code):
        self.closed.append(code)

    def websocket_error(self, remote, exc):
        self.errors.append(exc)

    def stream_unsupported(self, remote):
        self.unsupported += 1

    def stream_field(self, remote, key, line):
        self.fields.append((key, line))

    def stream_event(self, remote, event):
        self.events.append(event)

    def stream_stopped(self, remote, reason):
        self.stopped.append(reason)


class FixedBits:
    """Stand-in random source that always returns the same bit."""

    def __init__(self, bit: int):
        self.bit = bit

    def getrandbits(self, k: int) -> int:
        return self.bit


@pytest.fixture
def settings() -> Settings:
    """Test settings with a fast heartbeat."""
    return Settings(
        host="127.0.0.1",
        port=8090,
        send_server_hostname="",
        log_http_headers=False,
        log_http_body=False,
        stream_interval=0.05,
    )


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def identity(settings) -> IdentityProvider:
    return IdentityProvider(settings, hostname=lambda: "test-host")


@pytest.fixture
def echo_server(settings, identity, observer) -> EchoServer:
    return EchoServer(
        settings,
        identity=identity,
        rng=random.Random(7),
        observer=observer,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
async def client(aiohttp_client, echo_server):
    return await aiohttp_client(echo_server.create_app())


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
