"""Shared fakes for market data tests."""

import asyncio
import json

import httpx
import pytest


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent = []
        self.closed = False
        self._incoming = asyncio.Queue()

    async def send(self, data):
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True
        self._incoming.put_nowait(None)

    def push(self, message):
        self._incoming.put_nowait(json.dumps(message))

    def push_raw(self, raw):
        self._incoming.put_nowait(raw)

    def drop(self):
        """Simulate the server closing the connection."""
        self._incoming.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is None:
            raise StopAsyncIteration
        return item


class FakeConnector:
    """Connector that hands out FakeSockets, or fails a set number of times."""

    def __init__(self, failures: int = 0, always_fail: bool = False):
        self.calls = []
        self.sockets = []
        self._failures = failures
        self._always_fail = always_fail

    async def __call__(self, url):
        self.calls.append(url)
        if self._always_fail or len(self.calls) <= self._failures:
            raise OSError("connection refused")
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


async def _settle(rounds: int = 50) -> None:
    """Let background tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def _mock_http(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by handler(request)."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def failing_connector():
    return FakeConnector(always_fail=True)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def mock_http():
    return _mock_http
