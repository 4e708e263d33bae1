"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator

from kvserver.cache.store import KVStore
from kvserver.network.tcp_server import KVServer
from kvserver.protocol.executor import CommandExecutor
from kvserver.protocol.parser import ProtocolParser


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """Manually advanced clock for deterministic expiration tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# KVStore Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def store() -> KVStore:
    """Create a fresh KVStore using the real monotonic clock."""
    return KVStore()


@pytest.fixture
def timed_store(clock: FakeClock) -> KVStore:
    """Create a KVStore driven by the fake clock."""
    return KVStore(clock=clock)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def executor(parser: ProtocolParser) -> CommandExecutor:
    """Create a CommandExecutor instance."""
    return CommandExecutor(parser)


@pytest.fixture
def run(parser: ProtocolParser, executor: CommandExecutor, store: KVStore):
    """
    Parse and execute a request line against the store fixture.

    Usage:
        def test_something(run):
            assert run("SET key value") == "+OK\\r\\n"
    """
    def _run(line: str) -> str:
        reply, _ = executor.execute(parser.parse_request(line), store)
        return reply.decode()
    return _run


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = KVServer(host='127.0.0.1', port=server_port)

    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

async def read_reply(reader: asyncio.StreamReader) -> bytes:
    """Read exactly one complete reply, nested arrays included."""
    line = await reader.readline()
    if not line:
        return b""

    prefix = line[:1]
    if prefix == b"$":
        length = int(line[1:-2])
        if length >= 0:
            line += await reader.readexactly(length + 2)
    elif prefix == b"*":
        for _ in range(int(line[1:-2])):
            line += await read_reply(reader)
    return line


class AsyncClient:
    """
    Helper class for testing server interactions.

    Provides a simple async context manager interface for
    sending commands and receiving raw replies.

    Usage:
        async with AsyncClient('127.0.0.1', 6379) as client:
            response = await client.send_command("SET key value")
            assert response == "+OK\\r\\n"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the reply.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            The complete raw reply, CRLFs included
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        return (await read_reply(self.reader)).decode()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("GET key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
