"""Pytest configuration and shared fixtures for surimi tests."""

import socket
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from surimi.servers.websocket import MockServer, configure


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def free_port() -> int:
    """Find a port that is free right now on 127.0.0.1."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest_asyncio.fixture
async def start_server() -> AsyncGenerator[Callable[..., Awaitable[MockServer]]]:
    """Factory that starts mock servers and stops them after the test."""
    servers: list[MockServer] = []

    async def _start(**kwargs: Any) -> MockServer:
        server = MockServer(configure(**kwargs))
        await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()
