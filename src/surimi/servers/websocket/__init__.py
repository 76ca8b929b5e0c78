"""WebSocket mock server package.

Re-exports the server, its configuration and the start() entry point.
"""

from surimi.servers.websocket.models import (
    SENTINEL_RESPONSE,
    MockServerConfig,
    configure,
)
from surimi.servers.websocket.server import MockServer, start

__all__ = ["SENTINEL_RESPONSE", "MockServer", "MockServerConfig", "configure", "start"]
