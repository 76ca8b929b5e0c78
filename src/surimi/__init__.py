"""Surimi - a programmable mock WebSocket server for test suites.

Start a server with a scripted list of JSON responses, connect your client
to it, and every message the client sends is answered with the next
scripted response, in order, independently for each connection.
"""

from surimi.errors import BindError, ProtocolViolation, SurimiError, TransportError
from surimi.servers.websocket import (
    SENTINEL_RESPONSE,
    MockServer,
    MockServerConfig,
    configure,
    start,
)

__version__ = "0.1.0"

__all__ = [
    "SENTINEL_RESPONSE",
    "BindError",
    "MockServer",
    "MockServerConfig",
    "ProtocolViolation",
    "SurimiError",
    "TransportError",
    "configure",
    "start",
]
