"""Custom exceptions for the mock server."""

from __future__ import annotations


class SurimiError(Exception):
    """Base exception for surimi errors."""

    pass


class BindError(SurimiError):
    """Raised when the listening socket cannot be bound.

    Covers address already in use, unresolvable or invalid addresses and
    insufficient privilege. Nothing is left running when this is raised.
    """

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot bind {host}:{port}: {reason}")


class TransportError(SurimiError):
    """A connection failed mid-session (read or write error, abnormal close)."""

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class ProtocolViolation(TransportError):
    """The peer broke the WebSocket protocol (bad framing, oversized message)."""

    pass
