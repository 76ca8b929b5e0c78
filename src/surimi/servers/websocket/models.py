"""WebSocket mock server models and configuration.

Defines the immutable server configuration, the pure ``configure()``
constructor and the constants shared by the engine.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Literal

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 0  # 0 lets the OS pick an ephemeral port
DEFAULT_MAX_MESSAGE_SIZE = 1024 * 1024  # 1MB

# Sent on every trigger once a connection has used up its responses
SENTINEL_RESPONSE = "No more response"

ExhaustionPolicy = Literal["sentinel", "silent"]
EXHAUSTION_POLICIES: tuple[str, ...] = ("sentinel", "silent")


def encode_response(payload: Any) -> str:
    """
    Serialize a response payload to its wire text.

    Args:
        payload: Any JSON-serializable value

    Returns:
        Compact JSON text, e.g. ``{"hello":"world"}``

    Raises:
        ValueError: If the payload is not JSON-serializable
    """
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Response payload is not JSON-serializable: {e}") from e


@dataclass(frozen=True)
class MockServerConfig:
    """
    Immutable configuration for a mock WebSocket server.

    Responses are encoded once, when the config is built. Each connection
    replays ``frames`` from the first entry, so the order given here is the
    order clients receive.

    Use ``configure()`` to build one, and the ``with_*`` methods to derive
    a changed copy (last write wins).
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    responses: tuple[Any, ...] = ()
    exhaustion: ExhaustionPolicy = "sentinel"
    idle_timeout: float | None = None  # seconds, None disables
    ping_interval: float | None = None  # seconds, None disables keepalive pings
    ping_timeout: float | None = None
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    frames: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"Port must be an integer, got: {self.port!r}")
        if not (0 <= self.port <= 65535):
            raise ValueError(f"Port must be between 0 and 65535, got: {self.port}")
        if self.exhaustion not in EXHAUSTION_POLICIES:
            raise ValueError(
                f"Exhaustion policy must be one of {EXHAUSTION_POLICIES}, got: {self.exhaustion!r}"
            )
        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")
        for name in ("ping_interval", "ping_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive")
        if self.max_message_size <= 0:
            raise ValueError("max_message_size must be positive")

        responses = tuple(self.responses)
        object.__setattr__(self, "responses", responses)
        object.__setattr__(self, "frames", tuple(encode_response(r) for r in responses))

    def with_host(self, host: str) -> MockServerConfig:
        """Return a copy bound to ``host``."""
        return replace(self, host=host)

    def with_port(self, port: int) -> MockServerConfig:
        """Return a copy bound to ``port`` (0 for an OS-assigned port)."""
        return replace(self, port=port)

    def with_responses(self, responses: Iterable[Any]) -> MockServerConfig:
        """Return a copy whose scripted responses are replaced by ``responses``."""
        return replace(self, responses=tuple(responses))


def configure(
    host: str | None = None,
    port: int | None = None,
    responses: Iterable[Any] | None = None,
    **options: Any,
) -> MockServerConfig:
    """
    Build a server configuration. Performs no I/O.

    Args:
        host: Bind host (default: "localhost")
        port: Bind port (default: 0, OS-assigned)
        responses: Payloads to reply with, in order
        **options: Any other MockServerConfig field (exhaustion,
            idle_timeout, ping_interval, ping_timeout, max_message_size)

    Returns:
        Validated MockServerConfig

    Raises:
        ValueError: If a value is invalid or a payload cannot be serialized
        TypeError: If an unknown option is given
    """
    return MockServerConfig(
        host=DEFAULT_HOST if host is None else host,
        port=DEFAULT_PORT if port is None else port,
        responses=() if responses is None else tuple(responses),
        **options,
    )
