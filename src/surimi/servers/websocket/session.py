"""Per-connection session state.

A ConnectionSession is created for every connection that completes the
opening handshake and is owned by that connection's handler task.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from surimi.errors import TransportError


class ResponseCursor:
    """
    Private read position over the shared, read-only response frames.

    The frames tuple is never mutated; each cursor only advances its own
    index, so two cursors over the same frames never affect each other.
    """

    __slots__ = ("_frames", "_index")

    def __init__(self, frames: tuple[str, ...]) -> None:
        self._frames = frames
        self._index = 0

    def __len__(self) -> int:
        """Number of responses not yet emitted."""
        return len(self._frames) - self._index

    @property
    def position(self) -> int:
        return self._index

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._frames)

    def next(self) -> str | None:
        """Return the next frame and advance, or None once exhausted."""
        if self.exhausted:
            return None
        frame = self._frames[self._index]
        self._index += 1
        return frame


@dataclass
class ConnectionSession:
    """Runtime record for one accepted connection."""

    cursor: ResponseCursor
    remote_address: Any = None
    id: str = field(default_factory=lambda: str(uuid4()))
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    triggers_received: int = 0
    replies_sent: int = 0
    error: TransportError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "remote_address": str(self.remote_address),
            "connected_at": self.connected_at.isoformat(),
            "triggers_received": self.triggers_received,
            "replies_sent": self.replies_sent,
            "remaining": len(self.cursor),
        }
