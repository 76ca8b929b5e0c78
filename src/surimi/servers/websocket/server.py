"""
Mock WebSocket server that replays scripted responses.

Every text or binary message a client sends is a trigger: the content is
ignored and the next configured response is sent back. Each connection
replays the configured responses from the start, independently of every
other connection. Pings are answered with pongs by the protocol layer and
never consume a response.
"""

import asyncio
import logging
import socket
from typing import Any

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK
from websockets.frames import CloseCode

from surimi.errors import BindError, ProtocolViolation, TransportError
from surimi.servers.websocket.models import SENTINEL_RESPONSE, MockServerConfig
from surimi.servers.websocket.session import ConnectionSession, ResponseCursor

logger = logging.getLogger(__name__)

# Close codes that mean the peer broke the protocol rather than the transport
_PROTOCOL_CLOSE_CODES = frozenset(
    {CloseCode.PROTOCOL_ERROR, CloseCode.INVALID_DATA, CloseCode.MESSAGE_TOO_BIG}
)

# Servers started through start(); keeps them alive while they run detached
_detached: set["MockServer"] = set()


def classify_disconnect(exc: ConnectionClosedError) -> TransportError:
    """
    Map an abnormal close to the error the session ended with.

    Args:
        exc: Exception raised by the connection

    Returns:
        ProtocolViolation for protocol-level failures, TransportError otherwise
    """
    frame = exc.sent or exc.rcvd
    code = frame.code if frame is not None else None
    message = str(exc)
    if code in _PROTOCOL_CLOSE_CODES:
        return ProtocolViolation(message, code=code)
    return TransportError(message, code=code)


class MockServer:
    """
    Scripted-response WebSocket server for tests.

    Example:
        ```python
        config = configure(responses=[{"hello": "world"}])

        async with MockServer(config) as server:
            async with connect(server.url) as ws:
                await ws.send("trigger")
                assert await ws.recv() == '{"hello":"world"}'
        ```
    """

    def __init__(self, config: MockServerConfig):
        """
        Initialize mock server.

        Args:
            config: Immutable server configuration
        """
        self.config = config

        # Live connections: {websocket: session}
        self.sessions: dict[ServerConnection, ConnectionSession] = {}

        self._server: Server | None = None
        self._address: tuple[str, int] | None = None

    async def __aenter__(self) -> "MockServer":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def address(self) -> tuple[str, int]:
        """Resolved (host, port). Only available once started."""
        if self._address is None:
            raise RuntimeError("Server not started. Call start() first.")
        return self._address

    @property
    def url(self) -> str:
        host, port = self.address
        if ":" in host:
            host = f"[{host}]"
        return f"ws://{host}:{port}"

    def _bind(self) -> socket.socket:
        """
        Bind the listening socket.

        Returns:
            Listening socket on the configured host and port

        Raises:
            BindError: If the address is in use, invalid or not permitted
        """
        host, port = self.config.host, self.config.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        try:
            return socket.create_server((host, port), family=family)
        except OSError as e:
            raise BindError(host, port, e.strerror or str(e)) from e
        except UnicodeError as e:
            raise BindError(host, port, f"invalid host name ({e})") from e

    async def start(self) -> tuple[str, int]:
        """
        Bind and begin accepting connections in the background.

        The socket is bound before anything is scheduled, so a bind failure
        leaves nothing running. Does not block; use serve_forever() or the
        context manager to keep the server alive.

        Returns:
            Tuple of (host, port) with the OS-assigned port resolved

        Raises:
            BindError: If the listening socket cannot be bound
        """
        if self._server is not None:
            logger.warning("Mock server already started")
            return self.address

        sock = self._bind()
        port = sock.getsockname()[1]

        try:
            self._server = await serve(
                self._handle_connection,
                sock=sock,
                ping_interval=self.config.ping_interval,
                ping_timeout=self.config.ping_timeout,
                max_size=self.config.max_message_size,
            )
        except Exception:
            sock.close()
            raise

        self._address = (self.config.host, port)
        logger.debug(
            f"Mock server started on {self.url} with {len(self.config.frames)} scripted responses"
        )
        return self._address

    async def stop(self) -> None:
        """
        Stop accepting connections and close every open connection.
        """
        if self._server is None:
            logger.debug("Mock server not started")
            return

        logger.debug("Stopping mock server...")
        server, self._server = self._server, None
        _detached.discard(self)

        server.close()
        await server.wait_closed()

        self.sessions.clear()
        logger.debug("Mock server stopped")

    async def serve_forever(self) -> None:
        """
        Run server until cancelled.

        Blocks forever until interrupted (Ctrl+C) or task cancelled.
        """
        if self._server is None:
            raise RuntimeError("Server not started. Call start() first.")

        try:
            await asyncio.Future()  # Run forever
        except asyncio.CancelledError:
            logger.debug("Server cancelled, shutting down...")
            await self.stop()
            raise

    async def _receive(self, websocket: ServerConnection) -> str | bytes:
        """Wait for the next data message, honouring the idle timeout."""
        if self.config.idle_timeout is None:
            return await websocket.recv()
        return await asyncio.wait_for(websocket.recv(), timeout=self.config.idle_timeout)

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """
        Run the reply loop for one connection.

        Registers the session, answers each trigger with the next scripted
        response and always cleans up on disconnect. Errors end this session
        only; they never reach the accept loop or other connections.

        Args:
            websocket: Connection that completed the opening handshake
        """
        session = ConnectionSession(
            cursor=ResponseCursor(self.config.frames),
            remote_address=websocket.remote_address,
        )
        self.sessions[websocket] = session

        logger.debug(
            f"Client {session.id} connected from {session.remote_address}. "
            f"Total clients: {len(self.sessions)}"
        )

        try:
            while True:
                try:
                    await self._receive(websocket)
                except TimeoutError:
                    logger.debug(
                        f"Client {session.id} idle for {self.config.idle_timeout}s, closing"
                    )
                    await websocket.close(code=CloseCode.NORMAL_CLOSURE, reason="Idle timeout")
                    break

                session.triggers_received += 1
                await self._reply(websocket, session)

        except ConnectionClosedOK:
            logger.debug(f"Client {session.id} disconnected normally")

        except ConnectionClosedError as e:
            session.error = classify_disconnect(e)
            logger.warning(f"Client {session.id} connection error: {session.error}")

        except ConnectionClosed:
            logger.debug(f"Client {session.id} disconnected")

        except Exception:
            logger.exception(f"Unexpected error for client {session.id}")

        finally:
            self.sessions.pop(websocket, None)
            logger.debug(
                f"Client {session.id} cleaned up after {session.replies_sent} replies. "
                f"Remaining clients: {len(self.sessions)}"
            )

    async def _reply(self, websocket: ServerConnection, session: ConnectionSession) -> None:
        """Send the session's next response, or apply the exhaustion policy."""
        frame = session.cursor.next()

        if frame is None:
            if self.config.exhaustion == "silent":
                logger.debug(f"Client {session.id} exhausted responses, staying silent")
                return
            frame = SENTINEL_RESPONSE

        session.replies_sent += 1
        await websocket.send(frame)

    def get_client_count(self) -> int:
        """
        Get number of connected clients.

        Returns:
            Count of active client connections
        """
        return len(self.sessions)

    def get_clients_info(self) -> list[dict[str, Any]]:
        """
        Get information about all connected clients.

        Returns:
            List of session metadata dictionaries
        """
        return [session.to_dict() for session in self.sessions.values()]


async def start(config: MockServerConfig) -> tuple[str, int]:
    """
    Start a detached mock server.

    The server keeps running for the lifetime of the event loop; there is
    no handle to stop it. Use MockServer directly when shutdown matters.

    Args:
        config: Server configuration

    Returns:
        Tuple of (host, port) with the OS-assigned port resolved

    Raises:
        BindError: If the listening socket cannot be bound
    """
    server = MockServer(config)
    address = await server.start()
    _detached.add(server)
    return address
