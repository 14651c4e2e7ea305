"""
Transport Layer

The socket client talks to the server through a Transport: an already
negotiated, message-framed, bidirectional connection. This module defines
the Transport interface and the default implementation on top of the
websockets library.

Architecture:
    - Transport is an abstract base class so tests and alternative stacks
      can be injected through a transport factory
    - WebSocketTransport translates websockets exceptions into the client's
      error taxonomy at this boundary
    - Outbound writes are serialized with an asyncio.Lock; reads are left
      to the single receive loop
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    WebSocketException,
)
from websockets.protocol import State

from .codec import JsonCodec, Message
from .errors import (
    CloseError,
    CodecError,
    EndOfStream,
    ReceiveError,
    SendError,
    SocketConnectionError,
)

logger = logging.getLogger(__name__)

# Cookie carrying the session identifier during the opening handshake
SESSION_COOKIE = "session_id"


@dataclass
class HandshakeConfig:
    """
    Parameters of the opening handshake.

    Attributes:
        target: WebSocket URL of the server (e.g., ws://localhost:3000/ws)
        origin: Value of the Origin header
        headers: Extra handshake headers
    """

    target: str
    origin: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_session(
        cls, target: str, origin: Optional[str], session_id: str
    ) -> "HandshakeConfig":
        """Build a handshake that binds the connection to a session."""
        return cls(
            target=target,
            origin=origin,
            headers={"Cookie": f"{SESSION_COOKIE}={session_id}"},
        )


class Transport(ABC):
    """Message-framed duplex connection used by the socket client."""

    @abstractmethod
    async def send_structured(self, message: Message) -> None:
        """Send one structured message. Raises SendError."""

    @abstractmethod
    async def receive_structured(self) -> Message:
        """Receive one structured message. Raises EndOfStream, ReceiveError."""

    @abstractmethod
    async def write_bytes(self, data: bytes) -> int:
        """Write raw bytes as one frame. Raises SendError."""

    @abstractmethod
    async def read_bytes(self) -> bytes:
        """Read the raw bytes of one frame. Raises EndOfStream, ReceiveError."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Raises CloseError."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once the connection can no longer carry messages."""


TransportFactory = Callable[[HandshakeConfig], Awaitable[Transport]]


class WebSocketTransport(Transport):
    """
    Transport backed by a websockets client connection.

    Structured messages are JSON text frames. Raw writes are sent as text
    frames too, for servers that expect text; raw reads return a whole frame
    as bytes, so the payload is never cut at a buffer boundary.

    Attributes:
        connection: The underlying websockets connection
        codec: Codec for structured messages
    """

    def __init__(
        self, connection: ClientConnection, codec: Optional[JsonCodec] = None
    ):
        self.connection = connection
        self.codec = codec or JsonCodec()
        self._send_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed or self.connection.state in (
            State.CLOSING,
            State.CLOSED,
        )

    async def send_structured(self, message: Message) -> None:
        try:
            data = self.codec.encode(message)
        except CodecError as e:
            raise SendError(str(e)) from e
        await self._send(data.decode(self.codec.encoding))

    async def receive_structured(self) -> Message:
        data = await self._recv(decode=None)
        try:
            return self.codec.decode(data)
        except CodecError as e:
            raise ReceiveError(str(e)) from e

    async def write_bytes(self, data: bytes) -> int:
        try:
            text = data.decode(self.codec.encoding)
        except UnicodeDecodeError as e:
            raise SendError(f"Raw payload is not valid text: {e}") from e
        await self._send(text)
        return len(data)

    async def read_bytes(self) -> bytes:
        return await self._recv(decode=False)

    async def close(self) -> None:
        self._closed = True
        try:
            await self.connection.close()
        except (WebSocketException, OSError) as e:
            raise CloseError(f"Failed to close connection: {e}") from e

    async def _send(self, text: str) -> None:
        async with self._send_lock:
            try:
                await self.connection.send(text)
            except (WebSocketException, OSError) as e:
                raise SendError(f"Failed to send message: {e}") from e

    async def _recv(self, decode: Optional[bool]) -> Any:
        try:
            return await self.connection.recv(decode=decode)
        except ConnectionClosedOK as e:
            raise EndOfStream("Connection closed") from e
        except ConnectionClosed as e:
            raise ReceiveError(f"Connection lost: {e}") from e
        except (WebSocketException, OSError) as e:
            raise ReceiveError(f"Failed to receive message: {e}") from e


async def open_websocket_transport(
    config: HandshakeConfig, **options: Any
) -> WebSocketTransport:
    """
    Open a websockets connection and wrap it in a transport.

    Args:
        config: Handshake parameters
        **options: Passed through to websockets.asyncio.client.connect
            (e.g., open_timeout, max_size)

    Raises:
        SocketConnectionError: If the handshake or dial fails
    """
    logger.debug("Opening websocket to %s", config.target)
    try:
        connection = await connect(
            config.target,
            origin=config.origin,
            additional_headers=config.headers,
            **options,
        )
    except (WebSocketException, OSError, asyncio.TimeoutError) as e:
        raise SocketConnectionError(
            f"Could not connect to {config.target}: {e}"
        ) from e
    return WebSocketTransport(connection)
