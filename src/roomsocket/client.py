"""
Socket Client

This module provides the SocketClient class: one duplex connection to a
room-aware message server. It handles the connection lifecycle, room
membership signalling, outbound messages and the inbound receive loop,
and reports every outcome to a caller-supplied SocketClientEvents.

Architecture:
    - Rooms are encoded as message metadata (see protocol.py); the client
      keeps no membership state of its own
    - The transport is created by an injectable factory (websockets by
      default), which keeps the client testable without a server
    - Join, leave and send operations never raise on failure; errors go to
      the observer. connect() both reports and raises.

Usage:
    client = SocketClient(
        "http://localhost:3000", "ws://localhost:3000/ws", MyEvents()
    )
    await client.connect()
    receiver = asyncio.create_task(client.receive_structured())
    await client.join("lobby")
    await client.send_to_room("lobby", {"text": "hi"})
    await client.disconnect()
    await receiver
"""

import logging
import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from .codec import JsonCodec, Message
from .errors import (
    CloseError,
    CodecError,
    EndOfStream,
    NotConnectedError,
    ProtocolError,
    ReceiveError,
    SocketClientError,
    SocketConnectionError,
)
from .events import SocketClientEvents
from .protocol import (
    DEFAULT_KEYS,
    BaseRequest,
    BroadcastMessage,
    DisconnectRequest,
    JoinRequest,
    LeaveRequest,
    MulticastMessage,
    ProtocolKeys,
)
from .transport import (
    HandshakeConfig,
    Transport,
    TransportFactory,
    open_websocket_transport,
)

logger = logging.getLogger(__name__)


class ReceiveErrorPolicy(str, Enum):
    """What the receive loop does after reporting a receive error."""

    CONTINUE = "continue"
    STOP = "stop"


class SocketClient:
    """
    Client side of a room-aware socket connection.

    The client is detached until connect() succeeds, and detached again
    after a successful disconnect() or when a receive loop sees the
    connection end. session_id and transport are always set and cleared
    together.

    Attributes:
        origin: Origin sent with the opening handshake
        target: WebSocket URL of the server
        session_id: Session identifier of the current connection
        transport: Active transport (None while detached)
        codec: Codec used by the raw send/receive path
        keys: Reserved protocol key names
        receive_error_policy: Whether receive loops survive receive errors
    """

    def __init__(
        self,
        origin: str,
        target: str,
        events: SocketClientEvents,
        *,
        transport_factory: Optional[TransportFactory] = None,
        codec: Optional[JsonCodec] = None,
        keys: ProtocolKeys = DEFAULT_KEYS,
        receive_error_policy: Union[
            ReceiveErrorPolicy, str
        ] = ReceiveErrorPolicy.CONTINUE,
    ):
        """
        Initialize the socket client.

        Args:
            origin: Origin sent with the opening handshake
            target: WebSocket URL of the server
            events: Observer notified of every event (required)
            transport_factory: Optional coroutine function creating the
                             transport from a HandshakeConfig (for
                             dependency injection/testing)
            codec: Codec for the raw path (JsonCodec by default)
            keys: Reserved key names (DEFAULT_KEYS or LEGACY_KEYS)
            receive_error_policy: CONTINUE or STOP after a receive error

        Raises:
            ValueError: If no observer is given
        """
        if events is None:
            raise ValueError("SocketClient requires a SocketClientEvents")

        self.origin = origin
        self.target = target
        self.session_id: Optional[str] = None
        self.transport: Optional[Transport] = None
        self.codec = codec or JsonCodec()
        self.keys = keys
        self.receive_error_policy = ReceiveErrorPolicy(receive_error_policy)
        self._events = events
        self._transport_factory = transport_factory or open_websocket_transport
        self._receiving = False
        self._disconnecting = False

        logger.info("SocketClient initialized for server: %s", target)

    @property
    def is_connected(self) -> bool:
        """Check if the client holds a transport that is still open."""
        return (
            self.transport is not None
            and self.session_id is not None
            and not self.transport.closed
        )

    async def connect(self) -> str:
        """
        Open the transport under a fresh session identifier.

        The identifier is sent as a session cookie during the handshake so
        the server can correlate the connection with the session.

        Returns:
            The new session identifier

        Raises:
            SocketConnectionError: If the client is already connected or
                the handshake fails. on_connect_error is notified first.
        """
        if self.is_connected:
            error = SocketConnectionError(
                f"Already connected with session id {self.session_id}"
            )
            logger.error("Connect refused: %s", error)
            self._events.on_connect_error(error)
            raise error

        session_id = str(uuid.uuid4())
        config = HandshakeConfig.for_session(
            self.target, self.origin, session_id
        )

        logger.info("Connecting to %s...", self.target)
        try:
            transport = await self._transport_factory(config)
        except (SocketClientError, OSError) as e:
            if isinstance(e, SocketConnectionError):
                error = e
            else:
                error = SocketConnectionError(
                    f"Could not connect to {self.target}: {e}"
                )
                error.__cause__ = e
            logger.error("Failed to connect: %s", error)
            self._events.on_connect_error(error)
            raise error

        self.transport = transport
        self.session_id = session_id
        logger.info("Connected with session id: %s", session_id)

        self._events.on_connect(session_id, transport)
        return session_id

    async def disconnect(self) -> None:
        """
        Announce the disconnect to the server and close the transport.

        The announcement is skipped when the transport is already closed.
        A failed announcement is reported to on_send_error and the close
        still goes ahead. If the close fails, on_disconnect_error
        is notified and the client keeps its transport; it should not be
        used any further. Must not run concurrently with itself.
        """
        transport = self.transport
        if transport is None:
            logger.warning("Disconnect requested while not connected")
            return

        self._disconnecting = True
        try:
            if not transport.closed:
                try:
                    await transport.send_structured(
                        DisconnectRequest().to_dict(self.keys)
                    )
                except SocketClientError as e:
                    logger.error("Failed to announce disconnect: %s", e)
                    self._events.on_send_error(e)

            try:
                await transport.close()
            except SocketClientError as e:
                error = e if isinstance(e, CloseError) else CloseError(str(e))
                logger.error("Failed to close connection: %s", error)
                self._events.on_disconnect_error(error)
                return

            if self.transport is transport:
                self._detach()
        finally:
            self._disconnecting = False

    def _detach(self) -> None:
        session_id = self.session_id
        self.transport = None
        self.session_id = None
        logger.info("Disconnected session %s", session_id)

        self._events.on_disconnect(session_id)

    async def join(self, room: str) -> None:
        """
        Ask the server to add this connection to a room.

        Reports on_join or on_join_error; never raises on failure and never
        retries.
        """
        logger.info("Joining room '%s'", room)
        try:
            await self._send_request(JoinRequest(room))
        except SocketClientError as e:
            logger.error("Failed to join room '%s': %s", room, e)
            self._events.on_join_error(room, e)
            return
        self._events.on_join(room)

    async def leave(self, room: str) -> None:
        """
        Ask the server to remove this connection from a room.

        Sent whether or not the room was joined: the server owns
        membership. Reports on_leave or on_leave_error.
        """
        logger.info("Leaving room '%s'", room)
        try:
            await self._send_request(LeaveRequest(room))
        except SocketClientError as e:
            logger.error("Failed to leave room '%s': %s", room, e)
            self._events.on_leave_error(room, e)
            return
        self._events.on_leave(room)

    async def broadcast(self, message: Message) -> None:
        """
        Send a message to every peer connected to the server.

        The message is copied before the broadcast discriminator is added;
        on_send receives the copy that was transmitted.
        """
        await self._send_message(BroadcastMessage(message))

    async def send_to_room(self, room: str, message: Message) -> None:
        """
        Send a message to the members of a room.

        The transmitted copy carries the multicast discriminator and the
        room name next to the caller's keys.
        """
        await self._send_message(MulticastMessage(room, message))

    async def send_raw(self, message: Message) -> None:
        """
        Encode a message with the codec and write it as-is.

        No protocol keys are added, for servers that do not speak the
        tagged-message protocol.
        """
        try:
            if not isinstance(message, dict):
                raise ProtocolError(
                    f"Messages must be dictionaries, got {type(message).__name__}"
                )
            transport = self._require_transport()
            data = self.codec.encode(message)
            await transport.write_bytes(data)
        except SocketClientError as e:
            logger.error("Failed to send raw message: %s", e)
            self._events.on_send_error(e)
            return

        logger.debug("Sent raw message of %d bytes", len(data))
        self._events.on_send(self.codec.decode(data))

    async def receive_structured(self) -> None:
        """
        Receive structured messages until the connection ends.

        Each message goes to on_receive. A normal close ends the loop
        quietly; other failures go to on_receive_error and the loop goes on
        or stops according to receive_error_policy. The loop always stops
        once the transport is closed; when the connection has ended the
        client is detached and on_disconnect fires. Returns immediately
        when the client is not connected. Run it as its own task.

        Raises:
            RuntimeError: If a receive loop is already running
        """

        async def receive(transport: Transport) -> Message:
            return await transport.receive_structured()

        await self._receive_loop(receive)

    async def receive_raw(self) -> None:
        """
        Receive raw frames and decode them with the codec.

        Same loop semantics as receive_structured(). A frame that fails to
        decode is reported as a ReceiveError; frames are read whole, so the
        failure is never caused by truncation.

        Raises:
            RuntimeError: If a receive loop is already running
        """

        async def receive(transport: Transport) -> Message:
            data = await transport.read_bytes()
            try:
                return self.codec.decode(data)
            except CodecError as e:
                raise ReceiveError(f"Could not decode frame: {e}") from e

        await self._receive_loop(receive)

    async def _receive_loop(
        self, receive: Callable[[Transport], Awaitable[Message]]
    ) -> None:
        transport = self.transport
        if transport is None:
            logger.warning("Receive requested while not connected")
            return
        if self._receiving:
            raise RuntimeError("A receive loop is already running")

        self._receiving = True
        logger.info("Starting message receive loop")
        try:
            while True:
                try:
                    message = await receive(transport)
                except EndOfStream:
                    logger.info("Connection closed, receive loop finished")
                    self._connection_ended(transport)
                    break
                except SocketClientError as e:
                    logger.warning("Failed to receive message: %s", e)
                    self._events.on_receive_error(e)
                    if transport.closed:
                        logger.info("Transport closed, receive loop finished")
                        self._connection_ended(transport)
                        break
                    if self.receive_error_policy is ReceiveErrorPolicy.STOP:
                        logger.info("Stopping receive loop after error")
                        break
                    continue

                logger.debug("Received message: %s", message)
                self._events.on_receive(message)
        finally:
            self._receiving = False

    def _connection_ended(self, transport: Transport) -> None:
        # disconnect() detaches by itself; a stale transport is left alone
        if self._disconnecting or self.transport is not transport:
            return
        self._detach()

    async def _send_message(self, request: BaseRequest) -> None:
        try:
            sent = await self._send_request(request)
        except SocketClientError as e:
            logger.error("Failed to send message: %s", e)
            self._events.on_send_error(e)
            return

        logger.debug("Sent %s message", sent[self.keys.type_key])
        self._events.on_send(sent)

    async def _send_request(self, request: BaseRequest) -> Message:
        transport = self._require_transport()
        message = request.to_dict(self.keys)
        await transport.send_structured(message)
        return message

    def _require_transport(self) -> Transport:
        if self.transport is None:
            raise NotConnectedError("Not connected to a socket server")
        return self.transport
