"""
Room Socket Client Package

This package provides the client side of a room-aware socket protocol: a
single websocket connection over which the client joins and leaves rooms,
broadcasts, sends to rooms, exchanges raw JSON, and receives messages,
reporting every event to a caller-supplied observer.

Modules:
    - client: SocketClient, the connection lifecycle and routing operations
    - protocol: Tagged-message vocabulary and reserved keys
    - transport: Transport interface and the websockets implementation
    - codec: JSON encoding of messages
    - events: Observer hooks and default implementations
    - errors: Error taxonomy
"""

from .client import ReceiveErrorPolicy, SocketClient
from .codec import JSONValue, JsonCodec, Message
from .errors import (
    CloseError,
    CodecError,
    EndOfStream,
    InvalidRoomError,
    NotConnectedError,
    ProtocolError,
    ReceiveError,
    ReservedKeyError,
    SendError,
    SocketClientError,
    SocketConnectionError,
)
from .events import (
    LoggingSocketClientEvents,
    NoopSocketClientEvents,
    SocketClientEvents,
)
from .protocol import (
    DEFAULT_KEYS,
    LEGACY_KEYS,
    BroadcastMessage,
    DisconnectRequest,
    JoinRequest,
    LeaveRequest,
    MessageType,
    MulticastMessage,
    ProtocolKeys,
)
from .transport import (
    SESSION_COOKIE,
    HandshakeConfig,
    Transport,
    WebSocketTransport,
    open_websocket_transport,
)

__all__ = [
    # Client
    "SocketClient",
    "ReceiveErrorPolicy",
    # Events
    "SocketClientEvents",
    "NoopSocketClientEvents",
    "LoggingSocketClientEvents",
    # Protocol
    "MessageType",
    "ProtocolKeys",
    "DEFAULT_KEYS",
    "LEGACY_KEYS",
    "JoinRequest",
    "LeaveRequest",
    "DisconnectRequest",
    "BroadcastMessage",
    "MulticastMessage",
    # Transport
    "Transport",
    "WebSocketTransport",
    "HandshakeConfig",
    "SESSION_COOKIE",
    "open_websocket_transport",
    # Codec
    "JsonCodec",
    "JSONValue",
    "Message",
    # Errors
    "SocketClientError",
    "SocketConnectionError",
    "NotConnectedError",
    "SendError",
    "ReceiveError",
    "EndOfStream",
    "CloseError",
    "CodecError",
    "ProtocolError",
    "InvalidRoomError",
    "ReservedKeyError",
]
