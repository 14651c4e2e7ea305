"""
Client Errors

Every failure the socket client can report is a SocketClientError. The
client catches these at the boundary of each operation and forwards them
to the observer; anything else is a bug and propagates.
"""


class SocketClientError(Exception):
    """Base class for all socket client errors."""


class SocketConnectionError(SocketClientError, ConnectionError):
    """The handshake or dial to the server failed."""


class NotConnectedError(SocketClientError):
    """An operation was attempted on a client without a transport."""


class SendError(SocketClientError):
    """A structured or raw write failed."""


class ReceiveError(SocketClientError):
    """A structured or raw read failed, including decode failures."""


class EndOfStream(ReceiveError):
    """The peer closed the connection normally."""


class CloseError(SocketClientError):
    """The transport could not be closed."""


class CodecError(SocketClientError):
    """A message could not be encoded or decoded."""


class ProtocolError(SocketClientError, ValueError):
    """A message cannot be expressed in the tagged-message protocol."""


class InvalidRoomError(ProtocolError):
    """Room names must be non-empty strings."""


class ReservedKeyError(ProtocolError):
    """
    The caller's message uses a key reserved for routing.

    Attributes:
        key: The offending key
    """

    def __init__(self, key: str):
        super().__init__(f"'{key}' is a reserved protocol key")
        self.key = key
