"""
Socket Client Events

The observer the socket client reports to. Every lifecycle change, message
and failure is delivered through one of these hooks; the client never raises
from join, leave or send operations, so the error hooks are the only way a
caller learns that one of them failed.

Usage:
    class MyEvents(NoopSocketClientEvents):
        def on_receive(self, message):
            print(message)

    client = SocketClient(origin, target, MyEvents())
"""

import logging
from abc import ABC, abstractmethod

from .codec import Message
from .errors import SocketClientError
from .transport import Transport

logger = logging.getLogger(__name__)


class SocketClientEvents(ABC):
    """Hooks invoked by SocketClient. All return values are ignored."""

    @abstractmethod
    def on_connect(self, session_id: str, transport: Transport) -> None:
        """Emitted when the client connects and receives a session id."""

    @abstractmethod
    def on_connect_error(self, error: SocketClientError) -> None:
        """Emitted when the client fails to connect."""

    @abstractmethod
    def on_disconnect(self, session_id: str) -> None:
        """Emitted when the connection has been closed."""

    @abstractmethod
    def on_disconnect_error(self, error: SocketClientError) -> None:
        """Emitted when the client fails to close the connection."""

    @abstractmethod
    def on_receive(self, message: Message) -> None:
        """Emitted for every inbound message. All message handling happens here."""

    @abstractmethod
    def on_receive_error(self, error: SocketClientError) -> None:
        """Emitted when the client fails to receive or decode a message."""

    @abstractmethod
    def on_join(self, room: str) -> None:
        """Emitted when a join request has been sent."""

    @abstractmethod
    def on_join_error(self, room: str, error: SocketClientError) -> None:
        """Emitted when the client fails to join a room."""

    @abstractmethod
    def on_leave(self, room: str) -> None:
        """Emitted when a leave request has been sent."""

    @abstractmethod
    def on_leave_error(self, room: str, error: SocketClientError) -> None:
        """Emitted when the client fails to leave a room."""

    @abstractmethod
    def on_send(self, message: Message) -> None:
        """Emitted with the message exactly as it was transmitted."""

    @abstractmethod
    def on_send_error(self, error: SocketClientError) -> None:
        """Emitted when the client fails to send a message."""


class NoopSocketClientEvents(SocketClientEvents):
    """Ignores every event. Subclass it and override what you need."""

    def on_connect(self, session_id, transport):
        pass

    def on_connect_error(self, error):
        pass

    def on_disconnect(self, session_id):
        pass

    def on_disconnect_error(self, error):
        pass

    def on_receive(self, message):
        pass

    def on_receive_error(self, error):
        pass

    def on_join(self, room):
        pass

    def on_join_error(self, room, error):
        pass

    def on_leave(self, room):
        pass

    def on_leave_error(self, room, error):
        pass

    def on_send(self, message):
        pass

    def on_send_error(self, error):
        pass


class LoggingSocketClientEvents(NoopSocketClientEvents):
    """Writes every event to the log."""

    def on_connect(self, session_id, transport):
        logger.info("Connected with session id %s", session_id)

    def on_connect_error(self, error):
        logger.error("Connect failed: %s", error)

    def on_disconnect(self, session_id):
        logger.info("Session %s disconnected", session_id)

    def on_disconnect_error(self, error):
        logger.error("Disconnect failed: %s", error)

    def on_receive(self, message):
        logger.info("Received: %s", message)

    def on_receive_error(self, error):
        logger.warning("Receive failed: %s", error)

    def on_join(self, room):
        logger.info("Joined room '%s'", room)

    def on_join_error(self, room, error):
        logger.error("Failed to join room '%s': %s", room, error)

    def on_leave(self, room):
        logger.info("Left room '%s'", room)

    def on_leave_error(self, room, error):
        logger.error("Failed to leave room '%s': %s", room, error)

    def on_send(self, message):
        logger.info("Sent: %s", message)

    def on_send_error(self, error):
        logger.error("Send failed: %s", error)
