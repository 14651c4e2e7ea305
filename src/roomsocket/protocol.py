"""
Tagged-Message Protocol

Room semantics ride on a single structured message channel. Every control
or routed message carries a type discriminator and, for room-scoped
messages, the room name. The keys used for both are reserved: the client
owns them and rejects caller content that tries to set them.

Message Format:
    {
        "type": "join" | "leave" | "broadcast" | "multicast" | "disconnect",
        "room": "room-name",     # join, leave and multicast only
        ...                      # caller content for broadcast/multicast
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from .codec import Message
from .errors import InvalidRoomError, ProtocolError, ReservedKeyError


class MessageType(str, Enum):
    """Routing intent carried in the type discriminator."""

    JOIN = "join"
    LEAVE = "leave"
    BROADCAST = "broadcast"
    MULTICAST = "multicast"
    DISCONNECT = "disconnect"


@dataclass(frozen=True)
class ProtocolKeys:
    """
    Names of the reserved message keys.

    Attributes:
        type_key: Key holding the MessageType discriminator
        room_key: Key holding the room name
    """

    type_key: str = "type"
    room_key: str = "room"

    @property
    def reserved(self) -> Tuple[str, str]:
        return (self.type_key, self.room_key)


DEFAULT_KEYS = ProtocolKeys()

# Key names understood by servers written for the first protocol revision
LEGACY_KEYS = ProtocolKeys(type_key="GmWsType", room_key="GmWsRoom")


def validate_room(room: str) -> str:
    """
    Check that a room name is usable.

    Raises:
        InvalidRoomError: If the name is not a non-empty string
    """
    if not isinstance(room, str) or not room:
        raise InvalidRoomError(f"Invalid room name: {room!r}")
    return room


class BaseRequest:
    """
    Base class for protocol messages.

    Subclasses provide the discriminator through _message_type and, when
    room-scoped, a ``room`` attribute.
    """

    def to_dict(self, keys: ProtocolKeys = DEFAULT_KEYS) -> Message:
        """
        Build the wire message.

        Args:
            keys: Reserved key names to inject

        Returns:
            A new dictionary; caller payloads are copied, never mutated.

        Raises:
            InvalidRoomError: If the room name is empty
            ReservedKeyError: If the payload already uses a reserved key
        """
        payload = getattr(self, "payload", {})
        if not isinstance(payload, dict):
            raise ProtocolError(
                f"Messages must be dictionaries, got {type(payload).__name__}"
            )
        for key in keys.reserved:
            if key in payload:
                raise ReservedKeyError(key)

        message: Message = dict(payload)
        message[keys.type_key] = self._message_type.value

        if hasattr(self, "room"):
            message[keys.room_key] = validate_room(self.room)
        return message

    @property
    def _message_type(self) -> MessageType:
        raise NotImplementedError("Subclasses must define _message_type")


@dataclass
class JoinRequest(BaseRequest):
    """
    Ask the server to add this connection to a room.

    Attributes:
        room: Name of the room to join
    """

    room: str

    @property
    def _message_type(self) -> MessageType:
        return MessageType.JOIN


@dataclass
class LeaveRequest(BaseRequest):
    """
    Ask the server to remove this connection from a room.

    Attributes:
        room: Name of the room to leave
    """

    room: str

    @property
    def _message_type(self) -> MessageType:
        return MessageType.LEAVE


@dataclass
class DisconnectRequest(BaseRequest):
    """Announce that the client is about to close the connection."""

    @property
    def _message_type(self) -> MessageType:
        return MessageType.DISCONNECT


@dataclass
class BroadcastMessage(BaseRequest):
    """
    Application message for every connected peer.

    Attributes:
        payload: Caller content
    """

    payload: Message = field(default_factory=dict)

    @property
    def _message_type(self) -> MessageType:
        return MessageType.BROADCAST


@dataclass
class MulticastMessage(BaseRequest):
    """
    Application message for the members of one room.

    Attributes:
        room: Target room
        payload: Caller content
    """

    room: str
    payload: Message = field(default_factory=dict)

    @property
    def _message_type(self) -> MessageType:
        return MessageType.MULTICAST
