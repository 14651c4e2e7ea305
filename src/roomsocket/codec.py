"""
JSON Codec

Converts between message dictionaries and bytes. Used directly by the raw
send/receive path and by the websocket transport for structured messages.
"""

import json
from typing import Any, Dict, List, Union

from .errors import CodecError

JSONValue = Union[
    str, int, float, bool, None, Dict[str, "JSONValue"], List["JSONValue"]
]
Message = Dict[str, JSONValue]


class JsonCodec:
    """
    UTF-8 JSON codec for messages.

    Attributes:
        encoding: Text encoding used on the wire
    """

    encoding = "utf-8"

    def encode(self, message: Message) -> bytes:
        """
        Encode a message to JSON bytes.

        Raises:
            CodecError: If the message holds a value JSON cannot represent
        """
        try:
            return json.dumps(message).encode(self.encoding)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Could not encode message: {e}") from e

    def decode(self, data: Union[bytes, str]) -> Message:
        """
        Decode JSON bytes (or text) into a message.

        Raises:
            CodecError: If the payload is not valid JSON or not a JSON object
        """
        try:
            if isinstance(data, bytes):
                data = data.decode(self.encoding)
            message: Any = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Could not decode message: {e}") from e

        if not isinstance(message, dict):
            raise CodecError(
                f"Expected a JSON object, got {type(message).__name__}"
            )
        return message
