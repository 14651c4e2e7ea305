"""Shared fixtures: a scripted transport and an observer that records events."""

import pytest
import pytest_asyncio

from roomsocket import (
    CloseError,
    EndOfStream,
    NoopSocketClientEvents,
    SendError,
    SocketClient,
    Transport,
)

ORIGIN = "http://localhost:3000"
TARGET = "ws://localhost:3000/ws"


class FakeTransport(Transport):
    """
    In-memory transport.

    Inbound items are returned in order by receive_structured/read_bytes;
    exception items are raised instead. Once the script is exhausted the
    peer is treated as gone (EndOfStream).
    """

    def __init__(self, inbound=None):
        self.inbound = list(inbound or [])
        self.sent = []
        self.written = []
        self.send_error = None
        self.close_error = None
        self.close_on_error = False
        self.close_calls = 0
        self._closed = False

    @property
    def closed(self):
        return self._closed

    async def send_structured(self, message):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)

    async def receive_structured(self):
        return self._next()

    async def write_bytes(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.written.append(data)
        return len(data)

    async def read_bytes(self):
        return self._next()

    async def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self._closed = True

    def _next(self):
        if self._closed or not self.inbound:
            raise EndOfStream("Connection closed")
        item = self.inbound.pop(0)
        if isinstance(item, Exception):
            if self.close_on_error:
                self._closed = True
            raise item
        return item


class RecordingEvents(NoopSocketClientEvents):
    """Observer that keeps every notification as (hook, *args)."""

    def __init__(self):
        self.calls = []

    def names(self):
        return [call[0] for call in self.calls]

    def of(self, name):
        return [call[1:] for call in self.calls if call[0] == name]

    def on_connect(self, session_id, transport):
        self.calls.append(("connect", session_id, transport))

    def on_connect_error(self, error):
        self.calls.append(("connect_error", error))

    def on_disconnect(self, session_id):
        self.calls.append(("disconnect", session_id))

    def on_disconnect_error(self, error):
        self.calls.append(("disconnect_error", error))

    def on_receive(self, message):
        self.calls.append(("receive", message))

    def on_receive_error(self, error):
        self.calls.append(("receive_error", error))

    def on_join(self, room):
        self.calls.append(("join", room))

    def on_join_error(self, room, error):
        self.calls.append(("join_error", room, error))

    def on_leave(self, room):
        self.calls.append(("leave", room))

    def on_leave_error(self, room, error):
        self.calls.append(("leave_error", room, error))

    def on_send(self, message):
        self.calls.append(("send", message))

    def on_send_error(self, error):
        self.calls.append(("send_error", error))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def transport_factory(transport):
    """Factory handing out the fake transport and recording handshakes."""
    configs = []

    async def open_transport(config):
        configs.append(config)
        return transport

    open_transport.configs = configs
    return open_transport


@pytest_asyncio.fixture
async def client(events, transport_factory):
    """A connected client; the connect notification is cleared."""
    socket_client = SocketClient(
        ORIGIN, TARGET, events, transport_factory=transport_factory
    )
    await socket_client.connect()
    events.calls.clear()
    return socket_client


@pytest.fixture
def send_failure():
    return SendError("Failed to send message: broken pipe")


@pytest.fixture
def close_failure():
    return CloseError("Failed to close connection: reset")
