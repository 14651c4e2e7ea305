"""
Tests for the SocketClient Connection Lifecycle

Connect, disconnect and the observer notifications around them, using an
injected in-memory transport.
"""

import pytest

from roomsocket import (
    SESSION_COOKIE,
    LEGACY_KEYS,
    CloseError,
    NoopSocketClientEvents,
    SocketClient,
    SocketConnectionError,
)

from conftest import ORIGIN, TARGET, FakeTransport


def test_client_can_be_instantiated(events):
    client = SocketClient(ORIGIN, TARGET, events)

    assert client.origin == ORIGIN
    assert client.target == TARGET
    assert client.session_id is None
    assert client.transport is None
    assert not client.is_connected


def test_client_requires_an_observer():
    with pytest.raises(ValueError):
        SocketClient(ORIGIN, TARGET, None)


def test_receive_error_policy_accepts_strings():
    client = SocketClient(
        ORIGIN, TARGET, NoopSocketClientEvents(), receive_error_policy="stop"
    )

    assert client.receive_error_policy.value == "stop"


@pytest.mark.asyncio
async def test_connect_sets_session_and_transport(
    events, transport, transport_factory
):
    client = SocketClient(
        ORIGIN, TARGET, events, transport_factory=transport_factory
    )

    session_id = await client.connect()

    assert session_id
    assert client.session_id == session_id
    assert client.transport is transport
    assert client.is_connected
    assert events.of("connect") == [(session_id, transport)]


@pytest.mark.asyncio
async def test_connect_sends_session_cookie_and_origin(
    events, transport_factory
):
    client = SocketClient(
        ORIGIN, TARGET, events, transport_factory=transport_factory
    )

    session_id = await client.connect()

    [config] = transport_factory.configs
    assert config.target == TARGET
    assert config.origin == ORIGIN
    assert config.headers["Cookie"] == f"{SESSION_COOKIE}={session_id}"


@pytest.mark.asyncio
async def test_each_connect_gets_a_fresh_session(events, transport_factory):
    client = SocketClient(
        ORIGIN, TARGET, events, transport_factory=transport_factory
    )

    first = await client.connect()
    await client.disconnect()
    second = await client.connect()

    assert first != second
    assert client.session_id == second


@pytest.mark.asyncio
async def test_connect_failure_is_reported_and_raised(events):
    async def unreachable(config):
        raise SocketConnectionError(f"Could not connect to {config.target}")

    client = SocketClient(ORIGIN, TARGET, events, transport_factory=unreachable)

    with pytest.raises(SocketConnectionError):
        await client.connect()

    assert not client.is_connected
    assert client.session_id is None
    assert client.transport is None
    [(error,)] = events.of("connect_error")
    assert isinstance(error, SocketConnectionError)


@pytest.mark.asyncio
async def test_connect_wraps_os_errors(events):
    async def refused(config):
        raise ConnectionRefusedError("refused")

    client = SocketClient(ORIGIN, TARGET, events, transport_factory=refused)

    with pytest.raises(SocketConnectionError) as exc_info:
        await client.connect()

    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
    assert events.names() == ["connect_error"]


@pytest.mark.asyncio
async def test_connection_errors_are_builtin_connection_errors(events):
    async def refused(config):
        raise OSError("unreachable")

    client = SocketClient(ORIGIN, TARGET, events, transport_factory=refused)

    with pytest.raises(ConnectionError):
        await client.connect()


@pytest.mark.asyncio
async def test_connect_twice_is_refused(client, events):
    session_id = client.session_id

    with pytest.raises(SocketConnectionError, match="Already connected"):
        await client.connect()

    assert client.session_id == session_id
    assert events.names() == ["connect_error"]


@pytest.mark.asyncio
async def test_disconnect_announces_and_closes(client, events, transport):
    session_id = client.session_id

    await client.disconnect()

    assert transport.sent == [{"type": "disconnect"}]
    assert transport.close_calls == 1
    assert not client.is_connected
    assert client.session_id is None
    assert events.of("disconnect") == [(session_id,)]


@pytest.mark.asyncio
async def test_disconnect_announcement_failure_is_not_fatal(
    client, events, transport, send_failure
):
    transport.send_error = send_failure

    await client.disconnect()

    assert transport.close_calls == 1
    assert events.names() == ["send_error", "disconnect"]
    assert events.of("send_error") == [(send_failure,)]
    assert not client.is_connected


@pytest.mark.asyncio
async def test_disconnect_close_failure_keeps_transport(
    client, events, transport, close_failure
):
    transport.close_error = close_failure
    session_id = client.session_id

    await client.disconnect()

    assert events.names() == ["disconnect_error"]
    [(error,)] = events.of("disconnect_error")
    assert isinstance(error, CloseError)
    assert client.transport is transport
    assert client.session_id == session_id


@pytest.mark.asyncio
async def test_disconnect_when_detached_is_a_no_op(events):
    client = SocketClient(ORIGIN, TARGET, events)

    await client.disconnect()

    assert events.calls == []


@pytest.mark.asyncio
async def test_disconnect_uses_configured_keys(events):
    transport = FakeTransport()

    async def factory(config):
        return transport

    client = SocketClient(
        ORIGIN, TARGET, events, transport_factory=factory, keys=LEGACY_KEYS
    )
    await client.connect()
    await client.disconnect()

    assert transport.sent == [{"GmWsType": "disconnect"}]


@pytest.mark.asyncio
async def test_closed_transport_is_not_connected(client, transport):
    transport._closed = True

    assert not client.is_connected


@pytest.mark.asyncio
async def test_disconnect_skips_announcement_on_closed_transport(
    client, events, transport
):
    transport._closed = True
    transport.send_error = AssertionError("nothing should be sent")
    session_id = client.session_id

    await client.disconnect()

    assert transport.sent == []
    assert events.names() == ["disconnect"]
    assert events.of("disconnect") == [(session_id,)]
    assert client.transport is None


@pytest.mark.asyncio
async def test_connect_replaces_a_closed_transport(client, events, transport):
    first = client.session_id
    transport._closed = True

    second = await client.connect()

    assert second != first
    assert "connect_error" not in events.names()
