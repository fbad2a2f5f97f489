#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: test_websocket_event_reader.py
# Author: Rajaram Lakshmanan
# Description: Tests for the WebSocket event reader.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from collections import deque

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidURI

from conftest import TEMPERATURE_EVENT
from deconz_ingest.client.websocket.websocket_event_reader import WebsocketEventReader
from deconz_ingest.errors import EventConnectionError, RecoverableEventError

URL = "ws://deconz.local:443"


class FakeConnection:
    """Connection returning queued messages; an empty queue times out."""

    def __init__(self, messages=()):
        self.messages = deque(messages)
        self.timeouts = []
        self.closed = False

    def recv(self, timeout=None):
        self.timeouts.append(timeout)
        if not self.messages:
            raise TimeoutError()
        message = self.messages.popleft()
        if isinstance(message, Exception):
            raise message
        return message

    def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self, *connections, error=None):
        self.connections = deque(connections)
        self.error = error
        self.calls = []

    def __call__(self, url, open_timeout=None):
        self.calls.append((url, open_timeout))
        if self.error is not None:
            raise self.error
        return self.connections.popleft()


def test_read_event():
    connection = FakeConnection([TEMPERATURE_EVENT])
    connector = FakeConnector(connection)
    reader = WebsocketEventReader(URL, read_timeout=0.5, open_timeout=3, connector=connector)

    reader.connect()
    event = reader.read_event()

    assert event.resource_id == 1
    assert event.raw_state["temperature"] == 2062
    assert connector.calls == [(URL, 3)]
    assert connection.timeouts == [0.5]


def test_read_timeout_returns_none():
    reader = WebsocketEventReader(URL, connector=FakeConnector(FakeConnection()))
    reader.connect()

    assert reader.read_event() is None
    assert reader.is_connected


def test_read_invalid_message():
    reader = WebsocketEventReader(URL, connector=FakeConnector(FakeConnection(["{not json"])))
    reader.connect()

    with pytest.raises(RecoverableEventError):
        reader.read_event()
    assert reader.is_connected


def test_read_without_connection():
    reader = WebsocketEventReader(URL, connector=FakeConnector())

    with pytest.raises(EventConnectionError):
        reader.read_event()


def test_connection_closed():
    closed = ConnectionClosedError(None, None)
    reader = WebsocketEventReader(URL, connector=FakeConnector(FakeConnection([closed])))
    reader.connect()

    with pytest.raises(EventConnectionError) as exc_info:
        reader.read_event()
    assert not exc_info.value.recoverable


@pytest.mark.parametrize("error", [
    ConnectionRefusedError("connection refused"),
    TimeoutError("timed out during opening handshake"),
    InvalidURI("deconz", "not a websocket URI"),
])
def test_connect_failure(error):
    reader = WebsocketEventReader(URL, connector=FakeConnector(error=error))

    with pytest.raises(EventConnectionError):
        reader.connect()
    assert not reader.is_connected


def test_reconnect_closes_previous_connection():
    first, second = FakeConnection(), FakeConnection([TEMPERATURE_EVENT])
    reader = WebsocketEventReader(URL, connector=FakeConnector(first, second))

    reader.connect()
    reader.connect()

    assert first.closed
    assert reader.read_event().resource_id == 1


def test_close_is_idempotent():
    connection = FakeConnection()
    reader = WebsocketEventReader(URL, connector=FakeConnector(connection))
    reader.connect()

    reader.close()
    reader.close()

    assert connection.closed
    assert not reader.is_connected
