#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: websocket_event_reader.py
# Author: Rajaram Lakshmanan
# Description: Event reader for the deCONZ WebSocket event feed.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import threading
from typing import Callable, Optional

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import ClientConnection, connect

from deconz_ingest.client.common.base_event_reader import BaseEventReader
from deconz_ingest.errors import EventConnectionError
from deconz_ingest.event.raw_event import RawEvent

logger = logging.getLogger("WebsocketEventReader")

class WebsocketEventReader(BaseEventReader):
    """
    Event reader for the deCONZ WebSocket event feed.

    Reads are polled with a receive timeout so that the thread reading events
    can observe a stop request within one poll window.
    """

    def __init__(self,
                 url: str,
                 read_timeout: float = 1.0,
                 open_timeout: float = 10.0,
                 connector: Callable[..., ClientConnection] = connect):
        """
        Initialize the WebSocket event reader.

        Args:
            url (str): URL of the event feed, e.g. ws://deconz.local:443.
            read_timeout (float): Maximum time in seconds a single read waits for a message.
            open_timeout (float): Maximum time in seconds to establish the connection.
            connector (Callable): Function opening the connection (websockets.sync.client.connect).
        """
        self._url = url
        self._read_timeout = read_timeout
        self._open_timeout = open_timeout
        self._connector = connector

        self._connection: Optional[ClientConnection] = None
        self._lock = threading.Lock()

    @property
    def url(self) -> str:
        """Return the URL of the event feed."""
        return self._url

    @property
    def is_connected(self) -> bool:
        """Return the flag to indicate whether the reader holds an open connection."""
        return self._connection is not None

    # === Public API Functions ===

    def connect(self) -> None:
        """
        Connect to the event feed. An existing connection is closed first.

        Raises:
            EventConnectionError: If the connection cannot be established.
        """
        self.close()

        try:
            connection = self._connector(self._url, open_timeout=self._open_timeout)
        except (OSError, TimeoutError, WebSocketException) as e:
            raise EventConnectionError(f"Unable to connect to {self._url}: {e}") from e

        with self._lock:
            self._connection = connection
        logger.info(f"Connected to deCONZ event feed at {self._url}")

    def read_event(self) -> Optional[RawEvent]:
        """
        Read the next event.

        Returns:
            RawEvent: The next event, or None if no message arrived within the read timeout.

        Raises:
            RecoverableEventError: If the message is not a valid event.
            EventConnectionError: If the reader is not connected or the connection was lost.
        """
        connection = self._connection
        if connection is None:
            raise EventConnectionError("Not connected to the event feed")

        try:
            message = connection.recv(timeout=self._read_timeout)
        except TimeoutError:
            return None
        except ConnectionClosed as e:
            raise EventConnectionError(f"Connection to {self._url} closed: {e}") from e
        except (OSError, WebSocketException) as e:
            raise EventConnectionError(f"Error reading from {self._url}: {e}") from e

        return RawEvent.parse(message)

    def close(self) -> None:
        """Close the connection to the event feed, if any."""
        with self._lock:
            connection = self._connection
            self._connection = None

        if connection is not None:
            connection.close()
            logger.info(f"Closed connection to {self._url}")
