#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: base_event_reader.py
# Author: Rajaram Lakshmanan
# Description:  Base class for readers of the gateway event feed.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import abc
from typing import Optional

from deconz_ingest.event.raw_event import RawEvent

class BaseEventReader(abc.ABC):
    """
    Base class for the event reader.

    This defines the transport independent interface used by the sensor event
    reader to connect to the gateway and pull events from it.
    """

    # === Required Public API Methods ===

    @abc.abstractmethod
    def connect(self) -> None:
        """
        Connect to the event feed.

        Raises:
            EventConnectionError: If the connection cannot be established.
        """
        pass

    @abc.abstractmethod
    def read_event(self) -> Optional[RawEvent]:
        """
        Read the next event from the feed.

        Returns:
            RawEvent: The next event, or None if no event arrived within the
            reader's poll window.

        Raises:
            RecoverableEventError: If the event could not be parsed.
            EventConnectionError: If the connection is lost.
        """
        pass

    @abc.abstractmethod
    def close(self) -> None:
        """
        Close the connection to the event feed. Closing a reader that is not
        connected has no effect.
        """
        pass
