#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor_event_reader.py
# Author: Rajaram Lakshmanan
# Description: Reads events from the gateway event feed in a background
# thread, resolves the sensor of each event and publishes decoded sensor
# events to an output queue. Redials the event feed when the connection fails.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import threading
from collections import Counter
from enum import Enum
from queue import Full, Queue
from typing import Dict, Optional

from deconz_ingest.client.common.base_event_reader import BaseEventReader
from deconz_ingest.client.common.base_sensor_lookup import BaseSensorLookup
from deconz_ingest.errors import (AlreadyRunningError, DecodeError, EventReadError, MisconfiguredReaderError,
                                  SensorNotFoundError)
from deconz_ingest.event.raw_event import RawEvent
from deconz_ingest.event.sensor_event import SensorEvent

logger = logging.getLogger("SensorEventReader")

# Default seconds to wait before redialing after a failed connection attempt
DEFAULT_RECONNECT_DELAY = 5.0


class ReaderState(Enum):
    """Lifecycle states of the sensor event reader."""
    IDLE = "idle"  # Not started, or stopped
    DIALING = "dialing"  # Connecting (or waiting to reconnect) to the event feed
    CONNECTED = "connected"  # Reading events from the event feed
    STOPPING = "stopping"  # Stop observed, closing the event feed


class DropReason(Enum):
    """Reasons for an event not being published to the output queue."""
    READ_ERROR = "read_error"
    MISSING_ID = "missing_id"
    INVALID_ID = "invalid_id"
    UNKNOWN_SENSOR = "unknown_sensor"
    NO_STATE = "no_state"
    DECODE_ERROR = "decode_error"
    QUEUE_FULL = "queue_full"


class SensorEventReader:
    """
    Reads events from the gateway and publishes them as sensor events.

    The reader runs a single background thread with the following state machine:

        IDLE -> DIALING -> CONNECTED -> DIALING (connection lost)
        any state -> STOPPING -> IDLE (stop requested)

    A stop request is observed between iterations (before dialing, before each
    read and before each redial); an in-flight read is not interrupted. Events
    are published in the order they are read. Errors concerning a single event
    drop that event only; connection errors lead to a redial.
    """

    def __init__(self,
                 lookup: Optional[BaseSensorLookup],
                 reader: Optional[BaseEventReader],
                 reconnect_delay: float = DEFAULT_RECONNECT_DELAY):
        """
        Initialize the sensor event reader.

        Args:
            lookup (BaseSensorLookup): Registry to look up the sensor of an event.
            reader (BaseEventReader): Reader of the gateway event feed.
            reconnect_delay (float): Seconds to wait before redialing a failed connection.
        """
        self._lookup = lookup
        self._reader = reader
        self._reconnect_delay = reconnect_delay

        self._state = ReaderState.IDLE
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._published = 0
        self._dropped: Counter = Counter()
        self._stats_lock = threading.Lock()

    @property
    def state(self) -> ReaderState:
        """Return the current lifecycle state."""
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        """Return the flag to indicate whether the background thread is running."""
        return self._thread is not None and self._thread.is_alive()

    # === Public API Functions ===

    def start(self, out_queue: Queue) -> None:
        """
        Start reading events into the given queue. Returns immediately.

        Args:
            out_queue (Queue): Queue the sensor events are published to. If the
            queue is bounded and full, new events are dropped.

        Raises:
            MisconfiguredReaderError: If the sensor lookup or the event reader is missing.
            AlreadyRunningError: If the reader is already running.
        """
        if self._lookup is None:
            raise MisconfiguredReaderError("Cannot run without a sensor lookup from which to look up sensors")
        if self._reader is None:
            raise MisconfiguredReaderError("Cannot run without an event reader from which to read events")

        with self._state_lock:
            if self._state != ReaderState.IDLE or self.is_running:
                raise AlreadyRunningError("Sensor event reader is already running")

            self._stop_event.clear()
            self._state = ReaderState.DIALING
            self._thread = threading.Thread(
                target=self._run,
                args=(out_queue,),
                name="SensorEventReader",
                daemon=True
            )

        self._thread.start()
        logger.info("Sensor event reader started")

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Request the reader to stop and wait for the background thread to finish.

        Args:
            timeout (float): Maximum time in seconds to wait for the thread (default = no limit).

        Returns:
            bool: True if the reader has stopped, False if the thread is still running.
        """
        logger.info("Stopping sensor event reader")
        self._stop_event.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Sensor event reader did not stop within the timeout period")
                return False
        return True

    def stats(self) -> Dict[str, int]:
        """Return the number of published events and dropped events per reason."""
        with self._stats_lock:
            stats = {"published": self._published}
            for reason in DropReason:
                stats[f"dropped_{reason.value}"] = self._dropped[reason]
            return stats

    # === Local Functions ===

    def _set_state(self, state: ReaderState) -> None:
        with self._state_lock:
            if self._state != state:
                logger.debug(f"Sensor event reader state {self._state.value} -> {state.value}")
            self._state = state

    def _run(self, out_queue: Queue) -> None:
        """Thread function: dial and read until a stop is requested, then close the event feed."""
        try:
            while not self._stop_event.is_set():
                if not self._dial():
                    break
                self._read_until_disconnected(out_queue)
        except Exception as e:
            # Only reachable through a defect; the loop itself handles all reader errors
            logger.error(f"Unexpected error in sensor event reader: {e}", exc_info=True)
        finally:
            self._set_state(ReaderState.STOPPING)
            try:
                self._reader.close()
                logger.info("Event feed closed")
            except Exception as e:
                logger.error(f"Failed to close the event feed: {e}")
            self._set_state(ReaderState.IDLE)
            logger.info("Sensor event reader stopped")

    def _dial(self) -> bool:
        """
        Connect to the event feed, retrying after the reconnect delay until connected.

        Returns:
            bool: True if connected, False if a stop was requested first.
        """
        while not self._stop_event.is_set():
            self._set_state(ReaderState.DIALING)
            try:
                self._reader.connect()
            except Exception as e:
                logger.error(f"Error connecting to the event feed: {e}. "
                             f"Attempting reconnect in {self._reconnect_delay}s...")
                # Returns early if a stop is requested while waiting
                self._stop_event.wait(self._reconnect_delay)
                continue

            self._set_state(ReaderState.CONNECTED)
            logger.info("Event feed connected")
            return True
        return False

    def _read_until_disconnected(self, out_queue: Queue) -> None:
        """Read events until the connection fails or a stop is requested."""
        while not self._stop_event.is_set():
            try:
                event = self._reader.read_event()
            except EventReadError as e:
                if e.recoverable:
                    logger.error(f"Dropping event due to error: {e}")
                    self._record_drop(DropReason.READ_ERROR)
                    continue
                logger.warning(f"Event feed connection lost: {e}")
                return
            except Exception as e:
                logger.error(f"Unexpected error reading from the event feed: {e}", exc_info=True)
                return

            if event is not None:
                self._handle_event(event, out_queue)

    def _handle_event(self, event: RawEvent, out_queue: Queue) -> None:
        """Resolve the sensor of the event, decode its state and publish it."""
        # Only sensor events are relevant
        if not event.is_sensor_event:
            logger.debug(f"Dropping non-sensor event type {event.resource}")
            return

        try:
            sensor_id = event.resource_id
        except ValueError:
            logger.warning(f"Dropping '{event.event}' sensor event with invalid id {event.raw_id!r}")
            self._record_drop(DropReason.INVALID_ID)
            return

        if sensor_id is None:
            logger.warning(f"Dropping '{event.event}' sensor event without an id")
            self._record_drop(DropReason.MISSING_ID)
            return

        try:
            sensor = self._lookup.lookup_sensor(sensor_id)
        except SensorNotFoundError as e:
            logger.warning(f"Dropping event. Could not look up sensor for id {sensor_id}: {e}")
            self._record_drop(DropReason.UNKNOWN_SENSOR)
            return
        except Exception as e:
            logger.warning(f"Dropping event. Sensor lookup for id {sensor_id} failed: {e}")
            self._record_drop(DropReason.UNKNOWN_SENSOR)
            return

        # Config and attribute changes carry no state
        if event.raw_state is None:
            logger.debug(f"Dropping '{event.event}' event without state for sensor {sensor_id}")
            self._record_drop(DropReason.NO_STATE)
            return

        try:
            sensor_event = SensorEvent.from_raw_event(sensor, event)
        except DecodeError as e:
            logger.warning(f"Dropping event. Unable to decode state of sensor {sensor_id}: {e}")
            self._record_drop(DropReason.DECODE_ERROR)
            return

        try:
            out_queue.put(sensor_event, block=False)
        except Full:
            logger.error(f"Output queue full, dropping event for sensor {sensor_id}")
            self._record_drop(DropReason.QUEUE_FULL)
            return

        with self._stats_lock:
            self._published += 1

    def _record_drop(self, reason: DropReason) -> None:
        with self._stats_lock:
            self._dropped[reason] += 1
