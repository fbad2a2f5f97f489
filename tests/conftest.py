#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: conftest.py
# Author: Rajaram Lakshmanan
# Description: Shared fixtures: scripted event feed, in-memory sensor lookup
# and sample gateway payloads.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import threading
import time
from collections import deque
from typing import Callable, Dict, Iterable, Optional

import pytest

from deconz_ingest.client.common.base_event_reader import BaseEventReader
from deconz_ingest.client.common.base_sensor_lookup import BaseSensorLookup
from deconz_ingest.errors import EventConnectionError, EventReadError, SensorNotFoundError
from deconz_ingest.event.raw_event import RawEvent
from deconz_ingest.sensor.sensor import Sensor
from deconz_ingest.sensor.sensor_config import SensorConfig

# Sample events of a xiaomi temperature/humidity/pressure sensor, smoke and
# flood detector and wireless switch
TEMPERATURE_EVENT = ('{"e":"changed","id":"1","r":"sensors",'
                     '"state":{"lastupdated":"2018-03-08T19:35:24","temperature":2062},"t":"event"}')
HUMIDITY_EVENT = ('{"e":"changed","id":"2","r":"sensors",'
                  '"state":{"humidity":2985,"lastupdated":"2018-03-08T19:35:24"},"t":"event"}')
PRESSURE_EVENT = ('{"e":"changed","id":"3","r":"sensors",'
                  '"state":{"lastupdated":"2018-03-08T19:35:24","pressure":993},"t":"event"}')
SMOKE_DETECTOR_EVENT = ('{ "e": "changed", "id": "5", "r": "sensors", "state": { "fire": false, '
                        '"lastupdated": "2018-03-13T19:46:03", "lowbattery": false, "tampered": false }, '
                        '"t": "event" }')
FLOOD_DETECTOR_EVENT = ('{ "e": "changed", "id": "6", "r": "sensors", "state": { '
                        '"lastupdated": "2018-03-13T20:46:03", "lowbattery": false, "tampered": false, '
                        '"water": true }, "t": "event" }')
SWITCH_EVENT = ('{ "e": "changed", "id": "7", "r": "sensors", "state": { "buttonevent": 1000, '
                '"lastupdated": "2018-03-20T20:52:18" }, "t": "event" }  ')
LIGHT_EVENT = '{"e":"changed","id":"1","r":"lights","state":{"on":true},"t":"event"}'


class InMemorySensorLookup(BaseSensorLookup):
    """Sensor lookup over a fixed set of sensors."""

    def __init__(self, sensors: Iterable[Sensor]):
        self.sensors: Dict[int, Sensor] = {sensor.sensor_id: sensor for sensor in sensors}

    def lookup_sensor(self, sensor_id: int) -> Sensor:
        try:
            return self.sensors[sensor_id]
        except KeyError:
            raise SensorNotFoundError(sensor_id) from None


class ScriptedEventReader(BaseEventReader):
    """
    Event reader replaying a script of messages.

    Script items are JSON strings (parsed like a WebSocket message), RawEvent
    instances or exceptions to raise. An unrecoverable exception disconnects
    the reader. Once the script is exhausted, reads time out (return None).
    """

    def __init__(self, script: Iterable = (), connect_failures: int = 0, close_error: Optional[Exception] = None):
        self._script = deque(script)
        self._connect_failures = connect_failures
        self._close_error = close_error
        self._lock = threading.Lock()

        self.connected = False
        self.connect_calls = 0
        self.close_calls = 0

    def feed(self, *items) -> None:
        with self._lock:
            self._script.extend(items)

    def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_calls <= self._connect_failures:
            raise EventConnectionError("connection refused")
        self.connected = True

    def read_event(self) -> Optional[RawEvent]:
        if not self.connected:
            raise EventConnectionError("not connected")

        with self._lock:
            item = self._script.popleft() if self._script else None

        if item is None:
            time.sleep(0.01)
            return None
        if isinstance(item, EventReadError):
            if not item.recoverable:
                self.connected = False
            raise item
        if isinstance(item, Exception):
            self.connected = False
            raise item
        if isinstance(item, RawEvent):
            return item
        return RawEvent.parse(item)

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False
        if self._close_error is not None:
            raise self._close_error


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Poll the predicate until it holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def sensors():
    return [
        Sensor(sensor_id=1, sensor_type="ZHATemperature", name="Living Room Temperature",
               config=SensorConfig(battery=90)),
        Sensor(sensor_id=2, sensor_type="ZHAHumidity", name="Living Room Humidity"),
        Sensor(sensor_id=3, sensor_type="ZHAPressure", name="Living Room Pressure"),
        Sensor(sensor_id=5, sensor_type="ZHAFire", name="Smoke Detector"),
        Sensor(sensor_id=6, sensor_type="ZHAWater", name="Flood Detector"),
        Sensor(sensor_id=7, sensor_type="ZHASwitch", name="Switch"),
    ]


@pytest.fixture
def sensor_lookup(sensors):
    return InMemorySensorLookup(sensors)
