#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: test_events.py
# Author: Rajaram Lakshmanan
# Description: Tests for parsing WebSocket messages and binding them to sensors.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import pytest

from conftest import LIGHT_EVENT, SMOKE_DETECTOR_EVENT, TEMPERATURE_EVENT
from deconz_ingest.errors import DecodeError, NoTimeseriesDataError, RecoverableEventError
from deconz_ingest.event.raw_event import RawEvent
from deconz_ingest.event.sensor_event import SensorEvent
from deconz_ingest.sensor.sensor import Sensor
from deconz_ingest.sensor.state.alarm_states import FireState
from deconz_ingest.sensor.state.base_sensor_state import EmptyState
from deconz_ingest.sensor.state.environment_states import TemperatureState


def test_parse_sensor_event():
    event = RawEvent.parse(TEMPERATURE_EVENT)

    assert event.message_type == "event"
    assert event.event == "changed"
    assert event.resource == "sensors"
    assert event.resource_id == 1
    assert event.raw_state == {"lastupdated": "2018-03-08T19:35:24", "temperature": 2062}
    assert event.is_sensor_event


def test_parse_event_with_whitespace():
    event = RawEvent.parse(SMOKE_DETECTOR_EVENT.encode())

    assert event.resource_id == 5
    assert event.raw_state["fire"] is False


def test_parse_non_sensor_event():
    event = RawEvent.parse(LIGHT_EVENT)

    assert event.resource == "lights"
    assert not event.is_sensor_event


def test_parse_event_without_state():
    event = RawEvent.parse('{"e":"changed","id":"1","r":"sensors","config":{"battery":80},"t":"event"}')

    assert event.raw_state is None


def test_parse_event_without_id():
    event = RawEvent.parse('{"e":"changed","r":"sensors","state":{"temperature":2062},"t":"event"}')

    assert event.resource_id is None


def test_non_numeric_id_is_kept_as_sent():
    event = RawEvent.parse('{"e":"changed","id":"abc","r":"groups","t":"event"}')

    assert event.raw_id == "abc"
    with pytest.raises(ValueError):
        _ = event.resource_id


@pytest.mark.parametrize("message", [
    "not json",
    '["e", "changed"]',
    '{"e":"changed","id":"1","r":"sensors","state":"on","t":"event"}',
])
def test_parse_invalid_event(message):
    with pytest.raises(RecoverableEventError) as exc_info:
        RawEvent.parse(message)

    assert exc_info.value.recoverable


def test_sensor_event_decodes_with_sensor_type():
    sensor = Sensor(sensor_id=1, sensor_type="ZHATemperature", name="Living Room")

    sensor_event = SensorEvent.from_raw_event(sensor, RawEvent.parse(TEMPERATURE_EVENT))

    assert isinstance(sensor_event.state, TemperatureState)
    assert sensor_event.state.temperature == 2062
    assert sensor_event.resource_id == 1
    assert sensor_event.resource == "sensors"
    assert sensor_event.received_at.tzinfo is not None


def test_sensor_event_type_mismatch():
    sensor = Sensor(sensor_id=1, sensor_type="ZHAFire", name="Wrongly typed")
    event = RawEvent.parse('{"e":"changed","id":"1","r":"sensors","state":{"fire":"yes"},"t":"event"}')

    with pytest.raises(DecodeError):
        SensorEvent.from_raw_event(sensor, event)


def test_sensor_event_timeseries():
    sensor = Sensor(sensor_id=5, sensor_type="ZHAFire", name="Smoke Detector")

    sensor_event = SensorEvent.from_raw_event(sensor, RawEvent.parse(SMOKE_DETECTOR_EVENT))
    tags, fields = sensor_event.timeseries()

    assert isinstance(sensor_event.state, FireState)
    assert tags["id"] == "5"
    assert fields["fire"] is False
    assert "age_secs" in fields


def test_sensor_event_with_empty_state_has_no_timeseries():
    sensor = Sensor(sensor_id=1, sensor_type="ZHATemperature", name="Living Room")
    sensor_event = SensorEvent(sensor=sensor, event=RawEvent.parse(TEMPERATURE_EVENT), state=EmptyState())

    with pytest.raises(NoTimeseriesDataError):
        sensor_event.timeseries()
