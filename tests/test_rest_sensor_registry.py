#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: test_rest_sensor_registry.py
# Author: Rajaram Lakshmanan
# Description: Tests for the REST API backed sensor registry.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import httpx
import pytest

from deconz_ingest.client.rest.rest_sensor_registry import RestSensorRegistry
from deconz_ingest.config.models.deconz_config import DeconzConfig
from deconz_ingest.errors import SensorNotFoundError
from deconz_ingest.sensor.state.base_sensor_state import EmptyState
from deconz_ingest.sensor.state.environment_states import TemperatureState

API_KEY = "0A1B2C3D4E"

SENSORS = {
    "1": {
        "config": {"battery": 90, "on": True, "reachable": True},
        "lastseen": "2023-11-05T10:12Z",
        "name": "Living Room Temperature",
        "state": {"lastupdated": "2023-11-05T10:11:48", "temperature": 2062},
        "type": "ZHATemperature",
    },
    "2": {
        "config": {"on": True},
        "name": "Unsupported",
        "state": {"foo": "bar"},
        "type": "ZHAFoo",
    },
    "broken": {"name": "Not a sensor id", "type": "ZHATemperature"},
}


class FakeGateway:
    """Serves the deCONZ REST API from in-memory data and counts requests."""

    def __init__(self, sensors=None, gateway_config=None, status_code=200):
        self.sensors = dict(SENSORS) if sensors is None else sensors
        self.gateway_config = gateway_config if gateway_config is not None else {"websocketport": 443}
        self.status_code = status_code
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=[{"error": {"type": 1, "description": "unauthorized user"}}])
        if request.url.path == f"/api/{API_KEY}/sensors":
            return httpx.Response(200, json=self.sensors)
        if request.url.path == f"/api/{API_KEY}/config":
            return httpx.Response(200, json=self.gateway_config)
        return httpx.Response(404)


@pytest.fixture
def gateway():
    return FakeGateway()


def create_registry(gateway, **config):
    deconz_config = DeconzConfig(host="deconz.local", port=8080, **config)
    client = httpx.Client(base_url=deconz_config.base_url, transport=httpx.MockTransport(gateway.handler))
    return RestSensorRegistry(deconz_config, API_KEY, client=client)


def test_refresh(gateway):
    registry = create_registry(gateway)

    sensors = registry.refresh()

    assert set(sensors) == {1, 2}
    assert isinstance(sensors[1].state, TemperatureState)
    assert sensors[1].config.battery == 90
    assert isinstance(sensors[2].state, EmptyState)
    assert registry.sensors() == sensors


def test_lookup_loads_sensors_on_first_use(gateway):
    registry = create_registry(gateway)

    sensor = registry.lookup_sensor(1)

    assert sensor.name == "Living Room Temperature"
    assert gateway.requests == [f"/api/{API_KEY}/sensors"]


def test_lookup_uses_cache(gateway):
    registry = create_registry(gateway)
    registry.refresh()

    registry.lookup_sensor(1)
    registry.lookup_sensor(2)

    assert len(gateway.requests) == 1


def test_lookup_of_new_sensor_refreshes(gateway):
    registry = create_registry(gateway, refresh_interval=0)
    registry.refresh()
    gateway.sensors["3"] = {"name": "New Switch", "type": "ZHASwitch", "state": {"buttonevent": 1002}}

    sensor = registry.lookup_sensor(3)

    assert sensor.name == "New Switch"
    assert len(gateway.requests) == 2


def test_lookup_of_unknown_sensor_refresh_is_rate_limited(gateway):
    registry = create_registry(gateway, refresh_interval=3600)
    registry.refresh()

    with pytest.raises(SensorNotFoundError) as exc_info:
        registry.lookup_sensor(99)

    assert exc_info.value.sensor_id == 99
    assert len(gateway.requests) == 1


def test_lookup_picks_up_config_changes_of_cached_sensor(gateway):
    gateway.sensors["4"] = {
        "config": {"battery": 90, "heatsetpoint": 2200, "mode": "auto", "offset": 0, "on": True},
        "name": "Bedroom Thermostat",
        "state": {"temperature": 2150, "valve": 30},
        "type": "ZHAThermostat",
    }
    registry = create_registry(gateway, refresh_interval=0)
    assert registry.lookup_sensor(4).config.battery == 90

    gateway.sensors["4"] = dict(gateway.sensors["4"],
                                config={"battery": 40, "heatsetpoint": 1800, "mode": "auto", "offset": 0, "on": True})
    sensor = registry.lookup_sensor(4)

    assert sensor.config.battery == 40
    assert sensor.config.heatsetpoint == 1800
    assert len(gateway.requests) == 2


def test_lookup_of_cached_sensor_refresh_is_rate_limited(gateway):
    registry = create_registry(gateway, refresh_interval=3600)
    registry.refresh()
    gateway.sensors["1"] = dict(SENSORS["1"], config={"battery": 40})

    assert registry.lookup_sensor(1).config.battery == 90
    assert len(gateway.requests) == 1


def test_lookup_keeps_cache_when_gateway_fails(gateway):
    registry = create_registry(gateway, refresh_interval=0)
    registry.refresh()
    gateway.status_code = 503

    sensor = registry.lookup_sensor(1)

    assert sensor.name == "Living Room Temperature"
    assert len(gateway.requests) == 2


def test_lookup_when_gateway_unavailable():
    registry = create_registry(FakeGateway(status_code=503))

    with pytest.raises(SensorNotFoundError):
        registry.lookup_sensor(1)


def test_refresh_with_invalid_api_key():
    registry = create_registry(FakeGateway(status_code=403))

    with pytest.raises(httpx.HTTPStatusError):
        registry.refresh()


def test_refresh_with_error_list():
    registry = create_registry(FakeGateway(sensors=[{"error": {"type": 1, "description": "unauthorized user"}}]))

    with pytest.raises(httpx.HTTPStatusError):
        registry.refresh()


def test_websocket_url_from_gateway(gateway):
    registry = create_registry(gateway)

    assert registry.websocket_url() == "ws://deconz.local:443"
    assert gateway.requests == [f"/api/{API_KEY}/config"]


def test_configured_websocket_url(gateway):
    registry = create_registry(gateway, websocket_url="ws://10.0.0.2:8443")

    assert registry.websocket_url() == "ws://10.0.0.2:8443"
    assert gateway.requests == []


def test_websocket_url_without_port():
    registry = create_registry(FakeGateway(gateway_config={"name": "Phoscon-GW"}))

    with pytest.raises(ValueError):
        registry.websocket_url()
