#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: rest_sensor_registry.py
# Author: Rajaram Lakshmanan
# Description: Sensor registry backed by the deCONZ REST API, with an
# in-memory cache of the known sensors.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import threading
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from deconz_ingest.client.common.base_sensor_lookup import BaseSensorLookup
from deconz_ingest.config.models.deconz_config import DeconzConfig
from deconz_ingest.errors import SensorNotFoundError
from deconz_ingest.sensor.sensor import Sensor

logger = logging.getLogger("RestSensorRegistry")

class RestSensorRegistry(BaseSensorLookup):
    """
    Sensor registry backed by the deCONZ REST API.

    Sensors are cached in memory. A lookup refreshes the cache at most once per
    refresh interval, so that sensors paired after start-up and config changes
    of known sensors are picked up without a restart.
    """

    def __init__(self, config: DeconzConfig, api_key: str, client: Optional[httpx.Client] = None):
        """
        Initialize the REST sensor registry.

        Args:
            config (DeconzConfig): Configuration of the gateway.
            api_key (str): API key of the gateway.
            client (httpx.Client): HTTP client to use; created from the config if not provided.
        """
        self._config = config
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

        self._sensors: Dict[int, Sensor] = {}
        self._last_refresh: Optional[float] = None
        self._lock = threading.RLock()

    # === Public API Functions ===

    def lookup_sensor(self, sensor_id: int) -> Sensor:
        """
        Look up a sensor, refreshing the cache once the refresh interval has elapsed.

        A refresh is also attempted for a cached sensor, so that changes of its
        config (battery level, thermostat set point) are picked up. A failed
        refresh keeps the cached sensors.

        Raises:
            SensorNotFoundError: If the sensor is unknown, or the gateway cannot be queried.
        """
        with self._lock:
            if self._is_refresh_due():
                try:
                    self.refresh()
                except httpx.HTTPError as e:
                    logger.warning(f"Unable to refresh sensors while looking up sensor {sensor_id}: {e}")
                    # Retry no earlier than one refresh interval later
                    self._last_refresh = time.monotonic()

            sensor = self._sensors.get(sensor_id)
            if sensor is None:
                raise SensorNotFoundError(sensor_id)
            return sensor

    def sensors(self) -> Dict[int, Sensor]:
        """Return a copy of all cached sensors, keyed by id."""
        with self._lock:
            return dict(self._sensors)

    def refresh(self) -> Dict[int, Sensor]:
        """
        Reload all sensors from the gateway.

        Sensors whose metadata cannot be parsed are skipped; a sensor whose state
        cannot be decoded is kept with an empty state.

        Returns:
            dict: The refreshed sensors, keyed by id.

        Raises:
            httpx.HTTPError: If the request fails.
        """
        payload = self._get("sensors")

        sensors: Dict[int, Sensor] = {}
        for key, sensor_payload in payload.items():
            try:
                sensor_id = int(key)
                sensors[sensor_id] = Sensor.from_api(sensor_id, sensor_payload)
            except (ValueError, TypeError, AttributeError, ValidationError) as e:
                logger.warning(f"Skipping sensor {key}: {e}")

        with self._lock:
            self._sensors = sensors
            self._last_refresh = time.monotonic()

        logger.info(f"Loaded {len(sensors)} sensors from {self._config.base_url}")
        return dict(sensors)

    def websocket_url(self) -> str:
        """
        Return the URL of the event feed.

        The configured URL is used if present, otherwise the WebSocket port is
        read from the gateway configuration.

        Raises:
            httpx.HTTPError: If the request fails.
            ValueError: If the gateway does not report a WebSocket port.
        """
        if self._config.websocket_url:
            return self._config.websocket_url

        gateway_config = self._get("config")
        port = gateway_config.get("websocketport")
        if not isinstance(port, int):
            raise ValueError(f"Gateway did not report a valid websocket port: {port!r}")

        return f"ws://{self._config.host}:{port}"

    def close(self) -> None:
        """Close the HTTP client if it was created by the registry."""
        if self._owns_client:
            self._client.close()

    # === Local Functions ===

    def _is_refresh_due(self) -> bool:
        if self._last_refresh is None:
            return True
        return time.monotonic() - self._last_refresh >= self._config.refresh_interval

    def _get(self, resource: str) -> Dict[str, Any]:
        """Request a resource of the REST API and return the decoded JSON object."""
        response = self._client.get(f"/api/{self._api_key}/{resource}")
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise httpx.DecodingError(f"Invalid JSON for /{resource}: {e}", request=response.request) from e

        if not isinstance(payload, dict):
            # deCONZ reports errors (e.g. an unauthorized API key) as a list of error objects
            raise httpx.HTTPStatusError(f"Unexpected response for /{resource}: {payload}",
                                        request=response.request, response=response)
        return payload
