#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor.py
# Author: Rajaram Lakshmanan
# Description: deCONZ sensor model (metadata, configuration and the last known
# state of one physical device).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator

from deconz_ingest.errors import DecodeError
from deconz_ingest.sensor.sensor_config import SensorConfig
from deconz_ingest.sensor.sensor_state_decoder import decode_sensor_state
from deconz_ingest.sensor.state.base_sensor_state import EmptyState, SensorState, normalize_iso_timestamp

logger = logging.getLogger("Sensor")

# Format of the 'lastseen' attribute reported by the REST API
LAST_SEEN_FORMAT = "%Y-%m-%dT%H:%MZ"


class Sensor(BaseModel):
    """
    deCONZ sensor.

    Only the attributes required for event decoding and time series derivation
    are modelled. The id and type are assigned by the gateway and never change.
    """
    sensor_id: int
    sensor_type: str
    name: str = ""
    last_seen: Optional[datetime] = None
    config: SensorConfig = Field(default_factory=SensorConfig)
    state: Union[SensorState, EmptyState] = Field(default_factory=EmptyState)

    @field_validator('last_seen', mode='before') # noqa
    @classmethod
    def parse_last_seen(cls, v):
        if v is None or v == "":
            return None
        if isinstance(v, str):
            try:
                return datetime.strptime(v, LAST_SEEN_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError:
                # Newer firmware reports seconds as well
                parsed = datetime.fromisoformat(normalize_iso_timestamp(v))
                return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_api(cls, sensor_id: int, payload: Mapping[str, Any]) -> "Sensor":
        """
        Create a sensor from its REST API representation.

        A state that cannot be decoded does not fail the sensor; the sensor is
        created with an EmptyState instead.

        Args:
            sensor_id (int): The id of the sensor (the key in the sensors listing).
            payload (dict): The sensor object as returned by the API.

        Returns:
            Sensor: The sensor model.

        Raises:
            pydantic.ValidationError: If the metadata (type, name, lastseen, config) is invalid.
        """
        sensor_type = payload.get("type", "")
        config = payload.get("config", payload.get("Config")) or {}

        state: Union[SensorState, EmptyState] = EmptyState()
        if payload.get("state") is not None:
            try:
                state = decode_sensor_state(payload["state"], sensor_type)
            except DecodeError as e:
                logger.warning(f"Unable to decode state of sensor {sensor_id}: {e}")

        return cls(sensor_id=sensor_id,
                   sensor_type=sensor_type,
                   name=payload.get("name", ""),
                   last_seen=payload.get("lastseen"),
                   config=SensorConfig.model_validate(config),
                   state=state)

    model_config = {
        "frozen": True
    }
