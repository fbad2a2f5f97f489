#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor_event.py
# Author: Rajaram Lakshmanan
# Description: Event model binding a sensor to the event (and decoded state)
# that was received for it. Published on the output queue of the pipeline.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union
import uuid

from pydantic import BaseModel, Field

from deconz_ingest.event.raw_event import RawEvent
from deconz_ingest.sensor.sensor import Sensor
from deconz_ingest.sensor.sensor_state_decoder import decode_sensor_state
from deconz_ingest.sensor.state.base_sensor_state import EmptyState, SensorState
from deconz_ingest.sensor.timeseries import derive_timeseries

class SensorEvent(BaseModel):
    """Event model for a decoded state change of a known sensor."""
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sensor: Sensor
    event: RawEvent
    state: Union[SensorState, EmptyState]
    version: str = "1.0"

    @property
    def resource_id(self) -> int:
        """Return the id of the sensor the event was received for."""
        return self.sensor.sensor_id

    @property
    def resource(self) -> str:
        """Return the resource name of the event."""
        return self.event.resource

    @classmethod
    def from_raw_event(cls, sensor: Sensor, event: RawEvent) -> "SensorEvent":
        """
        Decode the state of the raw event with the type of the sensor.

        Raises:
            DecodeError: If the state cannot be decoded for the sensor type.
        """
        state = decode_sensor_state(event.raw_state or {}, sensor.sensor_type)
        return cls(sensor=sensor, event=event, state=state)

    def timeseries(self, now: Optional[datetime] = None) -> Tuple[Dict[str, str], Dict[str, Any]]:
        """
        Return tags and fields for the decoded state of this event.

        Raises:
            DerivationError: If no time series data can be derived.
        """
        return derive_timeseries(self.state,
                                 self.sensor.config,
                                 self.sensor.sensor_id,
                                 self.sensor.name,
                                 self.sensor.sensor_type,
                                 now)

    model_config = {
        "frozen": True
    }
