#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: raw_event.py
# Author: Rajaram Lakshmanan
# Description: Event model for a message received on the deCONZ WebSocket
# event feed, before the sensor state is decoded.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from deconz_ingest.errors import RecoverableEventError

# Resource name of the events handled by the ingest pipeline
SENSORS_RESOURCE = "sensors"

class RawEvent(BaseModel):
    """
    Event model for a deCONZ WebSocket message.

    The state is kept as an untyped mapping; it can only be decoded once the
    type of the sensor is known. The id is kept as sent; resource_id
    converts it to the numeric sensor id.
    """
    message_type: str = Field(default="event", alias="t")
    event: str = Field(default="", alias="e")  # e.g., "changed", "added", "deleted"
    resource: str = Field(default="", alias="r")  # e.g., "sensors", "lights", "groups"
    raw_id: Optional[Union[str, int]] = Field(default=None, alias="id")
    raw_state: Optional[Dict[str, Any]] = Field(default=None, alias="state")

    @property
    def is_sensor_event(self) -> bool:
        """Return the flag to indicate whether the event concerns a sensor."""
        return self.resource == SENSORS_RESOURCE

    @property
    def resource_id(self) -> Optional[int]:
        """
        Return the numeric id of the resource, or None if the event carries no id.

        Raises:
            ValueError: If the id is not numeric.
        """
        if self.raw_id is None:
            return None
        return int(self.raw_id)

    @classmethod
    def parse(cls, data: Union[bytes, str]) -> "RawEvent":
        """
        Parse a WebSocket message.

        Args:
            data: The JSON message as received from the gateway.

        Returns:
            RawEvent: The parsed event.

        Raises:
            RecoverableEventError: If the message is not a valid event. Only this
            message is lost; the connection can be used for the next one.
        """
        try:
            payload = json.loads(data)
        except ValueError as e:
            raise RecoverableEventError(f"Event is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise RecoverableEventError(f"Event must be a JSON object, got {type(payload).__name__}")

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise RecoverableEventError(f"Invalid event: {e}") from e

    model_config = {
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True
    }
