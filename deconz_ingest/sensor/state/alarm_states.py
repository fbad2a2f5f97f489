#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: alarm_states.py
# Author: Rajaram Lakshmanan
# Description: States of the binary alarm and occupancy sensors (fire, water,
# carbon monoxide, open/close, presence and vibration).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import field_validator

from deconz_ingest.sensor.state.base_sensor_state import SensorState, present_fields


class FireState(SensorState):
    """State of a smoke detector."""
    sensor_type: ClassVar[str] = "ZHAFire"

    fire: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(fire=self.fire)


class WaterState(SensorState):
    """State of a flood detector."""
    sensor_type: ClassVar[str] = "ZHAWater"

    water: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(water=self.water)


class CarbonMonoxideState(SensorState):
    """State of a carbon monoxide detector."""
    sensor_type: ClassVar[str] = "ZHACarbonMonoxide"

    carbonmonoxide: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(carbonmonoxide=self.carbonmonoxide)


class OpenCloseState(SensorState):
    """State of a door/window contact."""
    sensor_type: ClassVar[str] = "ZHAOpenClose"

    open: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(open=self.open)


class PresenceState(SensorState):
    """State of a Zigbee motion sensor."""
    sensor_type: ClassVar[str] = "ZHAPresence"

    presence: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(presence=self.presence)


class ClipPresenceState(SensorState):
    """State of a CLIP (software) presence sensor."""
    sensor_type: ClassVar[str] = "CLIPPresence"

    presence: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(presence=self.presence)


class VibrationState(SensorState):
    """State of a vibration sensor, including its orientation as an x/y/z vector."""
    sensor_type: ClassVar[str] = "ZHAVibration"

    vibration: Optional[bool] = None
    tiltangle: Optional[int] = None
    vibrationstrength: Optional[int] = None
    orientation: Optional[List[int]] = None

    @field_validator('orientation') # noqa
    @classmethod
    def validate_orientation(cls, v):
        if v is not None and len(v) != 3:
            raise ValueError(f"Orientation must have 3 components, got {len(v)}")
        return v

    def measurements(self) -> Dict[str, Any]:
        fields = present_fields(vibration=self.vibration,
                                tiltangle=self.tiltangle,
                                vibrationstrength=self.vibrationstrength)
        if self.orientation is not None:
            fields["orientation_x"] = self.orientation[0]
            fields["orientation_y"] = self.orientation[1]
            fields["orientation_z"] = self.orientation[2]
        return fields
