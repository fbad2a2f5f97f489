#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: control_states.py
# Author: Rajaram Lakshmanan
# Description: States of the control devices (switches and thermostats).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from typing import Any, ClassVar, Dict, Optional

from deconz_ingest.sensor.state.base_sensor_state import SensorState, present_fields


class SwitchState(SensorState):
    """State of a switch; buttonevent is the vendor specific button event code."""
    sensor_type: ClassVar[str] = "ZHASwitch"

    buttonevent: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(buttonevent=self.buttonevent)


class ThermostatState(SensorState):
    """
    State of a radiator thermostat.

    Temperature is reported in 1/100 degree Celsius, valve is the valve position
    in percent. The set point, mode and offset are part of the sensor config,
    not of the state.
    """
    sensor_type: ClassVar[str] = "ZHAThermostat"

    temperature: Optional[int] = None
    valve: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        temperature = self.temperature / 100 if self.temperature is not None else None
        return present_fields(temperature=temperature, valve=self.valve)
