#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: power_states.py
# Author: Rajaram Lakshmanan
# Description: States of the power related sensors (battery, consumption and
# power metering).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from typing import Any, ClassVar, Dict, Optional

from deconz_ingest.sensor.state.base_sensor_state import SensorState, present_fields


class BatteryState(SensorState):
    """State of a battery sensor; battery is the charge level in percent."""
    sensor_type: ClassVar[str] = "ZHABattery"

    battery: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(battery=self.battery)


class ConsumptionState(SensorState):
    """State of an energy consumption meter."""
    sensor_type: ClassVar[str] = "ZHAConsumption"

    consumption: Optional[int] = None
    power: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(consumption=self.consumption, power=self.power)


class PowerState(SensorState):
    """State of a power meter (current in mA, power in W, voltage in V)."""
    sensor_type: ClassVar[str] = "ZHAPower"

    current: Optional[int] = None
    power: Optional[int] = None
    voltage: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(current=self.current, power=self.power, voltage=self.voltage)
