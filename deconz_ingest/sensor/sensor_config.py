#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor_config.py
# Author: Rajaram Lakshmanan
# Description: Sensor configuration as reported by the deCONZ REST API.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from typing import Optional

from pydantic import BaseModel

class SensorConfig(BaseModel):
    """
    Sensor configuration as retrieved from the API.

    Not all sensors populate all values; the thermostat values are only reported
    by ZHAThermostat sensors.
    """
    # Battery state in percent
    battery: Optional[int] = None

    # Thermostat set point and offset in 1/100 degree Celsius
    heatsetpoint: Optional[int] = None
    mode: Optional[str] = None
    offset: Optional[int] = None
    externalsensortemp: Optional[int] = None

    model_config = {
        "extra": "ignore",
        "frozen": True
    }
