#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: environment_states.py
# Author: Rajaram Lakshmanan
# Description: States of the environment sensors (temperature, humidity,
# pressure, light level, air quality and daylight).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from typing import Any, ClassVar, Dict, Optional

from deconz_ingest.sensor.state.base_sensor_state import SensorState, present_fields


class TemperatureState(SensorState):
    """State of a temperature sensor; temperature is reported in 1/100 degree Celsius."""
    sensor_type: ClassVar[str] = "ZHATemperature"

    temperature: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        temperature = self.temperature / 100 if self.temperature is not None else None
        return present_fields(temperature=temperature)


class HumidityState(SensorState):
    """State of a humidity sensor; humidity is reported in 1/100 percent."""
    sensor_type: ClassVar[str] = "ZHAHumidity"

    humidity: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        humidity = self.humidity / 100 if self.humidity is not None else None
        return present_fields(humidity=humidity)


class PressureState(SensorState):
    """State of a pressure sensor; pressure is reported in hPa."""
    sensor_type: ClassVar[str] = "ZHAPressure"

    pressure: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(pressure=self.pressure)


class LightLevelState(SensorState):
    """State of a light level sensor."""
    sensor_type: ClassVar[str] = "ZHALightLevel"

    lightlevel: Optional[int] = None
    lux: Optional[int] = None
    dark: Optional[bool] = None
    daylight: Optional[bool] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(lightlevel=self.lightlevel,
                              lux=self.lux,
                              dark=self.dark,
                              daylight=self.daylight)


class AirQualityState(SensorState):
    """State of an air quality sensor (VOC level as text and in ppb)."""
    sensor_type: ClassVar[str] = "ZHAAirQuality"

    airquality: Optional[str] = None
    airqualityppb: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(airquality=self.airquality, airqualityppb=self.airqualityppb)


class DaylightState(SensorState):
    """State of the gateway's virtual daylight sensor."""
    sensor_type: ClassVar[str] = "Daylight"

    daylight: Optional[bool] = None
    status: Optional[int] = None

    def measurements(self) -> Dict[str, Any]:
        return present_fields(daylight=self.daylight, status=self.status)
